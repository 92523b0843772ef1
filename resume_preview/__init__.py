"""Resume preview: classify stored resume files and render them for review.

Public API -- all symbols that tests and external code import live here.
Internally the code is split across focused submodules; this file
re-exports the stable public surface so ``from resume_preview import X`` works.
"""

from .conversion import convert_document, create_docx_converter, sanitize_html
from .errors import ClassificationMismatch, ConversionError, FetchError, PreviewError
from .models import (
    Classification,
    ConversionFailed,
    ConvertedHtml,
    Converting,
    DownloadLink,
    FileReference,
    NativeRenderable,
    PreviewState,
    RawHtml,
    SanitizedHtml,
    Unresolved,
    Unsupported,
)
from .rendering import render_preview
from .resolver import ResumePreviewResolver
from .sources import create_client, fetch_document, inspect_native_content
from .utils import (
    ERROR_PAGE_MARKERS,
    UPLOAD_PREFIX,
    PreviewSettings,
    build_download_link,
    classify,
    find_error_marker,
    normalize_path,
    resolve_url,
)

__all__ = [
    # Models
    "FileReference",
    "Classification",
    "PreviewState",
    "Unresolved",
    "NativeRenderable",
    "Converting",
    "ConvertedHtml",
    "ConversionFailed",
    "Unsupported",
    "RawHtml",
    "SanitizedHtml",
    "DownloadLink",
    # Errors
    "PreviewError",
    "FetchError",
    "ConversionError",
    "ClassificationMismatch",
    # Utils
    "UPLOAD_PREFIX",
    "ERROR_PAGE_MARKERS",
    "PreviewSettings",
    "normalize_path",
    "resolve_url",
    "classify",
    "find_error_marker",
    "build_download_link",
    # Sources
    "create_client",
    "fetch_document",
    "inspect_native_content",
    # Conversion
    "create_docx_converter",
    "convert_document",
    "sanitize_html",
    # Resolver
    "ResumePreviewResolver",
    # Rendering
    "render_preview",
]
