"""Cross-cutting helpers: constants, settings, path and URL utilities."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .models import Classification, DownloadLink, FileReference

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

UPLOAD_PREFIX = "uploads/"
DEFAULT_TIMEOUT_S = 15.0

NATIVE_EXTENSIONS = frozenset({"pdf"})
CONVERTIBLE_EXTENSIONS = frozenset({"docx", "doc"})

# Substrings that mark a server error page served in place of the document.
ERROR_PAGE_MARKERS = ("404", "Not Found", "Error")


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


@dataclass
class PreviewSettings:
    """Runtime configuration for the command-line previewer."""

    base_url: str = ""
    upload_prefix: str = UPLOAD_PREFIX
    timeout_s: float = DEFAULT_TIMEOUT_S

    @classmethod
    def from_env(cls) -> "PreviewSettings":
        """Build settings from ``RESUME_PREVIEW_*`` environment variables."""
        timeout_raw = os.getenv("RESUME_PREVIEW_TIMEOUT")
        try:
            timeout_s = float(timeout_raw) if timeout_raw else DEFAULT_TIMEOUT_S
        except ValueError:
            timeout_s = DEFAULT_TIMEOUT_S
        return cls(
            base_url=os.getenv("RESUME_PREVIEW_BASE_URL", ""),
            upload_prefix=os.getenv("RESUME_PREVIEW_UPLOAD_PREFIX", UPLOAD_PREFIX),
            timeout_s=timeout_s,
        )


# ---------------------------------------------------------------------------
# Path helpers
# ---------------------------------------------------------------------------


def normalize_path(path: str, prefix: str = UPLOAD_PREFIX) -> str:
    """Prepend the storage *prefix* unless *path* already starts with it."""
    if path.startswith(prefix):
        return path
    return f"{prefix}{path}"


def resolve_url(base_url: str, path: str, prefix: str = UPLOAD_PREFIX) -> str:
    """Join *base_url* and the normalized *path* into a fetchable address."""
    return f"{base_url.rstrip('/')}/{normalize_path(path, prefix)}"


def classify(extension: str) -> Classification:
    """Pick the rendering strategy for a lower-cased file extension."""
    ext = extension.lower()
    if ext in NATIVE_EXTENSIONS:
        return Classification.NATIVE
    if ext in CONVERTIBLE_EXTENSIONS:
        return Classification.CONVERTIBLE
    return Classification.UNSUPPORTED


def classify_reference(reference: FileReference) -> Classification:
    return classify(reference.file_extension)


def find_error_marker(text: Optional[str]) -> Optional[str]:
    """Return the first error-page marker found in *text*, if any."""
    if not text:
        return None
    for marker in ERROR_PAGE_MARKERS:
        if marker in text:
            return marker
    return None


def build_download_link(reference: FileReference, url: str) -> DownloadLink:
    return DownloadLink(
        href=url,
        file_name=reference.file_name,
        extension=reference.file_extension,
    )
