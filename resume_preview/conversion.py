"""Docling office-document converter and HTML sanitization."""

from __future__ import annotations

import logging
import re
import time
from io import BytesIO
from typing import Any

import bleach

from .errors import ConversionError
from .models import RawHtml, SanitizedHtml

log = logging.getLogger(__name__)


def create_docx_converter() -> Any:
    """Build a Docling ``DocumentConverter`` restricted to Word documents."""
    t0 = time.time()
    log.info("create_docx_converter: importing docling modules ...")

    from docling.datamodel.base_models import InputFormat
    from docling.document_converter import DocumentConverter, WordFormatOption

    converter = DocumentConverter(
        allowed_formats=[InputFormat.DOCX],
        format_options={InputFormat.DOCX: WordFormatOption()},
    )
    log.info("Docling DOCX converter initialized in %.2fs", time.time() - t0)
    return converter


def convert_document(converter: Any, data: bytes, file_name: str) -> RawHtml:
    """Convert office-document bytes into unsanitized HTML.

    Raises:
        ConversionError: when Docling rejects or fails on the payload.
    """
    log.info("convert_document: START - %s (%s bytes)", file_name, len(data))
    t0 = time.time()
    try:
        from docling.datamodel.base_models import DocumentStream

        result = converter.convert(
            source=DocumentStream(name=file_name, stream=BytesIO(data))
        )
        html = result.document.export_to_html()
    except Exception as exc:
        log.warning("convert_document: ERROR - %s: %s", file_name, exc)
        raise ConversionError(str(exc) or type(exc).__name__) from exc

    log.info(
        "convert_document: DONE - %s (%s chars) in %.2fs",
        file_name,
        len(html),
        time.time() - t0,
    )
    return RawHtml(html)


# ---------------------------------------------------------------------------
# Sanitization
# ---------------------------------------------------------------------------

ALLOWED_TAGS = set(bleach.sanitizer.ALLOWED_TAGS) | {
    "p", "br", "div", "span", "hr", "pre", "sub", "sup", "u", "s",
    "h1", "h2", "h3", "h4", "h5", "h6",
    "table", "thead", "tbody", "tfoot", "tr", "th", "td", "caption",
    "img", "figure", "figcaption", "dl", "dt", "dd",
}
ALLOWED_ATTRS = {
    **bleach.sanitizer.ALLOWED_ATTRIBUTES,
    "a": ["href", "title"],
    "img": ["src", "alt", "title", "width", "height"],
    "td": ["colspan", "rowspan"],
    "th": ["colspan", "rowspan", "scope"],
    "ol": ["start"],
    "div": ["class"],
    "span": ["class"],
    "p": ["class"],
    "table": ["class"],
}
ALLOWED_PROTOCOLS = {"http", "https", "mailto", "data"}

# Elements whose text content is meaningless once the tag is stripped.
_DROP_WITH_CONTENT = re.compile(
    r"<(script|style|head|title|template|noscript)\b[^>]*>.*?</\1\s*>",
    re.IGNORECASE | re.DOTALL,
)


def sanitize_html(raw: RawHtml) -> SanitizedHtml:
    """Clean converter output down to an allow-list of document markup."""
    text = _DROP_WITH_CONTENT.sub("", raw.value)
    cleaned = bleach.clean(
        text,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRS,
        protocols=ALLOWED_PROTOCOLS,
        strip=True,
        strip_comments=True,
    )
    return SanitizedHtml(cleaned.strip())
