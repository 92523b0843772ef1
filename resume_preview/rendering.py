"""Render the preview modal markup for a resolver snapshot."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, Template, select_autoescape
from markupsafe import Markup

from .models import (
    ConversionFailed,
    ConvertedHtml,
    Converting,
    NativeRenderable,
    PreviewState,
    SanitizedHtml,
    Unsupported,
)
from .resolver import ResumePreviewResolver

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"
MODAL_TEMPLATE = "preview_modal.html.jinja"

UNSUPPORTED_MESSAGE = "This file format cannot be previewed in the browser."
DETECTION_FAILED_MESSAGE = (
    "Unable to preview this file. It may not be a PDF or the file may be corrupted."
)

_env: Optional[Environment] = None


def _get_template() -> Template:
    global _env
    if _env is None:
        _env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "jinja"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
    return _env.get_template(MODAL_TEMPLATE)


def body_kind(state: PreviewState) -> str:
    """Name the single body panel shown for *state*."""
    if isinstance(state, NativeRenderable):
        return "native"
    if isinstance(state, Converting):
        return "loading"
    if isinstance(state, ConvertedHtml):
        return "converted"
    if isinstance(state, ConversionFailed):
        return "error"
    if isinstance(state, Unsupported):
        return "unsupported"
    return "empty"


def safe_html(content: SanitizedHtml) -> Markup:
    """Mark sanitized converter output as safe for the template."""
    if not isinstance(content, SanitizedHtml):
        raise TypeError("only SanitizedHtml can be rendered")
    return Markup(content.value)


def render_preview(resolver: ResumePreviewResolver) -> str:
    """Return the modal HTML, or an empty string when nothing is open."""
    reference = resolver.reference
    link = resolver.download_link
    if reference is None or link is None:
        return ""

    state = resolver.state
    kind = body_kind(state)
    context = {
        "reference": reference,
        "link": link,
        "url": resolver.resolved_url,
        "kind": kind,
        "extension_label": (reference.file_extension or "").upper() or "Unknown format",
        "content": safe_html(state.content) if kind == "converted" else None,
        "reason": state.reason if kind == "error" else None,
        "message": (
            DETECTION_FAILED_MESSAGE
            if isinstance(state, Unsupported) and state.detection_failed
            else UNSUPPORTED_MESSAGE
        ),
    }
    return _get_template().render(**context)
