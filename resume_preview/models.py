"""Shared data models for the resume previewer."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Optional, Union


class Classification(str, enum.Enum):
    """Rendering strategy chosen from a file extension."""

    NATIVE = "native"
    CONVERTIBLE = "convertible"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True)
class FileReference:
    """A stored resume file plus the metadata shown next to it."""

    path: str
    display_name: Optional[str] = None
    display_title: Optional[str] = None

    @property
    def file_name(self) -> str:
        return self.path.split("/")[-1] or "resume"

    @property
    def file_extension(self) -> str:
        name = self.file_name
        if "." not in name:
            return ""
        return name.rsplit(".", 1)[-1].lower()


# ---------------------------------------------------------------------------
# HTML payloads
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawHtml:
    """Converter output that has not been sanitized; never rendered."""

    value: str


@dataclass(frozen=True)
class SanitizedHtml:
    """HTML that went through the allow-list cleaner and may be injected."""

    value: str


# ---------------------------------------------------------------------------
# Preview states
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Unresolved:
    pass


@dataclass(frozen=True)
class NativeRenderable:
    pass


@dataclass(frozen=True)
class Converting:
    pass


@dataclass(frozen=True)
class ConvertedHtml:
    content: SanitizedHtml

    def __post_init__(self) -> None:
        if not isinstance(self.content, SanitizedHtml):
            raise TypeError("ConvertedHtml only accepts SanitizedHtml content")


@dataclass(frozen=True)
class ConversionFailed:
    reason: str
    error_kind: str = "conversion"


@dataclass(frozen=True)
class Unsupported:
    detection_failed: bool = False


PreviewState = Union[
    Unresolved,
    NativeRenderable,
    Converting,
    ConvertedHtml,
    ConversionFailed,
    Unsupported,
]


@dataclass(frozen=True)
class DownloadLink:
    """Forced-download anchor for the resolved file."""

    href: str
    file_name: str
    extension: str = ""

    @property
    def label(self) -> str:
        return f"Download Resume ({self.extension.upper() if self.extension else 'FILE'})"
