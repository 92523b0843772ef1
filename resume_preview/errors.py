"""Error taxonomy for preview resolution.

Every error here is recoverable: the resolver catches it and degrades to a
fallback panel with a download link.
"""

from typing import Optional


class PreviewError(Exception):
    """
    Base class for failures while resolving a preview.

    Attributes:
        message: Error description
        url: Resolved URL the failure relates to
    """

    def __init__(self, message: str, url: Optional[str] = None):
        self.message = message
        self.url = url
        super().__init__(message)


class FetchError(PreviewError):
    """
    Raised when the raw document cannot be downloaded.

    Attributes:
        status_code: HTTP status of the response, None for transport failures
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.status_code = status_code
        super().__init__(message, url)


class ConversionError(PreviewError):
    """Raised when office-document bytes cannot be turned into HTML."""


class ClassificationMismatch(PreviewError):
    """
    Raised when a file classified as natively renderable turns out to be an
    error page.

    Attributes:
        marker: The error-page marker found in the viewer content
    """

    def __init__(self, message: str, url: Optional[str] = None, marker: str = ""):
        self.marker = marker
        super().__init__(message, url)
