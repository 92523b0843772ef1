"""Resume preview resolver: classification, conversion and stale-result handling.

A resolver instance backs one preview view. ``resolve()`` classifies a file
reference synchronously; ``load()`` runs the fetch-and-convert task for
office documents. State is a single frozen value from ``models`` and is only
replaced when a result belongs to the reference that is still current.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Callable, Optional

import httpx

from .conversion import convert_document, create_docx_converter, sanitize_html
from .errors import ClassificationMismatch, ConversionError, FetchError
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
    Unresolved,
    Unsupported,
)
from .sources import create_client, fetch_document
from .utils import (
    DEFAULT_TIMEOUT_S,
    UPLOAD_PREFIX,
    build_download_link,
    classify_reference,
    find_error_marker,
    normalize_path,
    resolve_url,
)

log = logging.getLogger(__name__)

ConvertFn = Callable[[bytes, str], RawHtml]


class ResumePreviewResolver:
    """Decides how a stored resume is displayed and drives its conversion."""

    def __init__(
        self,
        base_url: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        convert: Optional[ConvertFn] = None,
        upload_prefix: str = UPLOAD_PREFIX,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        on_close: Optional[Callable[[], Any]] = None,
    ):
        self.base_url = base_url
        self.upload_prefix = upload_prefix
        self.timeout_s = timeout_s
        self._client = client
        self._owns_client = client is None
        self._convert = convert
        self._docling_converter: Any = None
        self._on_close = on_close

        self._reference: Optional[FileReference] = None
        self._url: Optional[str] = None
        self._classification: Optional[Classification] = None
        self._state: PreviewState = Unresolved()
        self._cache: dict[str, PreviewState] = {}
        self._inflight: dict[str, asyncio.Task] = {}
        self._generation = 0

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> PreviewState:
        return self._state

    @property
    def reference(self) -> Optional[FileReference]:
        return self._reference

    @property
    def resolved_url(self) -> Optional[str]:
        return self._url

    @property
    def classification(self) -> Optional[Classification]:
        return self._classification

    @property
    def download_link(self) -> Optional[DownloadLink]:
        if self._reference is None or self._url is None:
            return None
        return build_download_link(self._reference, self._url)

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def resolve(
        self,
        path: Optional[str],
        display_name: Optional[str] = None,
        display_title: Optional[str] = None,
    ) -> PreviewState:
        """Point the resolver at *path* and classify it.

        An empty path leaves the resolver idle. Re-resolving the current URL
        only refreshes display metadata and keeps the established state.
        """
        if not path:
            self._reference = None
            self._url = None
            self._classification = None
            self._state = Unresolved()
            return self._state

        reference = FileReference(path, display_name, display_title)
        url = resolve_url(self.base_url, path, self.upload_prefix)

        if url == self._url:
            self._reference = reference
            return self._state

        self._reference = reference
        self._url = url
        self._classification = classify_reference(reference)

        log.debug(
            "resolve: path=%s normalized=%s url=%s file=%s ext=%s class=%s",
            path,
            normalize_path(path, self.upload_prefix),
            url,
            reference.file_name,
            reference.file_extension or "-",
            self._classification.value,
        )

        if self._classification is Classification.NATIVE:
            self._state = NativeRenderable()
        elif self._classification is Classification.CONVERTIBLE:
            self._state = self._cache.get(url, Converting())
        else:
            self._state = Unsupported()
        return self._state

    # ------------------------------------------------------------------
    # Native viewer feedback
    # ------------------------------------------------------------------

    def verify_native(self, body_text: Optional[str]) -> PreviewState:
        """Check what the native viewer loaded for the current reference.

        ``None`` means the content could not be inspected; the optimistic
        classification then stands.
        """
        if not isinstance(self._state, NativeRenderable):
            return self._state
        if body_text is None:
            log.debug("verify_native: content not inspectable, assuming PDF loaded")
            return self._state

        try:
            self._check_native_content(body_text)
        except ClassificationMismatch as exc:
            log.warning(
                "verify_native: %s (marker=%r), treating as non-PDF",
                exc.message,
                exc.marker,
            )
            self._state = Unsupported(detection_failed=True)
        return self._state

    def native_load_failed(self) -> PreviewState:
        """The native viewer reported a load error."""
        if isinstance(self._state, NativeRenderable):
            log.warning("PDF failed to load, treating as non-PDF: %s", self._url)
            self._state = Unsupported(detection_failed=True)
        return self._state

    def _check_native_content(self, body_text: str) -> None:
        marker = find_error_marker(body_text)
        if marker is not None:
            raise ClassificationMismatch(
                "Viewer content looks like an error page",
                self._url,
                marker=marker,
            )

    # ------------------------------------------------------------------
    # Conversion
    # ------------------------------------------------------------------

    def start(self) -> Optional[asyncio.Task]:
        """Schedule conversion for the current reference without waiting.

        Returns the in-flight task, or ``None`` when nothing needs converting.
        Must be called from a running event loop.
        """
        if not isinstance(self._state, Converting) or self._url is None:
            return None
        url = self._url
        task = self._inflight.get(url)
        if task is None:
            task = asyncio.ensure_future(
                self._run_conversion(self._reference, url, self._generation)
            )
            self._inflight[url] = task
        return task

    async def load(self) -> PreviewState:
        """Run (or join) the conversion for the current reference."""
        task = self.start()
        if task is not None:
            try:
                await asyncio.shield(task)
            except asyncio.CancelledError:
                # Only swallow cancellation issued by close().
                if not task.cancelled():
                    raise
        return self._state

    async def _run_conversion(
        self,
        reference: FileReference,
        url: str,
        generation: int,
    ) -> PreviewState:
        t0 = time.time()
        outcome: PreviewState
        try:
            data = await fetch_document(self.get_client(), url)
            raw = await asyncio.to_thread(self._convert_bytes, data, reference.file_name)
            outcome = ConvertedHtml(sanitize_html(raw))
            log.info(
                "Converted %s in %.2fs", reference.file_name, time.time() - t0
            )
        except FetchError as exc:
            log.warning("Error loading DOCX %s: %s", url, exc.message)
            outcome = ConversionFailed(exc.message, error_kind="fetch")
        except ConversionError as exc:
            log.warning("Error converting DOCX %s: %s", url, exc.message)
            outcome = ConversionFailed(exc.message, error_kind="conversion")
        finally:
            if self._inflight.get(url) is asyncio.current_task():
                del self._inflight[url]

        if generation != self._generation:
            log.debug("Dropping result for %s from a closed preview", url)
            return outcome

        self._cache[url] = outcome
        if url != self._url:
            log.info("Discarding stale conversion result for %s", url)
            return outcome

        self._state = outcome
        return outcome

    def _convert_bytes(self, data: bytes, file_name: str) -> RawHtml:
        if self._convert is not None:
            try:
                raw = self._convert(data, file_name)
            except ConversionError:
                raise
            except Exception as exc:
                raise ConversionError(str(exc) or type(exc).__name__) from exc
        else:
            if self._docling_converter is None:
                try:
                    self._docling_converter = create_docx_converter()
                except Exception as exc:
                    raise ConversionError(f"Converter unavailable: {exc}") from exc
            raw = convert_document(self._docling_converter, data, file_name)

        if not isinstance(raw, RawHtml):
            raise ConversionError(
                f"Converter returned {type(raw).__name__}, expected RawHtml"
            )
        return raw

    def get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = create_client(self.timeout_s)
            self._owns_client = True
        return self._client

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Dismiss the preview and cancel any conversion still in flight."""
        for task in self._inflight.values():
            task.cancel()
        self._generation += 1
        self._reference = None
        self._url = None
        self._classification = None
        self._state = Unresolved()
        self._cache = {}
        self._inflight = {}
        if self._on_close is not None:
            self._on_close()

    async def aclose(self) -> None:
        """Release the HTTP client if this resolver created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "ResumePreviewResolver":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
