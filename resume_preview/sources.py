"""HTTP access to stored resume files."""

from __future__ import annotations

import logging
from typing import Optional

import httpx

from .errors import FetchError
from .utils import DEFAULT_TIMEOUT_S

log = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


def create_client(timeout_s: float = DEFAULT_TIMEOUT_S) -> httpx.AsyncClient:
    """Build the async client used for document fetches."""
    return httpx.AsyncClient(timeout=timeout_s, follow_redirects=True)


async def fetch_document(client: httpx.AsyncClient, url: str) -> bytes:
    """Download the raw bytes behind *url*.

    Raises:
        FetchError: on transport failure or any non-success status.
    """
    log.debug("fetch_document: GET %s", url)
    try:
        response = await client.get(url)
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchError(f"Failed to fetch DOCX file: {exc}", url) from exc

    if not response.is_success:
        raise FetchError(
            f"Failed to fetch DOCX file (HTTP {response.status_code})",
            url,
            status_code=response.status_code,
        )

    log.debug("fetch_document: %s bytes from %s", len(response.content), url)
    return response.content


async def inspect_native_content(client: httpx.AsyncClient, url: str) -> Optional[str]:
    """Return the text a native viewer would show for *url*, if inspectable.

    A real PDF stream is opaque to the caller, so ``None`` is returned for it
    as soon as the content type or the leading bytes give it away; the rest
    of the stream is never read. Anything else (an HTML error page, a
    plain-text 404) comes back as text.

    Raises:
        FetchError: when the server cannot be reached at all.
    """
    try:
        async with client.stream("GET", url) as response:
            content_type = response.headers.get("content-type", "")
            if "application/pdf" in content_type:
                return None

            body = b""
            sniffed = False
            async for chunk in response.aiter_bytes():
                body += chunk
                if not sniffed and len(body) >= len(PDF_MAGIC):
                    if body.startswith(PDF_MAGIC):
                        return None
                    sniffed = True
    except (httpx.HTTPError, httpx.InvalidURL) as exc:
        raise FetchError(f"Failed to load document: {exc}", url) from exc

    text = body.decode(response.encoding or "utf-8", errors="replace")
    if not response.is_success and not text.strip():
        text = f"{response.status_code} {response.reason_phrase}"
    return text
