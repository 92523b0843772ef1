"""Shared fixtures for the resume preview test suite.

HTTP is served by ``httpx.MockTransport``; the Docling converter is replaced
by plain functions so no document model is loaded.
"""

from __future__ import annotations

import logging
import sys

import httpx
import pytest

from resume_preview import RawHtml

# ---------------------------------------------------------------------------
# Configure verbose logging for test debugging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
    force=True,
)

BASE_URL = "https://api.x.com"


def paragraph_converter(data: bytes, file_name: str) -> RawHtml:
    """Stand-in for Docling: wraps the payload in a paragraph."""
    return RawHtml(f"<p>{data.decode('utf-8')}</p>")


def failing_converter(data: bytes, file_name: str) -> RawHtml:
    raise ValueError("File is not a zip file")


class RecordingHandler:
    """MockTransport handler that serves fixed responses and counts requests."""

    def __init__(self, routes: dict[str, httpx.Response] | None = None):
        self.routes = routes or {}
        self.requests: list[str] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        if url in self.routes:
            return self.routes[url]
        return httpx.Response(404, text="404 Not Found")


@pytest.fixture
def base_url() -> str:
    return BASE_URL


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


@pytest.fixture
def make_client():
    """Return a factory building an AsyncClient bound to a mock handler."""

    def _make(handler) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    return _make


@pytest.fixture
def recording_handler():
    """Return the handler class so tests can pass their own routes."""
    return RecordingHandler


@pytest.fixture
def paragraph_convert():
    return paragraph_converter


@pytest.fixture
def failing_convert():
    return failing_converter
