from __future__ import annotations

import httpx
import pytest

from resume_preview import RawHtml
from resume_preview.cli import main, parse_args
from resume_preview.rendering import DETECTION_FAILED_MESSAGE
from resume_preview.utils import PreviewSettings

BASE = "https://api.x.com"


def _patch_client(monkeypatch, handler):
    def _create_client(timeout_s):
        return httpx.AsyncClient(transport=httpx.MockTransport(handler))

    monkeypatch.setattr("resume_preview.resolver.create_client", _create_client)


def test_parse_args_uses_env_defaults(monkeypatch):
    monkeypatch.setenv("RESUME_PREVIEW_BASE_URL", "https://env.example.com")
    monkeypatch.setenv("RESUME_PREVIEW_TIMEOUT", "3.5")
    args = parse_args(["resumes/a.pdf"])
    assert args.base_url == "https://env.example.com"
    assert args.timeout == 3.5
    assert args.upload_prefix == "uploads/"


def test_parse_args_requires_base_url_without_env(monkeypatch):
    monkeypatch.delenv("RESUME_PREVIEW_BASE_URL", raising=False)
    with pytest.raises(SystemExit):
        parse_args(["resumes/a.pdf"])


def test_settings_ignore_invalid_timeout(monkeypatch):
    monkeypatch.setenv("RESUME_PREVIEW_TIMEOUT", "soon")
    assert PreviewSettings.from_env().timeout_s == 15.0


def test_main_writes_pdf_iframe(tmp_path, monkeypatch):
    requests = []

    def handler(request):
        requests.append(str(request.url))
        return httpx.Response(200, content=b"%PDF-1.4")

    _patch_client(monkeypatch, handler)
    out = tmp_path / "preview.html"

    main(["resumes/john.pdf", "--base-url", BASE, "--name", "John", "--output", str(out)])

    html = out.read_text(encoding="utf-8")
    assert '<iframe src="https://api.x.com/uploads/resumes/john.pdf"' in html
    assert requests == []


def test_main_verify_native_detects_error_page(tmp_path, monkeypatch):
    def handler(request):
        return httpx.Response(
            404,
            text="<html><body><h1>404 Not Found</h1></body></html>",
            headers={"content-type": "text/html"},
        )

    _patch_client(monkeypatch, handler)
    out = tmp_path / "preview.html"

    main(["resumes/john.pdf", "--base-url", BASE, "--verify-native", "--output", str(out)])

    html = out.read_text(encoding="utf-8")
    assert DETECTION_FAILED_MESSAGE in html
    assert "<iframe" not in html


def test_main_converts_docx_with_docling(tmp_path, monkeypatch):
    calls = {"create_converter": 0, "convert": 0}

    def handler(request):
        return httpx.Response(200, content=b"PK-docx")

    def _create_converter():
        calls["create_converter"] += 1
        return object()

    def _convert_document(converter, data, file_name):
        calls["convert"] += 1
        assert data == b"PK-docx"
        assert file_name == "jane.docx"
        return RawHtml("<h1>Jane Doe</h1><script>x()</script>")

    _patch_client(monkeypatch, handler)
    monkeypatch.setattr("resume_preview.resolver.create_docx_converter", _create_converter)
    monkeypatch.setattr("resume_preview.resolver.convert_document", _convert_document)
    out = tmp_path / "preview.html"

    main(["uploads/jane.docx", "--base-url", BASE, "--output", str(out)])

    html = out.read_text(encoding="utf-8")
    assert calls == {"create_converter": 1, "convert": 1}
    assert "<h1>Jane Doe</h1>" in html
    assert "<script>" not in html


def test_main_fetch_failure_prints_fallback(monkeypatch, capsys):
    def handler(request):
        return httpx.Response(404, text="missing")

    _patch_client(monkeypatch, handler)

    main(["cv/jane.docx", "--base-url", BASE])

    html = capsys.readouterr().out
    assert "Error loading DOCX file: Failed to fetch DOCX file (HTTP 404)" in html
    assert 'href="https://api.x.com/uploads/cv/jane.docx"' in html
