"""CLI entrypoint for previewing a stored resume file.

Usage:
    resume-preview resumes/john.pdf --base-url https://api.example.com
    resume-preview uploads/jane.docx --name "Jane Doe" --title "Data Engineer"
    resume-preview resumes/john.pdf --verify-native --output preview.html
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from logging.handlers import RotatingFileHandler
import sys
import time
from pathlib import Path

from .errors import FetchError
from .models import NativeRenderable
from .utils import PreviewSettings

log = logging.getLogger(__name__)


def _setup_logging(
    *,
    verbose: bool,
    detailed_logging: bool,
    log_file: Path | None,
) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    root_level = logging.DEBUG if verbose else logging.INFO
    root_logger.setLevel(root_level)

    console_fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    detailed_fmt = (
        "%(asctime)s | %(levelname)-8s | %(name)s | "
        "%(filename)s:%(lineno)d | %(message)s"
    )
    formatter = logging.Formatter(
        detailed_fmt if detailed_logging else console_fmt,
        "%Y-%m-%d %H:%M:%S",
    )

    # Preview HTML goes to stdout; diagnostics stay on stderr.
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(root_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    resolved_log_file = log_file
    if resolved_log_file is None and detailed_logging:
        resolved_log_file = Path("resume_preview.log")

    if resolved_log_file is not None:
        resolved_log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            resolved_log_file,
            maxBytes=5 * 1024 * 1024,
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(detailed_fmt, "%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(file_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("docling").setLevel(logging.WARNING)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    settings = PreviewSettings.from_env()

    parser = argparse.ArgumentParser(description="Preview a stored resume file")
    parser.add_argument("path", help="Stored file path, e.g. resumes/john.pdf")
    parser.add_argument(
        "--base-url",
        default=settings.base_url,
        required=not settings.base_url,
        help="API base URL (default: $RESUME_PREVIEW_BASE_URL)",
    )
    parser.add_argument(
        "--upload-prefix",
        default=settings.upload_prefix,
        help="Storage prefix prepended to relative paths (default: uploads/)",
    )
    parser.add_argument("--name", default=None, help="Candidate name shown in the header")
    parser.add_argument("--title", default=None, help="Job title shown in the header")
    parser.add_argument(
        "--output",
        type=Path,
        default=None,
        help="Write the preview HTML here instead of stdout",
    )
    parser.add_argument(
        "--verify-native",
        action="store_true",
        help="Fetch PDFs once and fall back if the server returned an error page",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=settings.timeout_s,
        help="HTTP timeout in seconds (default: $RESUME_PREVIEW_TIMEOUT or 15)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--detailed-logging",
        action="store_true",
        help="Enable detailed logging (file/line, rotating log file)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional log file path (default: resume_preview.log in detailed mode)",
    )
    return parser.parse_args(argv)


async def build_preview(args: argparse.Namespace) -> str:
    """Resolve, load and render one reference. Never raises on preview failures."""
    from .rendering import render_preview
    from .resolver import ResumePreviewResolver
    from .sources import inspect_native_content

    async with ResumePreviewResolver(
        args.base_url,
        upload_prefix=args.upload_prefix,
        timeout_s=args.timeout,
    ) as resolver:
        state = resolver.resolve(args.path, args.name, args.title)
        if resolver.classification is None:
            log.warning("Empty path; nothing to preview")
            return ""
        log.info(
            "Resolved %s -> %s (%s)",
            args.path,
            resolver.resolved_url,
            resolver.classification.value,
        )

        if isinstance(state, NativeRenderable) and args.verify_native:
            try:
                text = await inspect_native_content(
                    resolver.get_client(), resolver.resolved_url
                )
            except FetchError as exc:
                log.warning("Native inspection failed: %s", exc.message)
                resolver.native_load_failed()
            else:
                resolver.verify_native(text)

        await resolver.load()
        log.info("Preview state: %s", type(resolver.state).__name__)
        return render_preview(resolver)


def main(argv: list[str] | None = None) -> None:
    """Render the preview for one stored file."""
    args = parse_args(argv)
    _setup_logging(
        verbose=args.verbose,
        detailed_logging=args.detailed_logging,
        log_file=args.log_file,
    )

    t0 = time.perf_counter()
    html = asyncio.run(build_preview(args))

    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(html, encoding="utf-8")
        log.info("Preview written to %s", args.output)
    else:
        sys.stdout.write(html)
    log.info("Done in %.2fs", time.perf_counter() - t0)
