"""Entry point for the mbox ingestion package.

Usage::

    python -m mbox_ingest archive.mbox [--max-emails N] [--min-length N]
                                       [--only-from ADDRESS] [--console]

Prints the parse result as JSON on stdout; logs go to stderr.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

import structlog

from .config import MboxParserSettings
from .errors import ChunkReadError
from .logging import setup_logging
from .models import MboxParseOptions
from .pipeline import parse_mbox_file
from .sizing import estimate_upload_size, format_bytes

logger = structlog.get_logger()


def _build_parser(settings: MboxParserSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="python -m mbox_ingest")
    parser.add_argument("path", help="mbox archive to parse")
    parser.add_argument("--max-emails", type=int, default=settings.default_max_emails)
    parser.add_argument("--min-length", type=int, default=settings.default_min_content_length)
    parser.add_argument("--only-from", default=None, help="keep only mail sent from this address")
    parser.add_argument(
        "--console",
        action="store_true",
        help="human-readable logs instead of JSON lines",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    settings = MboxParserSettings()
    args = _build_parser(settings).parse_args(argv)
    setup_logging(json=settings.log_json and not args.console, level=settings.log_level)

    def _on_progress(percent: int, emails_found: int, status: str) -> None:
        logger.info("mbox_progress", percent=percent, emails_found=emails_found, status=status)

    try:
        options = MboxParseOptions(
            max_emails=args.max_emails,
            min_content_length=args.min_length,
            only_from_email=args.only_from,
            on_progress=_on_progress,
        )
    except ValueError as exc:
        print(f"invalid options: {exc}", file=sys.stderr)
        return 1

    try:
        result = asyncio.run(parse_mbox_file(args.path, options, settings=settings))
    except ChunkReadError as exc:
        logger.error("mbox_parse_aborted", path=args.path, error=str(exc))
        return 1

    upload_size = estimate_upload_size(result.emails)
    summary = {
        **result.model_dump(mode="json", by_alias=True),
        "estimated_upload_size": upload_size,
        "estimated_upload_size_human": format_bytes(upload_size),
    }
    json.dump(summary, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
