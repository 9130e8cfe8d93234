"""Rough payload sizing for the upload that follows a parse."""

from __future__ import annotations

from collections.abc import Iterable

from .models import ParsedEmail

# Per-email allowance for ids, addresses, date and JSON framing.
METADATA_OVERHEAD = 200


def estimate_upload_size(emails: Iterable[ParsedEmail]) -> int:
    return sum(len(e.text_content) + len(e.subject) + METADATA_OVERHEAD for e in emails)


def format_bytes(size: int) -> str:
    """``512`` -> ``"512 B"``, ``2048`` -> ``"2.0 KB"``, ``3 * 1024**2`` -> ``"3.0 MB"``."""
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"
