"""Header/body decomposition and header-field normalization.

Headers are read the RFC 5322 way closely enough for mbox exports:
folded continuation lines are joined, keys are case-insensitive, and
malformed lines are tolerated rather than rejected.
"""

from __future__ import annotations

import base64
import binascii
import email.utils
import re
from datetime import UTC, datetime

from .encodings import decode_quoted_printable
from .errors import MessageParseError

_ENCODED_WORD = re.compile(r"=\?([^?]+)\?([BbQq])\?([^?]*)\?=")
_ANGLE_ADDRESS = re.compile(r"<([^>]+)>")


def split_message(raw: str) -> tuple[str, str]:
    """Split *raw* at its first blank line into ``(header_text, body)``.

    The body is trimmed.  Raises :class:`MessageParseError` if there is
    no blank line at all.
    """
    index = raw.find("\n\n")
    width = 2
    if index == -1:
        index = raw.find("\r\n\r\n")
        width = 4
    if index == -1:
        raise MessageParseError("no blank line between headers and body")
    return raw[:index], raw[index + width :].strip()


def parse_headers(header_text: str) -> dict[str, str]:
    """Parse a header block into a dict keyed by lower-cased field name."""
    headers: dict[str, str] = {}
    key = ""
    value = ""

    for line in re.split(r"\r?\n", header_text):
        # mbox envelope line, not a header
        if line.startswith("From ") and not key:
            continue

        if line[:1].isspace() and key:
            value = f"{value} {line.strip()}"
            continue

        if key and value:
            headers[key.lower()] = value

        colon = line.find(":")
        if colon > 0:
            key = line[:colon].strip()
            value = line[colon + 1 :].strip()
        elif line.strip():
            key = ""
            value = ""

    if key and value:
        headers[key.lower()] = value
    return headers


def header_param(value: str, name: str) -> str | None:
    """Return parameter *name* of a structured header such as Content-Type."""
    match = re.search(rf"""{re.escape(name)}=["']?([^"';\s]+)["']?""", value, re.IGNORECASE)
    return match.group(1) if match else None


def media_type(value: str | None, default: str = "") -> str:
    """``"Text/HTML; charset=utf-8"`` -> ``"text/html"``."""
    if not value:
        return default
    return value.split(";", 1)[0].strip().lower()


def clean_address(value: str) -> str:
    """Extract ``addr`` from ``Name <addr>``; otherwise return the trimmed value."""
    match = _ANGLE_ADDRESS.search(value)
    if match:
        return match.group(1)
    return value.strip()


def decode_encoded_words(value: str) -> str:
    """Decode RFC 2047 encoded words (``=?charset?B|Q?text?=``) in a header value.

    A word that fails to decode is left exactly as it appeared.
    """

    def _decode(match: re.Match[str]) -> str:
        charset, encoding, text = match.group(1), match.group(2).upper(), match.group(3)
        try:
            if encoding == "B":
                return base64.b64decode(text, validate=True).decode(charset, errors="replace")
            result = decode_quoted_printable(text.replace("_", " "), charset)
            return result.text if result.ok else match.group(0)
        except (binascii.Error, LookupError, ValueError):
            return match.group(0)

    # Whitespace between adjacent encoded words is not significant.
    value = re.sub(r"(\?=)\s+(?==\?)", r"\1", value)
    return _ENCODED_WORD.sub(_decode, value)


def normalize_date(value: str, *, now: datetime | None = None) -> str:
    """Convert a Date header to ISO-8601 UTC with millisecond precision.

    Accepts RFC 2822 dates and ISO-8601 strings; anything else, including
    dates that fall outside the representable range once shifted to UTC,
    yields the current time.
    """
    value = value.strip()
    if value:
        try:
            return _to_utc_iso(email.utils.parsedate_to_datetime(value))
        except (TypeError, ValueError, IndexError, OverflowError):
            pass
        try:
            return _to_utc_iso(datetime.fromisoformat(value))
        except (ValueError, OverflowError):
            pass
    return _to_utc_iso(now or datetime.now(UTC))


def _to_utc_iso(parsed: datetime) -> str:
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")
