"""Transfer-encoding and HTML decoders.

Each decoder returns a :class:`DecodeResult` instead of raising, so the
caller decides explicitly what to do on failure (normally: keep the
original text).
"""

from __future__ import annotations

import base64
import binascii
import re
from typing import NamedTuple

DEFAULT_CHARSET = "utf-8"

_WHITESPACE = re.compile(r"\s+")
_SOFT_BREAK = re.compile(r"=\r?\n")
_HEX_ESCAPE = re.compile(rb"=([0-9A-Fa-f]{2})")
_SCRIPT = re.compile(r"<script[^>]*>[\s\S]*?</script>", re.IGNORECASE)
_STYLE = re.compile(r"<style[^>]*>[\s\S]*?</style>", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_ENTITIES = {
    "&nbsp;": " ",
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
}
_ENTITY = re.compile("|".join(re.escape(e) for e in _ENTITIES))


class DecodeResult(NamedTuple):
    ok: bool
    text: str

    def or_original(self, original: str) -> str:
        """The decoded text, or *original* if decoding failed."""
        return self.text if self.ok else original


def _failed(text: str) -> DecodeResult:
    return DecodeResult(False, text)


def decode_base64(text: str, charset: str = DEFAULT_CHARSET) -> DecodeResult:
    """Decode a base64 body, ignoring embedded whitespace and line breaks."""
    try:
        raw = base64.b64decode(_WHITESPACE.sub("", text), validate=True)
        return DecodeResult(True, raw.decode(charset, errors="replace"))
    except (binascii.Error, LookupError, ValueError):
        return _failed(text)


def decode_quoted_printable(text: str, charset: str = DEFAULT_CHARSET) -> DecodeResult:
    """Remove soft line breaks and replace ``=XX`` escapes with the byte they name.

    Escapes are resolved on bytes and then decoded with *charset*, so a
    multi-byte character written as several escapes comes out whole.
    Literal non-ASCII characters are kept as their UTF-8 bytes, which is
    how the archive reader decoded them.
    """
    try:
        joined = _SOFT_BREAK.sub("", text).encode(DEFAULT_CHARSET)
        raw = _HEX_ESCAPE.sub(lambda m: bytes([int(m.group(1), 16)]), joined)
        return DecodeResult(True, raw.decode(charset, errors="replace"))
    except (LookupError, UnicodeError, ValueError):
        return _failed(text)


def strip_html(html: str) -> DecodeResult:
    """Reduce an HTML document to whitespace-collapsed text."""
    try:
        text = _SCRIPT.sub("", html)
        text = _STYLE.sub("", text)
        text = _TAG.sub(" ", text)
        text = _ENTITY.sub(lambda m: _ENTITIES[m.group(0)], text)
        return DecodeResult(True, _WHITESPACE.sub(" ", text).strip())
    except TypeError:
        return _failed(html)
