"""Body decoding: transfer encodings, multipart selection, HTML to text.

Decoding is best effort.  Whenever a step fails the text it was given is
kept, so a badly encoded message still yields something for the filter
policy to judge.
"""

from __future__ import annotations

import re
from typing import NamedTuple

import structlog

from .encodings import DEFAULT_CHARSET, decode_base64, decode_quoted_printable, strip_html
from .errors import MessageParseError
from .headers import header_param, media_type, parse_headers, split_message

logger = structlog.get_logger()

MAX_MULTIPART_DEPTH = 16


class _Part(NamedTuple):
    headers: dict[str, str]
    body: str
    depth: int


def charset_of(headers: dict[str, str]) -> str:
    return header_param(headers.get("content-type", ""), "charset") or DEFAULT_CHARSET


def decode_transfer_encoding(body: str, headers: dict[str, str]) -> str:
    """Undo ``Content-Transfer-Encoding``; unknown encodings pass through."""
    encoding = headers.get("content-transfer-encoding", "").strip().lower()
    charset = charset_of(headers)
    if "base64" in encoding:
        return decode_base64(body, charset).or_original(body)
    if "quoted-printable" in encoding:
        return decode_quoted_printable(body, charset).or_original(body)
    return body


def split_multipart(body: str, boundary: str) -> list[str]:
    """Return the parts between ``--boundary`` delimiter lines.

    The preamble before the first delimiter and the epilogue after the
    closing ``--boundary--`` are not parts.
    """
    delimiter = re.compile(rf"^--{re.escape(boundary)}(--)?[ \t]*\r?$", re.MULTILINE)
    parts: list[str] = []
    start: int | None = None
    for match in delimiter.finditer(body):
        if start is not None:
            parts.append(body[start : match.start()])
        if match.group(1):
            break
        start = match.end()
    else:
        # Unterminated: keep whatever follows the last delimiter.
        if start is not None:
            parts.append(body[start:])
    return [p[1:] if p.startswith("\n") else p for p in parts]


def _parse_part(text: str) -> tuple[dict[str, str], str]:
    if text.startswith(("\n", "\r\n")):
        # No headers at all: the part is all body.
        return {}, text.strip()
    header_text, body = split_message(text)
    return parse_headers(header_text), body


def decode_multipart(body: str, headers: dict[str, str]) -> str:
    """Pick the best text alternative out of a multipart body.

    The first ``text/plain`` part wins.  Otherwise the first ``text/html``
    part is reduced to text.  With neither, the raw body is returned.
    Nested multiparts are walked depth-first in document order.
    """
    boundary = header_param(headers.get("content-type", ""), "boundary")
    if not boundary:
        return body

    stack = [_Part(headers, body, 0)]
    html: str | None = None

    while stack:
        part = stack.pop()
        ctype = media_type(part.headers.get("content-type"), "text/plain")

        if ctype.startswith("multipart/"):
            inner = header_param(part.headers.get("content-type", ""), "boundary")
            if not inner or part.depth >= MAX_MULTIPART_DEPTH:
                continue
            children: list[_Part] = []
            for text in split_multipart(part.body, inner):
                try:
                    child_headers, child_body = _parse_part(text)
                except MessageParseError:
                    continue
                children.append(_Part(child_headers, child_body, part.depth + 1))
            stack.extend(reversed(children))
            continue

        if "attachment" in part.headers.get("content-disposition", "").lower():
            continue

        if ctype == "text/plain":
            return decode_transfer_encoding(part.body, part.headers).strip()
        if ctype == "text/html" and html is None:
            decoded = decode_transfer_encoding(part.body, part.headers)
            html = strip_html(decoded).or_original(decoded)

    if html is not None:
        return html
    logger.debug("mbox_multipart_without_text", boundary=boundary)
    return body


def decode_body(body: str, headers: dict[str, str]) -> str:
    """Turn a message body into plain text according to its headers."""
    ctype = media_type(headers.get("content-type"))
    if ctype.startswith("multipart/"):
        return decode_multipart(body, headers)

    decoded = decode_transfer_encoding(body, headers)
    if ctype == "text/html":
        return strip_html(decoded).or_original(decoded)
    return decoded
