"""Raw message text -> :class:`ParsedEmail`."""

from __future__ import annotations

import hashlib

from .decoder import decode_body
from .headers import clean_address, decode_encoded_words, normalize_date, parse_headers, split_message
from .models import ParsedEmail


def content_hash(subject: str, sender: str, text: str) -> str:
    """Fingerprint used to spot the same content twice within one run."""
    norm = f"{subject}|{sender}|{text}"
    return hashlib.sha256(norm.encode("utf-8", errors="replace")).hexdigest()


def parse_raw_message(raw: str, ordinal: int) -> ParsedEmail:
    """Decompose and decode one raw mbox message.

    *ordinal* is the message's 1-based position in the archive; it keeps
    generated Message-IDs unique and stable across runs.  Raises
    :class:`~mbox_ingest.errors.MessageParseError` if the message has no
    header/body separator.
    """
    header_text, body = split_message(raw)
    headers = parse_headers(header_text)

    sender = clean_address(headers.get("from", "Unknown"))
    recipient = clean_address(headers.get("to", "Unknown"))
    subject = decode_encoded_words(headers.get("subject", "(No Subject)"))
    date = normalize_date(headers.get("date", ""))
    text = decode_body(body, headers)
    digest = content_hash(subject, sender, text)

    message_id = headers.get("message-id", "").replace("<", "").replace(">", "").strip()
    if not message_id:
        message_id = f"mbox-{digest[:16]}-{ordinal}"

    return ParsedEmail(
        message_id=message_id,
        from_address=sender,
        to_address=recipient,
        subject=subject,
        date=date,
        text_content=text,
        content_hash=digest,
    )
