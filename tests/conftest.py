"""Shared test fixtures for the mbox ingestion test suite."""

from __future__ import annotations

from email.mime.base import MIMEBase
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email import encoders
from pathlib import Path

import logging

import pytest

from mbox_ingest.config import MboxParserSettings
from mbox_ingest.models import MboxParseOptions

ENVELOPE = "From sender@example.com Mon Jun  2 12:00:00 2025"


# ------------------------------------------------------------------
# Sample message builders
# ------------------------------------------------------------------


def _build_plain_email(
    *,
    subject: str = "Test Subject",
    from_addr: str = "Sender Name <sender@example.com>",
    to_addr: str = "recipient@example.com",
    body: str = "Hello, this is a plain text message long enough to be kept by the filter.",
    message_id: str | None = "<test-001@example.com>",
    date: str = "Mon, 02 Jun 2025 12:00:00 +0000",
) -> bytes:
    """Build a simple plain-text email as raw bytes."""
    msg = MIMEText(body, "plain")
    msg["Subject"] = subject
    msg["From"] = from_addr
    msg["To"] = to_addr
    if message_id:
        msg["Message-ID"] = message_id
    msg["Date"] = date
    return msg.as_bytes()


def _build_html_email(
    *,
    body_html: str = "<html><body><p>Hello &amp; welcome to the HTML message body.</p></body></html>",
) -> bytes:
    msg = MIMEText(body_html, "html")
    msg["Subject"] = "HTML Email"
    msg["From"] = "sender@example.com"
    msg["To"] = "recipient@example.com"
    msg["Message-ID"] = "<html-001@example.com>"
    msg["Date"] = "Mon, 02 Jun 2025 12:00:00 +0000"
    return msg.as_bytes()


def _build_multipart_email(
    *,
    body_text: str = "Plain body of the multipart message.",
    body_html: str = "<p>HTML body of the multipart message.</p>",
    attachments: list[tuple[str, str, bytes]] | None = None,
    message_id: str = "<multi-001@example.com>",
) -> bytes:
    """Build a multipart email with text, HTML, and optional attachments."""
    msg = MIMEMultipart("mixed")
    msg["Subject"] = "Multipart Email"
    msg["From"] = "sender@example.com"
    msg["To"] = "recipient@example.com"
    msg["Message-ID"] = message_id
    msg["Date"] = "Mon, 02 Jun 2025 12:00:00 +0000"

    alt = MIMEMultipart("alternative")
    alt.attach(MIMEText(body_text, "plain"))
    alt.attach(MIMEText(body_html, "html"))
    msg.attach(alt)

    for filename, content_type, payload in attachments or []:
        maintype, subtype = content_type.split("/", 1)
        part = MIMEBase(maintype, subtype)
        part.set_payload(payload)
        encoders.encode_base64(part)
        part.add_header("Content-Disposition", "attachment", filename=filename)
        msg.attach(part)

    return msg.as_bytes()


def _build_mbox(*messages: bytes | str, envelope: str = ENVELOPE) -> bytes:
    """Concatenate raw messages into an mbox archive, one envelope line each."""
    out = bytearray()
    for raw in messages:
        if isinstance(raw, str):
            raw = raw.encode("utf-8")
        out += envelope.encode("ascii") + b"\n"
        if not raw.endswith(b"\n"):
            raw += b"\n"
        out += raw + b"\n"
    return bytes(out)


def _numbered_emails(count: int) -> list[bytes]:
    return [
        _build_plain_email(
            subject=f"Message {i}",
            body=f"Body number {i}: a sentence that is comfortably past fifty characters.",
            message_id=f"<n-{i}@example.com>",
        )
        for i in range(count)
    ]


# ------------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _restore_root_logging():
    """Undo handler changes made by setup_logging() so they don't leak between tests."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def settings() -> MboxParserSettings:
    return MboxParserSettings(progress_interval_seconds=0.0)


@pytest.fixture
def small_chunk_settings() -> MboxParserSettings:
    """Tiny windows so every message and boundary straddles several reads."""
    return MboxParserSettings(chunk_size_bytes=7, progress_interval_seconds=0.0)


@pytest.fixture
def options() -> MboxParseOptions:
    return MboxParseOptions(max_emails=10, min_content_length=10)


@pytest.fixture
def write_mbox(tmp_path: Path):
    """Factory writing archive bytes to a temp file and returning its path."""

    def _write(data: bytes, name: str = "archive.mbox") -> Path:
        path = tmp_path / name
        path.write_bytes(data)
        return path

    return _write


@pytest.fixture
def plain_eml_bytes() -> bytes:
    return _build_plain_email()


@pytest.fixture
def html_eml_bytes() -> bytes:
    return _build_html_email()


@pytest.fixture
def multipart_eml_bytes() -> bytes:
    return _build_multipart_email(
        attachments=[
            ("report.pdf", "application/pdf", b"%PDF-1.4 fake pdf content"),
            ("data.csv", "text/csv", b"col1,col2\na,b\n"),
        ],
    )
