"""Data models for mbox ingestion: options in, parsed emails and a summary out."""

from __future__ import annotations

from collections.abc import Callable
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

ProgressCallback = Callable[[int, int, str], None]


class SkipReason(str, Enum):
    """Why a decoded message was left out of the result."""

    EMPTY_CONTENT = "empty_content"
    CONTENT_TOO_SHORT = "content_too_short"
    DUPLICATE_CONTENT = "duplicate_content"
    NOT_FROM_USER = "not_from_user"


class ParsedEmail(BaseModel):
    """A single decoded message, normalized for the voice-training ingestion service."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    message_id: str = Field(description="Message-ID without angle brackets, or a generated fallback")
    from_address: str = Field(alias="from", description="Sender address")
    to_address: str = Field(alias="to", description="Recipient address")
    subject: str = Field(description="Subject with RFC 2047 encoded words decoded")
    date: str = Field(description="ISO-8601 timestamp (UTC)")
    text_content: str = Field(description="Decoded, HTML-stripped plain text body")
    content_hash: str = Field(description="Fingerprint of subject|from|text_content for this run")


class MboxParseOptions(BaseModel):
    """Caller-supplied limits and filters for one parse run."""

    model_config = ConfigDict(frozen=True)

    max_emails: int = Field(default=100, ge=1, description="Emission cap")
    min_content_length: int = Field(
        default=50,
        ge=0,
        description="Shortest accepted decoded body, in characters",
    )
    only_from_email: str | None = Field(
        default=None,
        description="Keep only messages whose sender contains this address (case-insensitive)",
    )
    on_progress: ProgressCallback | None = Field(
        default=None,
        exclude=True,
        description="Called with (percent, emails_found, status) during the scan",
    )


class MboxParseResult(BaseModel):
    """Outcome of a completed parse run."""

    model_config = ConfigDict(frozen=True)

    emails: list[ParsedEmail] = Field(default_factory=list)
    total_emails_found: int = Field(
        default=0,
        description="Messages scanned; stops counting once the emission cap is reached",
    )
    emails_parsed: int = Field(default=0, description="Messages accepted into emails")
    emails_filtered: int = Field(default=0, description="Messages rejected by the filter policy")
    parse_errors: int = Field(default=0, description="Messages that could not be decomposed")
    skipped_reasons: dict[str, int] = Field(
        default_factory=dict,
        description="Rejection count per SkipReason value",
    )
