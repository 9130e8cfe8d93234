"""Parser configuration loaded from environment variables.

Uses pydantic-settings so every tunable can be overridden via ``MBOX_*``
env vars without touching the calling code.
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings

MIB = 1024 * 1024


class MboxParserSettings(BaseSettings):
    """Resource limits and pacing for a single mbox parse run."""

    model_config = {"env_prefix": "MBOX_"}

    chunk_size_bytes: int = Field(
        default=50 * MIB,
        gt=0,
        description="Size of each sequential read window over the archive",
    )
    max_carry_bytes: int = Field(
        default=200 * MIB,
        gt=0,
        description="Carry-over buffer ceiling; a boundary-less buffer above it is dropped",
    )
    progress_interval_seconds: float = Field(
        default=0.1,
        ge=0.0,
        description="Minimum wall-clock gap between progress callbacks",
    )
    progress_cap_percent: int = Field(
        default=70,
        ge=0,
        le=100,
        description="Upper bound of the scan phase; the rest belongs to the upload phase",
    )
    yield_seconds: float = Field(
        default=0.0,
        ge=0.0,
        description="Cooperative pause between chunks so the event loop stays responsive",
    )
    default_max_emails: int = Field(
        default=100,
        ge=1,
        description="Emission cap used when the caller does not pass one",
    )
    default_min_content_length: int = Field(
        default=50,
        ge=0,
        description="Minimum decoded body length used when the caller does not pass one",
    )
    log_level: str = Field(default="INFO", description="Root log level for the CLI")
    log_json: bool = Field(default=True, description="Render CLI logs as JSON lines")
