"""Orchestrator: read → frame → parse → filter, with an emission cap and progress.

The run is a single cooperative flow.  Control returns to the event loop
between chunks; there is no other suspension point and no cancellation
beyond the emission cap.  A read failure propagates and no partial result
is returned.
"""

from __future__ import annotations

import asyncio
import time
from contextlib import aclosing
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import BinaryIO

import structlog

from .config import MboxParserSettings
from .errors import ChunkReadError, MessageParseError
from .filters import FilterPolicy
from .framer import MessageFramer
from .message import parse_raw_message
from .models import MboxParseOptions, MboxParseResult, ParsedEmail, ProgressCallback
from .reader import ChunkReader

logger = structlog.get_logger()


class ParsePhase(str, Enum):
    READING = "reading"
    TAIL_FLUSH = "tail_flush"
    DONE = "done"


@dataclass
class ParseState:
    """Mutable counters for one run; turned into an immutable result at the end."""

    phase: ParsePhase = ParsePhase.READING
    bytes_read: int = 0
    total_emails_found: int = 0
    emails_filtered: int = 0
    parse_errors: int = 0
    skipped_reasons: dict[str, int] = field(default_factory=dict)
    emails: list[ParsedEmail] = field(default_factory=list)

    def to_result(self) -> MboxParseResult:
        return MboxParseResult(
            emails=list(self.emails),
            total_emails_found=self.total_emails_found,
            emails_parsed=len(self.emails),
            emails_filtered=self.emails_filtered,
            parse_errors=self.parse_errors,
            skipped_reasons=dict(self.skipped_reasons),
        )


class ProgressThrottle:
    """Forward progress at most once per *interval* seconds, never going backwards.

    A ``force=True`` report is delivered regardless of the interval; the run
    uses it once, for the final ``cap`` report, so that report may follow the
    previous one by less than *interval*.
    """

    def __init__(self, callback: ProgressCallback | None, *, interval: float, cap: int) -> None:
        self._callback = callback
        self._interval = interval
        self._cap = cap
        self._last_emit: float | None = None
        self._last_percent = 0

    def percent_for(self, bytes_read: int, size: int) -> int:
        if size <= 0:
            return self._cap
        return min(self._cap, round(self._cap * bytes_read / size))

    def report(self, percent: int, emails_found: int, status: str, *, force: bool = False) -> None:
        if self._callback is None:
            return
        now = time.monotonic()
        if not force and self._last_emit is not None and now - self._last_emit < self._interval:
            return
        self._last_emit = now
        self._last_percent = max(self._last_percent, min(percent, self._cap))
        self._callback(self._last_percent, emails_found, status)


class MboxIngestPipeline:
    """Parse one mbox archive into at most ``options.max_emails`` accepted emails.

    Instances hold no state between runs; call :meth:`run` once per archive.
    """

    def __init__(
        self,
        options: MboxParseOptions | None = None,
        settings: MboxParserSettings | None = None,
    ) -> None:
        self.settings = settings or MboxParserSettings()
        self.options = options or MboxParseOptions(
            max_emails=self.settings.default_max_emails,
            min_content_length=self.settings.default_min_content_length,
        )

    async def run(self, handle: BinaryIO, *, size: int | None = None) -> MboxParseResult:
        reader = ChunkReader(handle, size=size, chunk_size=self.settings.chunk_size_bytes)
        framer = MessageFramer(max_carry=self.settings.max_carry_bytes)
        policy = FilterPolicy(self.options)
        progress = ProgressThrottle(
            self.options.on_progress,
            interval=self.settings.progress_interval_seconds,
            cap=self.settings.progress_cap_percent,
        )
        state = ParseState()
        log = logger.bind(size=reader.size, max_emails=self.options.max_emails)
        log.info("mbox_parse_started", chunk_size=reader.chunk_size)

        progress.report(0, 0, "Parsing emails...")
        async with aclosing(reader.chunks()) as chunks:
            async for chunk in chunks:
                self._process(framer.feed(chunk), state, policy)
                state.bytes_read = reader.bytes_read
                progress.report(
                    progress.percent_for(state.bytes_read, reader.size),
                    len(state.emails),
                    f"Found {len(state.emails)} emails...",
                )
                if self._cap_reached(state):
                    log.info("mbox_parse_cap_reached", bytes_read=state.bytes_read)
                    break
                await asyncio.sleep(self.settings.yield_seconds)

        if not self._cap_reached(state):
            state.phase = ParsePhase.TAIL_FLUSH
            self._process(framer.finish(), state, policy)

        state.phase = ParsePhase.DONE
        progress.report(
            self.settings.progress_cap_percent,
            len(state.emails),
            f"Parsed {len(state.emails)} emails",
            force=True,
        )
        log.info(
            "mbox_parse_complete",
            total_found=state.total_emails_found,
            accepted=len(state.emails),
            filtered=state.emails_filtered,
            parse_errors=state.parse_errors,
            discarded_chars=framer.discarded_bytes,
        )
        return state.to_result()

    def _cap_reached(self, state: ParseState) -> bool:
        return len(state.emails) >= self.options.max_emails

    def _process(self, raw_messages: list[str], state: ParseState, policy: FilterPolicy) -> None:
        for raw in raw_messages:
            if self._cap_reached(state):
                return
            state.total_emails_found += 1

            try:
                email = parse_raw_message(raw, state.total_emails_found)
            except MessageParseError as exc:
                state.parse_errors += 1
                logger.debug(
                    "mbox_message_parse_failed",
                    ordinal=state.total_emails_found,
                    error=str(exc),
                )
                continue

            reason = policy.evaluate(email)
            if reason is not None:
                state.emails_filtered += 1
                state.skipped_reasons[reason.value] = state.skipped_reasons.get(reason.value, 0) + 1
                continue

            policy.accept(email)
            state.emails.append(email)


async def parse_mbox(
    handle: BinaryIO,
    options: MboxParseOptions | None = None,
    *,
    size: int | None = None,
    settings: MboxParserSettings | None = None,
) -> MboxParseResult:
    """Parse an open binary mbox handle.  See :class:`MboxIngestPipeline`."""
    return await MboxIngestPipeline(options, settings).run(handle, size=size)


async def parse_mbox_file(
    path: str | Path,
    options: MboxParseOptions | None = None,
    *,
    settings: MboxParserSettings | None = None,
) -> MboxParseResult:
    """Open *path* and parse it.  An unreadable file raises :class:`ChunkReadError`."""
    try:
        handle = await asyncio.to_thread(open, path, "rb")
    except OSError as exc:
        raise ChunkReadError(f"cannot open archive {path}: {exc}") from exc
    with handle:
        return await parse_mbox(handle, options, settings=settings)
