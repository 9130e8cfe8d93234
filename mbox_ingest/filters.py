"""Acceptance policy: content length, per-run deduplication, sender filter."""

from __future__ import annotations

from .models import MboxParseOptions, ParsedEmail, SkipReason


class FilterPolicy:
    """Judge decoded emails against one run's options and the hashes seen so far.

    Rejection reasons are checked in a fixed priority order and only the
    first that applies is reported.
    """

    def __init__(self, options: MboxParseOptions) -> None:
        self._min_length = options.min_content_length
        self._only_from = options.only_from_email.lower() if options.only_from_email else None
        self._seen: set[str] = set()

    def evaluate(self, email: ParsedEmail) -> SkipReason | None:
        if not email.text_content.strip():
            return SkipReason.EMPTY_CONTENT
        if len(email.text_content) < self._min_length:
            return SkipReason.CONTENT_TOO_SHORT
        if email.content_hash in self._seen:
            return SkipReason.DUPLICATE_CONTENT
        if self._only_from and self._only_from not in email.from_address.lower():
            return SkipReason.NOT_FROM_USER
        return None

    def accept(self, email: ParsedEmail) -> None:
        self._seen.add(email.content_hash)

    @property
    def seen_count(self) -> int:
        return len(self._seen)
