"""Reassemble read windows into complete raw messages.

A message starts at a line beginning with ``From `` followed by a
non-whitespace token.  Because a window can end anywhere, everything from
the last boundary line onward is carried into the next :meth:`feed` call;
only lines before it are known to belong to complete messages.
"""

from __future__ import annotations

import re

import structlog

logger = structlog.get_logger()

DEFAULT_MAX_CARRY = 200 * 1024 * 1024

_BOUNDARY_PREFIX = "From "
_LINE_SPLIT = re.compile(r"\r?\n")


def is_boundary(line: str) -> bool:
    """True if *line* opens a new message in the mbox convention."""
    return (
        line.startswith(_BOUNDARY_PREFIX)
        and len(line) > len(_BOUNDARY_PREFIX)
        and not line[len(_BOUNDARY_PREFIX)].isspace()
    )


def split_messages(lines: list[str]) -> list[str]:
    """Group *lines* into raw messages, starting a new one at every boundary line."""
    messages: list[str] = []
    current: list[str] = []
    for line in lines:
        if is_boundary(line) and current:
            messages.append("\n".join(current))
            current = []
        current.append(line)
    if current:
        messages.append("\n".join(current))
    # Blank preamble or trailing newlines are not messages.
    return [m for m in messages if m.strip()]


class MessageFramer:
    """Carry-over buffer threaded across chunk reads.

    ``discarded_bytes`` counts text dropped because the unfinished tail
    (no boundary at all, or one message still open) outgrew ``max_carry``.
    """

    def __init__(self, *, max_carry: int = DEFAULT_MAX_CARRY) -> None:
        self.max_carry = max_carry
        self.discarded_bytes = 0
        self._buffer = ""

    @property
    def pending(self) -> int:
        """Characters currently held in the carry buffer."""
        return len(self._buffer)

    def feed(self, chunk: str) -> list[str]:
        """Append *chunk* and return every message now known to be complete."""
        self._buffer += chunk
        lines = _LINE_SPLIT.split(self._buffer)

        last = len(lines) - 1
        while last >= 0 and not is_boundary(lines[last]):
            last -= 1

        messages: list[str] = []
        if last > 0:
            self._buffer = "\n".join(lines[last:])
            messages = split_messages(lines[:last])

        # The carry now holds at most one unfinished message.
        if len(self._buffer) > self.max_carry:
            logger.warning(
                "mbox_carry_discarded",
                chars=len(self._buffer),
                max_carry=self.max_carry,
            )
            self.discarded_bytes += len(self._buffer)
            self._buffer = ""
        return messages

    def finish(self) -> list[str]:
        """Flush the carry buffer at end of input; the last message has no trailing boundary."""
        if not self._buffer:
            return []
        lines = _LINE_SPLIT.split(self._buffer)
        self._buffer = ""
        return split_messages(lines)
