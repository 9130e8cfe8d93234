"""Sequential, bounded-size reads over an mbox archive.

File reads block, so each one is wrapped in ``asyncio.to_thread()``.
Only one read is in flight at any time.
"""

from __future__ import annotations

import asyncio
import codecs
import io
from collections.abc import AsyncIterator
from typing import BinaryIO

import structlog

from .errors import ChunkReadError

logger = structlog.get_logger()

DEFAULT_CHUNK_SIZE = 50 * 1024 * 1024


def handle_size(handle: BinaryIO) -> int:
    """Return the total size of a seekable binary handle, restoring its position."""
    try:
        position = handle.tell()
        size = handle.seek(0, io.SEEK_END)
        handle.seek(position)
    except (OSError, ValueError) as exc:
        raise ChunkReadError(f"cannot determine archive size: {exc}") from exc
    return size


class ChunkReader:
    """Yield decoded text windows covering ``[0, size)`` of *handle* in order.

    Bytes go through an incremental UTF-8 decoder so a multi-byte character
    cut by a window boundary is completed by the next window instead of
    turning into replacement characters.
    """

    def __init__(
        self,
        handle: BinaryIO,
        *,
        size: int | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self._handle = handle
        self.size = handle_size(handle) if size is None else size
        self.chunk_size = chunk_size
        self.bytes_read = 0
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    def __aiter__(self) -> AsyncIterator[str]:
        return self.chunks()

    async def chunks(self) -> AsyncIterator[str]:
        try:
            await asyncio.to_thread(self._handle.seek, 0)
        except (OSError, ValueError) as exc:
            raise ChunkReadError(f"cannot rewind archive: {exc}") from exc

        while self.bytes_read < self.size:
            want = min(self.chunk_size, self.size - self.bytes_read)
            data = await self._read(want)
            self.bytes_read += len(data)
            logger.debug("mbox_chunk_read", bytes=len(data), bytes_read=self.bytes_read, size=self.size)
            final = self.bytes_read >= self.size
            text = self._decoder.decode(data, final=final)
            if text:
                yield text

    async def _read(self, want: int) -> bytes:
        try:
            data = await asyncio.to_thread(self._handle.read, want)
        except (OSError, ValueError) as exc:
            raise ChunkReadError(f"read failed at offset {self.bytes_read}: {exc}") from exc
        if not data:
            raise ChunkReadError(
                f"archive ended at offset {self.bytes_read}, expected {self.size} bytes"
            )
        return data
