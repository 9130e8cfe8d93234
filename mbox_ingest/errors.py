"""Exception taxonomy for mbox ingestion.

Only two conditions are exceptions.  A read failure aborts the whole run;
a message that cannot be split into headers and body is skipped and
counted.  Decode fallbacks and filter rejections are ordinary values.
"""

from __future__ import annotations


class MboxError(Exception):
    """Base class for mbox ingestion errors."""


class ChunkReadError(MboxError, OSError):
    """Reading the archive failed; no partial result is returned."""


class MessageParseError(MboxError, ValueError):
    """A single raw message could not be decomposed into headers and body."""
