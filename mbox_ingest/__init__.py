"""Bounded-memory mbox archive ingestion.

Public API re-exported here for convenience::

    from mbox_ingest import MboxParseOptions, parse_mbox_file
"""

from .config import MboxParserSettings
from .errors import ChunkReadError, MboxError, MessageParseError
from .framer import MessageFramer, is_boundary
from .logging import setup_logging
from .models import MboxParseOptions, MboxParseResult, ParsedEmail, SkipReason
from .pipeline import MboxIngestPipeline, parse_mbox, parse_mbox_file
from .reader import ChunkReader
from .sizing import estimate_upload_size, format_bytes

__all__ = [
    "ChunkReadError",
    "ChunkReader",
    "MboxError",
    "MboxIngestPipeline",
    "MboxParseOptions",
    "MboxParseResult",
    "MboxParserSettings",
    "MessageFramer",
    "MessageParseError",
    "ParsedEmail",
    "SkipReason",
    "estimate_upload_size",
    "format_bytes",
    "is_boundary",
    "parse_mbox",
    "parse_mbox_file",
    "setup_logging",
]
