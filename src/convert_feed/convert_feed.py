"""Core conversion entry point: RSS bytes in, Atom text out."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, TextIO

from common.config import ToolsConfig, get_config
from common.xml_events import XmlEventSource
from convert_feed.transcoder import Transcoder

logger = logging.getLogger(__name__)


def transcode(
    chunks: Iterable[bytes],
    out: TextIO,
    config: Optional[ToolsConfig] = None,
) -> Transcoder:
    """Convert a streamed RSS document to Atom, writing output as it is produced.

    Args:
        chunks: The RSS document as byte chunks of any size
        out: Text stream the Atom document is written to
        config: Tool config; the global config is used if None

    Returns:
        The finished transcoder, whose ``diagnostics`` lists every
        non-fatal problem reported during the run.

    Raises:
        FeedError: On any fatal problem. Output written so far is left as is.
    """
    transcoder = Transcoder(out, config or get_config())
    XmlEventSource(transcoder).feed_all(chunks)

    logger.debug(
        "Converted %d entries with %d diagnostics",
        transcoder.entries_written,
        len(transcoder.diagnostics),
    )
    return transcoder
