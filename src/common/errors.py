"""Error types and diagnostics shared by the feed tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


class FeedError(Exception):
    """Base class for fatal feed processing errors."""


class MalformedFeedError(FeedError):
    """The document does not have a shape we can transcode."""

    def __init__(self, message: str):
        super().__init__(f"malformed feed: {message}")


class ArenaOverflowError(FeedError):
    """Field text did not fit into the arena."""

    def __init__(self, capacity: int):
        super().__init__(f"malformed feed: too much data (arena capacity {capacity} bytes)")
        self.capacity = capacity


class StaleViewError(FeedError):
    """A field view from an earlier arena generation was used."""


class FeedSyntaxError(FeedError):
    """The tokenizer rejected the input."""

    def __init__(self, description: str, line: int):
        super().__init__(f"{description} at {line}")
        self.description = description
        self.line = line


class FeedReadError(FeedError):
    """Reading the input stream failed."""


class EmptyIdError(FeedError):
    """An entry id was empty and cannot be used as a filename."""

    def __init__(self):
        super().__init__("invalid empty id")


class DatabaseError(FeedError):
    """Locking, reading or rewriting the entry database failed."""


class FeedDirError(FeedError):
    """A feed has no usable configuration directory."""

    def __init__(self, message: str, feed_name: Optional[str] = None):
        super().__init__(message if feed_name is None else f"{message}: {feed_name}")
        self.feed_name = feed_name


class FeedProgramError(FeedError):
    """A feed's fetch or open program could not be run, or fetch failed."""


@dataclass(frozen=True)
class Diagnostic:
    """A reported-but-continue problem found while processing a feed."""
    message: str
    element: Optional[str] = None

    def __str__(self) -> str:
        if self.element is None:
            return self.message
        return f"{self.message}: {self.element}"
