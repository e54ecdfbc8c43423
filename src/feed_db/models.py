"""Data models for the entry database."""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass

DATABASE_COLUMNS = ("feed", "id", "updated", "title", "link", "read")
DATABASE_HEADER = "\t".join(DATABASE_COLUMNS) + "\n"


def sanitize(text: str) -> str:
    """Drop control characters so tabs and newlines can delimit database fields."""
    return "".join(c for c in text if unicodedata.category(c) != "Cc")


@dataclass
class Entry:
    feed: str
    id: str
    updated: str
    title: str
    link: str
    read: bool = False

    def to_line(self) -> str:
        read = "read" if self.read else "unread"
        return "\t".join([self.feed, self.id, self.updated, self.title, self.link, read]) + "\n"
