"""Turn the output of a feed's fetch program into database entries.

The document may be RSS (or RSS 1.0/RDF) or Atom; the format is picked from
the first recognised element. Entries missing required fields are reported
and skipped. Text is sanitized so it can be stored in the tab-separated
database.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Iterable, Optional
from urllib.parse import urlsplit

from common.arena import Arena, FieldRef
from common.config import ToolsConfig, get_config
from common.errors import Diagnostic, FeedSyntaxError
from common.xml_events import XmlEventSource, find_attribute, local_name
from feed_db.models import Entry, sanitize

logger = logging.getLogger(__name__)

RSS = "rss"
ATOM = "atom"

FORMAT_ROOTS = {"rss": RSS, "RDF": RSS, "feed": ATOM}
ENTRY_TAGS = {RSS: "item", ATOM: "entry"}

# local element name -> Entry attribute
FIELD_TABLES = {
    RSS: {"guid": "id", "title": "title", "pubDate": "updated", "link": "link"},
    ATOM: {"id": "id", "title": "title", "updated": "updated"},
}

UNTITLED = "Untitled"


def is_valid_url(url: str) -> bool:
    try:
        return bool(urlsplit(url).scheme)
    except ValueError:
        return False


class FeedEntryParser:
    """Event handler collecting the entries of one feed document."""

    def __init__(self, feed_name: str, arena: Arena, fetched_at: str):
        self.feed_name = sanitize(feed_name)
        self.fetched_at = fetched_at
        self.format: Optional[str] = None
        self.entries: list[Entry] = []
        self.diagnostics: list[Diagnostic] = []
        self._arena = arena
        self._in_entry = False
        self._values: dict[str, str] = {}
        self._field: Optional[str] = None
        self._ref: Optional[FieldRef] = None

    def start_element(self, name: str, attributes: dict[str, str]) -> None:
        tag = local_name(name)
        if self.format is None:
            self.format = FORMAT_ROOTS.get(tag)
            return

        if tag == ENTRY_TAGS[self.format]:
            self._in_entry = True
            self._values = {}
            self._field = None
            self._arena.reset()
        elif not self._in_entry or self._field is not None:
            return
        elif self.format == ATOM and tag == "link":
            self._start_atom_link(attributes)
        elif tag in FIELD_TABLES[self.format]:
            self._field = tag
            self._ref = self._arena.open_field()

    def _start_atom_link(self, attributes: dict[str, str]) -> None:
        href = find_attribute(attributes, "href")
        rel = find_attribute(attributes, "rel")
        if href is None or rel not in (None, "alternate"):
            return
        href = sanitize(href)
        if not is_valid_url(href):
            self._report("ignoring invalid URL", href)
            return
        self._values["link"] = href

    def end_element(self, name: str) -> None:
        if not self._in_entry:
            return
        tag = local_name(name)
        if tag == self._field:
            text = sanitize(self._arena.read(self._arena.close_field(self._ref)))
            # Whitespace-only text counts as absent.
            if text.strip():
                self._values[FIELD_TABLES[self.format][tag]] = text
            self._field = None
            self._ref = None
        elif tag == ENTRY_TAGS[self.format]:
            self._in_entry = False
            if self.format == RSS:
                self._finish_rss_item()
            else:
                self._finish_atom_entry()

    def character_data(self, text: str) -> None:
        if self._field is not None:
            self._arena.append(text.encode("utf-8"))

    def _finish_rss_item(self) -> None:
        values = self._values
        link = values.get("link")
        if link is None:
            self._report("ignoring incomplete entry, missing link field")
            return
        self._add(
            id=values.get("id", link),
            # Dates are stored as published; only a missing one is stubbed.
            updated=values.get("updated", self.fetched_at),
            title=values.get("title", UNTITLED),
            link=link,
        )

    def _finish_atom_entry(self) -> None:
        values = self._values
        for field in ("id", "title", "updated", "link"):
            if field not in values:
                self._report(f"ignoring incomplete entry, missing {field} field", values.get("id"))
                return
        self._add(**values)

    def _add(self, id: str, updated: str, title: str, link: str) -> None:
        entry = Entry(feed=self.feed_name, id=id, updated=updated, title=title, link=link)
        self.entries.append(entry)
        logger.debug("Parsed entry %s", entry.id)

    def _report(self, message: str, element: Optional[str] = None) -> None:
        diagnostic = Diagnostic(message, element)
        self.diagnostics.append(diagnostic)
        logger.warning("%s", diagnostic)


def parse_feed(
    chunks: Iterable[bytes],
    feed_name: str,
    config: Optional[ToolsConfig] = None,
    fetched_at: Optional[str] = None,
) -> list[Entry]:
    """Parse a fetched RSS or Atom document into unread entries of feed_name.

    Args:
        chunks: The document as byte chunks
        feed_name: Feed the entries belong to
        config: Tool config; the global config is used if None
        fetched_at: Timestamp given to RSS items without a pubDate.
            Defaults to the current UTC time.

    Returns:
        The complete entries found. A syntax error ends parsing with a
        warning; entries read before it are kept.

    Raises:
        ArenaOverflowError: If an entry's field text exceeds the arena.
    """
    config = config or get_config()
    if fetched_at is None:
        fetched_at = datetime.now(timezone.utc).isoformat(timespec="seconds")

    parser = FeedEntryParser(feed_name, Arena(config.arena_capacity), fetched_at)
    try:
        XmlEventSource(parser).feed_all(chunks)
    except FeedSyntaxError as e:
        logger.warning("error parsing XML: %s", e)

    if parser.format is None:
        logger.warning("not an Atom or RSS feed: %s", feed_name)
    logger.debug("Parsed %d entries for %s", len(parser.entries), feed_name)
    return parser.entries
