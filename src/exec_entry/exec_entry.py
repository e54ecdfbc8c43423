"""Run a program with the fields of an Atom entry in its environment.

The entry's title, alternate link, content and updated timestamp are
exported as TITLE, LINK, CONTENT and UPDATED before the child program
replaces the current process.
"""

from __future__ import annotations

import logging
import os
from typing import Iterable, Optional

from common.arena import Arena, FieldRef
from common.config import ToolsConfig, get_config
from common.errors import Diagnostic, MalformedFeedError
from common.xml_events import XmlEventSource, find_attribute, local_name

logger = logging.getLogger(__name__)

ENV_NAMES = {
    "title": "TITLE",
    "link": "LINK",
    "content": "CONTENT",
    "updated": "UPDATED",
}


class EntryFieldExtractor:
    def __init__(self, arena: Arena):
        self._arena = arena
        self.tag: Optional[str] = None
        self._ref: Optional[FieldRef] = None
        self.values: dict[str, str] = {}
        self.diagnostics: list[Diagnostic] = []

    def start_element(self, name: str, attributes: dict[str, str]) -> None:
        if self.tag is not None:
            raise MalformedFeedError(f"unexpected tag '{name}'")

        tag = local_name(name)
        if tag not in ENV_NAMES:
            return

        self._arena.reset()
        self._ref = self._arena.open_field()
        if tag == "link":
            self._start_link(attributes)
        else:
            self.tag = tag

    def _start_link(self, attributes: dict[str, str]) -> None:
        href = find_attribute(attributes, "href")
        rel = find_attribute(attributes, "rel")
        if href is None:
            self._report("malformed feed: link with no href")
            return
        if rel is not None and rel != "alternate":
            # Comment feeds, enclosures and the like.
            return
        self._arena.append(href.encode("utf-8"))
        self.tag = "link"

    def end_element(self, name: str) -> None:
        if self.tag is None:
            return
        view = self._arena.close_field(self._ref)
        self.values[ENV_NAMES[self.tag]] = self._arena.read(view)
        self.tag = None
        self._ref = None

    def character_data(self, text: str) -> None:
        # Link values come from href only.
        if self.tag is not None and self.tag != "link":
            self._arena.append(text.encode("utf-8"))

    def _report(self, message: str) -> None:
        diagnostic = Diagnostic(message)
        self.diagnostics.append(diagnostic)
        logger.warning("%s", diagnostic)


def extract_entry_fields(
    chunks: Iterable[bytes],
    config: Optional[ToolsConfig] = None,
) -> dict[str, str]:
    """Return the environment variables for an Atom entry document."""
    config = config or get_config()
    extractor = EntryFieldExtractor(Arena(config.arena_capacity))
    XmlEventSource(extractor).feed_all(chunks)
    logger.debug("Extracted %s", ", ".join(sorted(extractor.values)) or "no fields")
    return extractor.values


def exec_child(values: dict[str, str], child: str, child_args: list[str]) -> None:
    """Export values and replace this process with child. Only returns by raising OSError."""
    os.environ.update(values)
    os.execv(child, [child, *child_args])
