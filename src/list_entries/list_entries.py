"""List the id of every entry in an Atom feed."""

from __future__ import annotations

import logging
from typing import Iterable, Optional, TextIO

from common.arena import Arena, FieldRef
from common.config import ToolsConfig, get_config
from common.ids import escape_id
from common.xml_events import XmlEventSource, local_name

logger = logging.getLogger(__name__)


class EntryIdCollector:
    """Writes each entry id, escaped and NUL-terminated, as its end tag is seen."""

    def __init__(self, out: TextIO, arena: Arena):
        self._out = out
        self._arena = arena
        self.in_entry = False
        self._id_ref: Optional[FieldRef] = None
        self.ids_written = 0

    def start_element(self, name: str, attributes: dict[str, str]) -> None:
        tag = local_name(name)
        if self.in_entry and tag == "id":
            self._arena.reset()
            self._id_ref = self._arena.open_field()
        elif tag == "entry":
            self.in_entry = True

    def end_element(self, name: str) -> None:
        tag = local_name(name)
        if self._id_ref is not None and tag == "id":
            view = self._arena.close_field(self._id_ref)
            self._id_ref = None
            self._out.write(escape_id(self._arena.read(view)) + "\0")
            self.ids_written += 1
        if self.in_entry and tag == "entry":
            self._id_ref = None
            self.in_entry = False

    def character_data(self, text: str) -> None:
        if self._id_ref is not None:
            self._arena.append(text.encode("utf-8"))


def list_entries(
    chunks: Iterable[bytes],
    out: TextIO,
    config: Optional[ToolsConfig] = None,
) -> int:
    """Write the escaped id of every entry to out. Returns the number of ids."""
    config = config or get_config()
    collector = EntryIdCollector(out, Arena(config.arena_capacity))
    XmlEventSource(collector).feed_all(chunks)
    out.flush()
    logger.debug("Listed %d entry ids", collector.ids_written)
    return collector.ids_written
