"""Adapter over the expat tokenizer.

The handler object receives three kinds of events: element start (name and
attribute dict), element end (name) and character data. Character data for
one logical string may arrive in several calls.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol
from xml.parsers import expat

from common.errors import FeedSyntaxError

logger = logging.getLogger(__name__)


class EventHandler(Protocol):
    def start_element(self, name: str, attributes: dict[str, str]) -> None: ...

    def end_element(self, name: str) -> None: ...

    def character_data(self, text: str) -> None: ...


def local_name(name: str) -> str:
    """Strip an explicit namespace prefix from a qualified name."""
    return name.rpartition(":")[2]


def find_attribute(attributes: dict[str, str], name: str) -> Optional[str]:
    """Look up an attribute by name, ignoring any namespace prefix."""
    for key, value in attributes.items():
        if local_name(key) == name:
            return value
    return None


class XmlEventSource:
    """Push bytes in, get handler callbacks out."""

    def __init__(self, handler: EventHandler):
        # No namespace processing: qualified names such as rdf:RDF arrive verbatim.
        self._parser = expat.ParserCreate()
        self._parser.StartElementHandler = handler.start_element
        self._parser.EndElementHandler = handler.end_element
        self._parser.CharacterDataHandler = handler.character_data

    def feed(self, chunk: bytes, final: bool = False) -> None:
        """Feed one chunk of the document.

        Raises:
            FeedSyntaxError: If the tokenizer reports a parse error.
        """
        try:
            self._parser.Parse(chunk, final)
        except expat.ExpatError as exc:
            raise FeedSyntaxError(expat.ErrorString(exc.code), exc.lineno) from exc

    def feed_all(self, chunks: Iterable[bytes]) -> None:
        count = 0
        for chunk in chunks:
            self.feed(chunk)
            count += 1
        self.feed(b"", final=True)
        logger.debug("Parsed %d chunks", count)
