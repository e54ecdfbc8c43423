"""Data models for the RSS to Atom conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from common.arena import Arena, FieldRef, FieldView


class Context(Enum):
    """Which part of the RSS document the parser is currently inside."""
    NONE = "none"
    ROOT = "root"
    CHANNEL = "channel"
    ITEM = "item"


ROOT_ELEMENTS = frozenset({"rss", "rdf:RDF"})


@dataclass
class Channel:
    """RSS channel metadata, mapped to the Atom feed header."""
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    last_build_date: Optional[str] = None
    category: Optional[str] = None
    copyright: Optional[str] = None
    generator: Optional[str] = None
    managing_editor: Optional[str] = None
    pub_date: Optional[str] = None


@dataclass
class Item:
    """RSS item, mapped to an Atom entry."""
    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    author: Optional[str] = None
    category: Optional[str] = None
    guid: Optional[str] = None
    pub_date: Optional[str] = None


# Element local name -> record attribute, per context.
CHANNEL_FIELDS = {
    "title": "title",
    "link": "link",
    "description": "description",
    "author": "author",
    "lastBuildDate": "last_build_date",
    "category": "category",
    "copyright": "copyright",
    "generator": "generator",
    "managingEditor": "managing_editor",
    "pubDate": "pub_date",
}

ITEM_FIELDS = {
    "title": "title",
    "link": "link",
    "description": "description",
    "author": "author",
    "category": "category",
    "guid": "guid",
    "pubDate": "pub_date",
}

FIELD_TABLES = {
    Context.CHANNEL: CHANNEL_FIELDS,
    Context.ITEM: ITEM_FIELDS,
}


@dataclass
class OpenRecord:
    """The channel or item currently being filled, as views into the arena."""
    kind: Context
    slots: dict[str, FieldView] = field(default_factory=dict)

    def build(self, arena: Arena) -> Channel | Item:
        values = {name: arena.read(view) for name, view in self.slots.items()}
        if self.kind is Context.CHANNEL:
            return Channel(**values)
        return Item(**values)


@dataclass
class OpenField:
    """A recognized field element whose text is being collected."""
    element: str
    slot: str
    ref: FieldRef
