"""Atom fragment rendering for converted channels and items.

Rendering is stateless: each function takes a fully populated record and
returns the Atom text for it. Missing optional identifiers fall back to
other fields and are reported through ``warn``.
"""

from __future__ import annotations

from typing import Callable, Optional
from xml.sax.saxutils import escape

from common.config import ToolsConfig
from common.errors import MalformedFeedError
from convert_feed.models import Channel, Item

ATOM_NS = "http://www.w3.org/2005/Atom"
FEED_CLOSE = "</feed>\n"

_CONTENT_ENTITIES = {"\r": "&#xD;"}
_ATTRIBUTE_ENTITIES = {
    "\r": "&#xD;",
    "\t": "&#x9;",
    "\n": "&#xA;",
    '"': "&quot;",
}

Warn = Callable[[str], None]


def escape_content(text: str) -> str:
    """Escape text for element content."""
    return escape(text, _CONTENT_ENTITIES)


def escape_attribute(text: str) -> str:
    """Escape text for a double-quoted attribute value."""
    return escape(text, _ATTRIBUTE_ENTITIES)


def _element(name: str, text: str) -> str:
    return f"\t\t<{name}>{escape_content(text)}</{name}>\n"


def _identity(id_: str) -> str:
    # Ids are used as given; Atom id normalization is not applied.
    return _element("id", id_) + f'\t\t<link href="{escape_attribute(id_)}"></link>\n'


def _author(name: str) -> str:
    return f"\t\t<author><name>{escape_content(name)}</name></author>\n"


def _category(term: Optional[str]) -> str:
    if term is None:
        return ""
    return f'\t\t<category term="{escape_attribute(term)}"></category>\n'


def render_channel(channel: Channel, config: ToolsConfig, warn: Warn) -> str:
    """Render the feed header for a channel.

    Raises:
        MalformedFeedError: If the channel has no title.
    """
    if channel.title is None:
        raise MalformedFeedError("no channel title")

    parts = [f'<feed xmlns="{ATOM_NS}">\n', _element("title", channel.title)]

    if channel.description is not None:
        parts.append(_element("subtitle", channel.description))

    id_ = channel.link
    if id_ is None:
        warn("malformed feed: no channel link")
        id_ = channel.title
    parts.append(_identity(id_))

    author = channel.author or channel.managing_editor or config.unknown_author
    parts.append(_author(author))

    # RSS dates are RFC 822; they are passed through unconverted.
    updated = channel.pub_date or channel.last_build_date or config.updated_placeholder
    parts.append(_element("updated", updated))

    parts.append(_category(channel.category))

    if channel.copyright is not None:
        parts.append(_element("rights", channel.copyright))
    if channel.generator is not None:
        parts.append(_element("generator", channel.generator))

    return "".join(parts)


def render_item(item: Item, config: ToolsConfig, warn: Warn) -> str:
    """Render an Atom entry for an item.

    Raises:
        MalformedFeedError: If the item has no title.
    """
    if item.title is None:
        raise MalformedFeedError("no item title")

    parts = ["\t<entry>\n", _element("title", item.title)]

    if item.description is not None:
        parts.append(_element("content", item.description))

    id_ = item.link
    if id_ is None:
        warn("malformed feed: no item link")
        id_ = item.guid if item.guid is not None else item.title
    parts.append(_identity(id_))

    parts.append(_author(item.author or config.unknown_author))
    parts.append(_element("updated", item.pub_date or config.updated_placeholder))
    parts.append(_category(item.category))
    parts.append("\t</entry>\n")

    return "".join(parts)
