"""Event-driven RSS to Atom state machine.

The transcoder consumes tokenizer events and tracks where in the RSS
document it is (``Context``), which recognized field is collecting text,
and how deep it is inside an element subtree it does not recognize. Field
text goes into a single ``Arena`` that is reset whenever a channel or item
starts; by then the previous record has already been rendered.

Two document shapes are supported. In RSS 2.0 items are nested inside
``channel`` and the channel header is rendered when the first item opens.
In RDF (RSS 1.0) items are siblings of ``channel`` and the header is
rendered when ``channel`` closes. Either way it is rendered exactly once.
"""

from __future__ import annotations

import logging
from typing import Optional, TextIO

from common.arena import Arena
from common.config import ToolsConfig
from common.errors import Diagnostic, MalformedFeedError
from common.xml_events import local_name
from convert_feed.models import (
    FIELD_TABLES,
    ROOT_ELEMENTS,
    Context,
    OpenField,
    OpenRecord,
)
from convert_feed.render import FEED_CLOSE, render_channel, render_item

logger = logging.getLogger(__name__)


class Transcoder:
    def __init__(self, out: TextIO, config: ToolsConfig):
        self._out = out
        self._config = config
        self._arena = Arena(config.arena_capacity)

        self.context = Context.NONE
        self.record: Optional[OpenRecord] = None
        self.channel_rendered = False
        self.unknown_depth = 0
        self.field: Optional[OpenField] = None
        self.entries_written = 0
        self.diagnostics: list[Diagnostic] = []

    # Tokenizer callbacks

    def start_element(self, name: str, attributes: dict[str, str]) -> None:
        if self.unknown_depth > 0:
            self.unknown_depth += 1
            return

        if self.field is not None:
            # Fields do not nest; skip the child so the field's own end tag still matches.
            self._skip_unknown(name)
        elif name == "item":
            self._start_item()
        elif name == "channel":
            self._start_channel()
        elif name in ROOT_ELEMENTS:
            self._start_root(name)
        elif self.context in FIELD_TABLES:
            self._start_field(name)
        elif self.context is Context.NONE:
            raise MalformedFeedError(f"unexpected {name} at document root")
        else:
            self._skip_unknown(name)

    def end_element(self, name: str) -> None:
        if self.unknown_depth > 0:
            self.unknown_depth -= 1
            return

        if self.field is not None:
            self._end_field(name)
        elif name in ROOT_ELEMENTS and self.context is Context.ROOT:
            self._end_root()
        elif name == "channel" and self.context in (Context.ROOT, Context.CHANNEL):
            self._end_channel()
        elif name == "item" and self.context is Context.ITEM:
            self._end_item()
        else:
            self._report("unhandled end tag", name)

    def character_data(self, text: str) -> None:
        if self.unknown_depth == 0 and self.field is not None:
            self._arena.append(text.encode("utf-8"))

    # Start tags

    def _start_root(self, name: str) -> None:
        if self.context is not Context.NONE:
            raise MalformedFeedError(f"unexpected {name} when not at document root")
        self._enter(Context.ROOT)
        self.channel_rendered = False

    def _start_channel(self) -> None:
        if self.context is not Context.ROOT:
            raise MalformedFeedError("unexpected channel when not in RSS")
        self._enter(Context.CHANNEL)
        self._open_record(Context.CHANNEL)

    def _start_item(self) -> None:
        if self.context not in (Context.ROOT, Context.CHANNEL):
            raise MalformedFeedError("unexpected item when not in RSS or CHANNEL")
        if self.context is Context.CHANNEL and not self.channel_rendered:
            # Items nested in the channel: the header has to come first.
            self._render_channel()
        if not self.channel_rendered:
            raise MalformedFeedError("no channel entry before item")
        self._enter(Context.ITEM)
        self._open_record(Context.ITEM)

    def _start_field(self, name: str) -> None:
        slot = FIELD_TABLES[self.context].get(local_name(name))
        if slot is None:
            self._skip_unknown(name)
            return
        self.field = OpenField(element=name, slot=slot, ref=self._arena.open_field())

    def _skip_unknown(self, name: str) -> None:
        self.unknown_depth += 1
        self._report("unhandled tag", name)

    # End tags

    def _end_field(self, name: str) -> None:
        if name != self.field.element:
            self._report("unhandled end tag when parsing field", name)
            return
        view = self._arena.close_field(self.field.ref)
        # Elements without text leave the field unset.
        if view.length > 0:
            self.record.slots[self.field.slot] = view
        self.field = None

    def _end_root(self) -> None:
        if not self.channel_rendered:
            raise MalformedFeedError("no channel in feed")
        self._write(FEED_CLOSE)
        self._enter(Context.NONE)
        self.channel_rendered = False

    def _end_channel(self) -> None:
        if not self.channel_rendered:
            self._render_channel()
        self._enter(Context.ROOT)

    def _end_item(self) -> None:
        item = self.record.build(self._arena)
        self._write(render_item(item, self._config, self._report))
        self.entries_written += 1
        logger.debug("Rendered entry %d: %s", self.entries_written, item.title)
        self._enter(Context.ROOT)

    # Helpers

    def _render_channel(self) -> None:
        channel = self.record.build(self._arena)
        self._write(render_channel(channel, self._config, self._report))
        self.channel_rendered = True
        logger.debug("Rendered feed header: %s", channel.title)

    def _open_record(self, kind: Context) -> None:
        self._arena.reset()
        self.record = OpenRecord(kind=kind)

    def _enter(self, context: Context) -> None:
        logger.debug("%s -> %s", self.context.name, context.name)
        self.context = context

    def _write(self, text: str) -> None:
        self._out.write(text)
        self._out.flush()

    def _report(self, message: str, element: Optional[str] = None) -> None:
        diagnostic = Diagnostic(message, element)
        self.diagnostics.append(diagnostic)
        logger.warning("%s", diagnostic)
