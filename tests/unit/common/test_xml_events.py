"""Tests for common.xml_events module."""

import pytest

from common.errors import FeedSyntaxError
from common.xml_events import XmlEventSource, local_name


class RecordingHandler:
    def __init__(self) -> None:
        self.events = []

    def start_element(self, name, attributes) -> None:
        self.events.append(("start", name, attributes))

    def end_element(self, name) -> None:
        self.events.append(("end", name))

    def character_data(self, text) -> None:
        self.events.append(("data", text))


class TestLocalName:
    def test_strips_prefix(self) -> None:
        assert local_name("dc:creator") == "creator"

    def test_plain_name_unchanged(self) -> None:
        assert local_name("title") == "title"


class TestXmlEventSource:
    def test_qualified_names_arrive_verbatim(self) -> None:
        handler = RecordingHandler()
        source = XmlEventSource(handler)
        source.feed_all([b'<rdf:RDF xmlns:rdf="urn:x"><a href="h">t</a></rdf:RDF>'])
        assert handler.events[0] == ("start", "rdf:RDF", {"xmlns:rdf": "urn:x"})
        assert ("start", "a", {"href": "h"}) in handler.events
        assert handler.events[-1] == ("end", "rdf:RDF")

    def test_split_chunks_deliver_all_text(self) -> None:
        handler = RecordingHandler()
        XmlEventSource(handler).feed_all([b"<a>hel", b"lo &am", b"p; bye</a>"])
        text = "".join(e[1] for e in handler.events if e[0] == "data")
        assert text == "hello & bye"

    def test_syntax_error_reports_line(self) -> None:
        source = XmlEventSource(RecordingHandler())
        with pytest.raises(FeedSyntaxError) as exc_info:
            source.feed_all([b"<a>\n<b></a>"])
        assert exc_info.value.line == 2
        assert "mismatched tag" in str(exc_info.value)

    def test_truncated_document_fails_on_final_feed(self) -> None:
        source = XmlEventSource(RecordingHandler())
        with pytest.raises(FeedSyntaxError):
            source.feed_all([b"<a><b>"])

    def test_handler_exception_propagates(self) -> None:
        class Failing(RecordingHandler):
            def start_element(self, name, attributes) -> None:
                raise KeyError(name)

        with pytest.raises(KeyError):
            XmlEventSource(Failing()).feed_all([b"<a/>"])
