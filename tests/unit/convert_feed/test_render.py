"""Tests for convert_feed.render module."""

import xml.etree.ElementTree as ET

import pytest

from common.config import ToolsConfig
from common.errors import MalformedFeedError
from convert_feed.models import Channel, Item
from convert_feed.render import (
    FEED_CLOSE,
    escape_attribute,
    escape_content,
    render_channel,
    render_item,
)

ATOM = "{http://www.w3.org/2005/Atom}"
CONFIG = ToolsConfig()


def _parse_channel(text: str) -> ET.Element:
    return ET.fromstring(text + FEED_CLOSE)


def _parse_item(text: str) -> ET.Element:
    return ET.fromstring(f'<feed xmlns="http://www.w3.org/2005/Atom">{text}</feed>')[0]


class TestEscaping:
    def test_content_escapes(self) -> None:
        assert escape_content("a & b < c > d\r") == "a &amp; b &lt; c &gt; d&#xD;"

    def test_content_keeps_tab_and_newline(self) -> None:
        assert escape_content("a\tb\nc") == "a\tb\nc"

    def test_attribute_escapes_whitespace_and_quote(self) -> None:
        assert escape_attribute('a\tb\nc"d') == "a&#x9;b&#xA;c&quot;d"

    def test_content_round_trips_through_xml_parser(self) -> None:
        original = "Fish & <Chips> \r\n done"
        element = ET.fromstring(f"<t>{escape_content(original)}</t>")
        assert element.text == original

    def test_attribute_round_trips_through_xml_parser(self) -> None:
        original = 'x & "y"\t<z>\n\r'
        element = ET.fromstring(f'<t a="{escape_attribute(original)}"/>')
        assert element.get("a") == original


class TestRenderChannel:
    def test_missing_title_is_fatal(self) -> None:
        with pytest.raises(MalformedFeedError, match="no channel title"):
            render_channel(Channel(link="https://example.com"), CONFIG, lambda m: None)

    def test_full_channel(self) -> None:
        channel = Channel(
            title="Feed",
            link="https://example.com/",
            description="About",
            author="alice@example.com",
            managing_editor="bob@example.com",
            pub_date="Mon, 01 Jan 2024 12:00:00 GMT",
            last_build_date="Tue, 02 Jan 2024 12:00:00 GMT",
            category="News",
            copyright="(c) Example",
            generator="Gen 1.0",
        )
        feed = _parse_channel(render_channel(channel, CONFIG, lambda m: None))

        assert feed.tag == f"{ATOM}feed"
        assert feed.find(f"{ATOM}title").text == "Feed"
        assert feed.find(f"{ATOM}subtitle").text == "About"
        assert feed.find(f"{ATOM}id").text == "https://example.com/"
        assert feed.find(f"{ATOM}link").get("href") == "https://example.com/"
        assert feed.find(f"{ATOM}author/{ATOM}name").text == "alice@example.com"
        assert feed.find(f"{ATOM}updated").text == "Mon, 01 Jan 2024 12:00:00 GMT"
        assert feed.find(f"{ATOM}category").get("term") == "News"
        assert feed.find(f"{ATOM}rights").text == "(c) Example"
        assert feed.find(f"{ATOM}generator").text == "Gen 1.0"

    def test_element_order(self) -> None:
        channel = Channel(title="Feed", link="l", description="d", category="c")
        feed = _parse_channel(render_channel(channel, CONFIG, lambda m: None))
        tags = [child.tag.replace(ATOM, "") for child in feed]
        assert tags == ["title", "subtitle", "id", "link", "author", "updated", "category"]

    def test_missing_link_falls_back_to_title_with_warning(self) -> None:
        warnings = []
        feed = _parse_channel(render_channel(Channel(title="Feed"), CONFIG, warnings.append))
        assert feed.find(f"{ATOM}id").text == "Feed"
        assert feed.find(f"{ATOM}link").get("href") == "Feed"
        assert warnings == ["malformed feed: no channel link"]

    def test_author_falls_back_to_managing_editor(self) -> None:
        channel = Channel(title="Feed", link="l", managing_editor="ed@example.com")
        feed = _parse_channel(render_channel(channel, CONFIG, lambda m: None))
        assert feed.find(f"{ATOM}author/{ATOM}name").text == "ed@example.com"

    def test_placeholders(self) -> None:
        config = ToolsConfig(unknown_author="Nobody", updated_placeholder="2000-01-01T00:00:00Z")
        feed = _parse_channel(render_channel(Channel(title="Feed", link="l"), config, lambda m: None))
        assert feed.find(f"{ATOM}author/{ATOM}name").text == "Nobody"
        assert feed.find(f"{ATOM}updated").text == "2000-01-01T00:00:00Z"

    def test_updated_falls_back_to_last_build_date(self) -> None:
        channel = Channel(title="Feed", link="l", last_build_date="Tue, 02 Jan 2024")
        feed = _parse_channel(render_channel(channel, CONFIG, lambda m: None))
        assert feed.find(f"{ATOM}updated").text == "Tue, 02 Jan 2024"

    def test_optional_elements_omitted(self) -> None:
        feed = _parse_channel(render_channel(Channel(title="Feed", link="l"), CONFIG, lambda m: None))
        for tag in ("subtitle", "category", "rights", "generator"):
            assert feed.find(f"{ATOM}{tag}") is None


class TestRenderItem:
    def test_missing_title_is_fatal(self) -> None:
        with pytest.raises(MalformedFeedError, match="no item title"):
            render_item(Item(link="l"), CONFIG, lambda m: None)

    def test_full_item(self) -> None:
        item = Item(
            title="Post",
            link="https://example.com/1",
            description="<p>Body</p>",
            author="alice",
            category="Tech",
            guid="g1",
            pub_date="Mon, 01 Jan 2024 12:00:00 GMT",
        )
        entry = _parse_item(render_item(item, CONFIG, lambda m: None))

        assert entry.tag == f"{ATOM}entry"
        assert entry.find(f"{ATOM}title").text == "Post"
        assert entry.find(f"{ATOM}content").text == "<p>Body</p>"
        assert entry.find(f"{ATOM}id").text == "https://example.com/1"
        assert entry.find(f"{ATOM}link").get("href") == "https://example.com/1"
        assert entry.find(f"{ATOM}author/{ATOM}name").text == "alice"
        assert entry.find(f"{ATOM}updated").text == "Mon, 01 Jan 2024 12:00:00 GMT"
        assert entry.find(f"{ATOM}category").get("term") == "Tech"

    def test_missing_link_uses_guid_with_warning(self) -> None:
        warnings = []
        entry = _parse_item(render_item(Item(title="T", guid="g1"), CONFIG, warnings.append))
        assert entry.find(f"{ATOM}id").text == "g1"
        assert entry.find(f"{ATOM}link").get("href") == "g1"
        assert warnings == ["malformed feed: no item link"]

    def test_missing_link_and_guid_uses_title(self) -> None:
        entry = _parse_item(render_item(Item(title="T"), CONFIG, lambda m: None))
        assert entry.find(f"{ATOM}id").text == "T"

    def test_defaults(self) -> None:
        entry = _parse_item(render_item(Item(title="T", link="l"), CONFIG, lambda m: None))
        assert entry.find(f"{ATOM}author/{ATOM}name").text == "Unknown Author"
        assert entry.find(f"{ATOM}updated").text == "1970-01-01T00:00:00Z"
        assert entry.find(f"{ATOM}content") is None
        assert entry.find(f"{ATOM}category") is None
