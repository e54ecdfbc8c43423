"""Tests for feed_db.database module."""

import io
from pathlib import Path

import pytest

from common.config import ToolsConfig
from common.errors import DatabaseError
from feed_db.database import (
    count_unread_entries,
    get_database_path,
    get_feed_entries,
    get_lockfile_path,
    merge_feed,
    modify_database,
    open_lockfile,
    read_entries,
    write_entries,
)
from feed_db.models import DATABASE_HEADER, Entry, sanitize

CONFIG = ToolsConfig(lock_retry_delay=0.01, lock_timeout=0.04)


def entry(feed: str, entry_id: str, read: bool = False, updated: str = "2024-01-01") -> Entry:
    return Entry(feed, entry_id, updated, f"Title {entry_id}", f"https://example.com/{entry_id}", read)


@pytest.fixture
def database(tmp_path) -> Path:
    path = tmp_path / "feedutils.tsv"
    path.write_text(
        DATABASE_HEADER
        + "news\t1\t2024-01-02\tOne\thttps://example.com/1\tread\n"
        + "news\t2\t2024-01-01\tTwo\thttps://example.com/2\tunread\n"
        + "blog\t3\t2024-01-03\tThree\thttps://example.com/3\tunread\n"
    )
    return path


class TestSanitize:
    def test_removes_control_characters(self) -> None:
        assert sanitize("a\tb\nc\x00d\x7fé") == "abcdé"


class TestGetDatabasePath:
    def test_explicit_path(self, monkeypatch) -> None:
        monkeypatch.setenv("FEEDUTILS_DB", "/data/feeds.tsv")
        assert get_database_path() == Path("/data/feeds.tsv")

    def test_xdg_data_home(self, monkeypatch) -> None:
        monkeypatch.delenv("FEEDUTILS_DB", raising=False)
        monkeypatch.setenv("XDG_DATA_HOME", "/xdg")
        assert get_database_path() == Path("/xdg/feedutils.tsv")

    def test_home(self, monkeypatch) -> None:
        monkeypatch.delenv("FEEDUTILS_DB", raising=False)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setenv("HOME", "/home/me")
        assert get_database_path() == Path("/home/me/.local/share/feedutils.tsv")

    def test_no_env_var(self, monkeypatch) -> None:
        for name in ("FEEDUTILS_DB", "XDG_DATA_HOME", "HOME"):
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(DatabaseError, match="No env var set for database path"):
            get_database_path()


class TestReadWriteEntries:
    def test_reads_entries_after_header(self, database) -> None:
        entries = read_entries(database)
        assert [e.id for e in entries] == ["1", "2", "3"]
        assert entries[0] == Entry("news", "1", "2024-01-02", "One", "https://example.com/1", True)
        assert entries[1].read is False

    def test_missing_database_is_empty(self, tmp_path) -> None:
        assert read_entries(tmp_path / "none.tsv") == []

    def test_missing_field_is_fatal(self, tmp_path) -> None:
        path = tmp_path / "db.tsv"
        path.write_text(DATABASE_HEADER + "news\t1\t2024-01-01\tOne\n")
        with pytest.raises(DatabaseError, match="Missing link field on line 2"):
            read_entries(path)

    def test_write_then_read(self, tmp_path) -> None:
        entries = [entry("news", "a", read=True), entry("blog", "b")]
        path = tmp_path / "db.tsv"
        with open(path, "w", encoding="utf-8") as f:
            write_entries(f, entries)
        assert path.read_text().startswith("feed\tid\tupdated\ttitle\tlink\tread\n")
        assert read_entries(path) == entries

    def test_line_format(self) -> None:
        out = io.StringIO()
        write_entries(out, [entry("news", "a")])
        assert out.getvalue().splitlines()[1] == "news\ta\t2024-01-01\tTitle a\thttps://example.com/a\tunread"


class TestLockfile:
    def test_lockfile_next_to_database(self) -> None:
        assert get_lockfile_path(Path("/d/feedutils.tsv")) == Path("/d/feedutils.tsv.lock")

    def test_times_out_while_locked(self, tmp_path) -> None:
        path = tmp_path / "db.lock"
        path.write_text("")
        with pytest.raises(DatabaseError, match="Unable to lock database"):
            open_lockfile(path, retry_delay=0.01, timeout=0.04)

    def test_unwritable_directory(self, tmp_path) -> None:
        with pytest.raises(DatabaseError, match="Unable to lock database"):
            open_lockfile(tmp_path / "missing" / "db.lock", retry_delay=0.01, timeout=0.04)


class TestModifyDatabase:
    def test_rewrites_database_and_releases_lock(self, database) -> None:
        modify_database(lambda entries: entries[:1], database, CONFIG)
        assert [e.id for e in read_entries(database)] == ["1"]
        assert not get_lockfile_path(database).exists()

    def test_creates_missing_database(self, tmp_path) -> None:
        path = tmp_path / "data" / "feedutils.tsv"
        modify_database(lambda entries: entries + [entry("news", "a")], path, CONFIG)
        assert [e.id for e in read_entries(path)] == ["a"]

    def test_failure_leaves_database_and_removes_lock(self, database) -> None:
        before = database.read_text()

        def fail(entries):
            raise DatabaseError("boom")

        with pytest.raises(DatabaseError, match="boom"):
            modify_database(fail, database, CONFIG)
        assert database.read_text() == before
        assert not get_lockfile_path(database).exists()

    def test_held_lock_is_not_removed(self, database) -> None:
        lock = get_lockfile_path(database)
        lock.write_text("")
        with pytest.raises(DatabaseError, match="already locked"):
            modify_database(lambda entries: [], database, CONFIG)
        assert lock.exists()
        assert len(read_entries(database)) == 3


class TestMergeFeed:
    def test_adds_new_entries(self) -> None:
        merged = merge_feed("news", [entry("news", "a"), entry("news", "b")], [entry("news", "a", read=True)])
        assert [(e.id, e.read) for e in merged] == [("a", True), ("b", False)]

    def test_keeps_other_feeds(self) -> None:
        merged = merge_feed("news", [], [entry("blog", "x", read=True)])
        assert [e.id for e in merged] == ["x"]

    def test_drops_read_entries_gone_from_feed(self) -> None:
        merged = merge_feed("news", [], [entry("news", "old", read=True), entry("news", "new")])
        assert [e.id for e in merged] == ["new"]

    def test_stored_copy_wins(self) -> None:
        stored = entry("news", "a", read=True)
        fetched = Entry("news", "a", "2025-01-01", "Renamed", "https://example.com/a")
        assert merge_feed("news", [fetched], [stored]) == [stored]


class TestQueries:
    def test_feed_entries_oldest_first(self, database) -> None:
        assert [e.id for e in get_feed_entries("news", database)] == ["2", "1"]

    def test_count_unread(self, database) -> None:
        assert count_unread_entries(database) == {"news": 1, "blog": 1}

    def test_count_skips_fully_read_feeds(self, database) -> None:
        modify_database(lambda entries: [e for e in entries if e.read], database, CONFIG)
        assert count_unread_entries(database) == {}
