"""The tab-separated entry database.

One header line, then one entry per line with the columns
``feed id updated title link read``. Every change rewrites the whole file:
the new contents are written to ``<database>.lock``, which doubles as the
lock, and then renamed over the database.
"""

from __future__ import annotations

import logging
import os
import time
from collections import Counter
from pathlib import Path
from typing import Callable, Optional, TextIO

from common.config import ToolsConfig, get_config
from common.errors import DatabaseError
from feed_db.models import DATABASE_COLUMNS, DATABASE_HEADER, Entry

logger = logging.getLogger(__name__)

DATABASE_ENV_VAR = "FEEDUTILS_DB"
DATABASE_NAME = "feedutils.tsv"


def get_database_path() -> Path:
    """Locate the database from $FEEDUTILS_DB, $XDG_DATA_HOME or $HOME.

    The file does not have to exist yet.
    """
    if os.environ.get(DATABASE_ENV_VAR):
        return Path(os.environ[DATABASE_ENV_VAR])
    if os.environ.get("XDG_DATA_HOME"):
        return Path(os.environ["XDG_DATA_HOME"]) / DATABASE_NAME
    if os.environ.get("HOME"):
        return Path(os.environ["HOME"]) / ".local" / "share" / DATABASE_NAME
    raise DatabaseError("No env var set for database path")


def get_lockfile_path(database_path: Path) -> Path:
    return database_path.with_name(database_path.name + ".lock")


def open_lockfile(path: Path, retry_delay: float, timeout: float) -> TextIO:
    """Create path exclusively, retrying with doubling delays while it exists.

    Raises:
        DatabaseError: If the file still exists once the delay reaches
            timeout, or cannot be created at all.
    """
    delay = retry_delay
    while True:
        try:
            return open(path, "x", encoding="utf-8", newline="\n")
        except FileExistsError as e:
            if delay >= timeout:
                raise DatabaseError(f"Unable to lock database: already locked: {path}") from e
            logger.debug("Database locked, retrying in %.2fs", delay)
            time.sleep(delay)
            delay *= 2
        except OSError as e:
            raise DatabaseError(f"Unable to lock database: {e.strerror or e}: {path}") from e


def parse_line(line: str, lineno: int) -> Entry:
    fields = line.rstrip("\r\n").split("\t")
    if len(fields) < len(DATABASE_COLUMNS):
        missing = DATABASE_COLUMNS[len(fields)]
        raise DatabaseError(f"Missing {missing} field on line {lineno}")
    feed, entry_id, updated, title, link, read = fields[: len(DATABASE_COLUMNS)]
    return Entry(feed, entry_id, updated, title, link, read == "read")


def read_entries(path: Path) -> list[Entry]:
    """Read every entry. A database that does not exist yet is empty."""
    try:
        with open(path, encoding="utf-8", newline="\n") as f:
            # The first line is the header.
            return [parse_line(line, lineno) for lineno, line in enumerate(f, start=1) if lineno > 1]
    except FileNotFoundError:
        logger.debug("No database at %s yet", path)
        return []
    except UnicodeDecodeError as e:
        raise DatabaseError(f"Database read error: {e}: {path}") from e
    except OSError as e:
        raise DatabaseError(f"Database read error: {e.strerror or e}: {path}") from e


def write_entries(out: TextIO, entries: list[Entry]) -> None:
    out.write(DATABASE_HEADER)
    for entry in entries:
        out.write(entry.to_line())


def remove_lockfile(path: Path) -> None:
    try:
        path.unlink()
    except OSError as e:
        logger.error("Unable to delete lockfile: %s", e)


def modify_database(
    modifier: Callable[[list[Entry]], list[Entry]],
    database_path: Path,
    config: Optional[ToolsConfig] = None,
) -> None:
    """Replace the database contents with modifier(entries), holding the lock throughout.

    The lockfile is removed again if anything fails, leaving the database
    untouched.
    """
    config = config or get_config()
    database_path.parent.mkdir(parents=True, exist_ok=True)
    lockfile_path = get_lockfile_path(database_path)
    lockfile = open_lockfile(lockfile_path, config.lock_retry_delay, config.lock_timeout)

    try:
        with lockfile:
            entries = modifier(read_entries(database_path))
            try:
                write_entries(lockfile, entries)
                lockfile.flush()
                os.fsync(lockfile.fileno())
            except OSError as e:
                raise DatabaseError(f"Unable to write database: {e.strerror or e}: {lockfile_path}") from e
        try:
            os.replace(lockfile_path, database_path)
        except OSError as e:
            raise DatabaseError(f"Unable to replace database: {e.strerror or e}: {lockfile_path}") from e
    except BaseException:
        remove_lockfile(lockfile_path)
        raise

    logger.debug("Wrote %d entries to %s", len(entries), database_path)


def merge_feed(feed_name: str, feed_entries: list[Entry], database_entries: list[Entry]) -> list[Entry]:
    """Merge freshly fetched entries of one feed into the database entries.

    Entries of other feeds are kept as they are. Entries already stored keep
    their stored copy and read state. Stored entries that left the feed are
    kept only while unread. New entries are appended in feed order.
    """
    new_entries = {entry.id: entry for entry in feed_entries}

    merged = []
    for entry in database_entries:
        if entry.feed != feed_name:
            merged.append(entry)
        elif new_entries.pop(entry.id, None) is not None:
            merged.append(entry)
        elif not entry.read:
            merged.append(entry)

    merged.extend(new_entries.values())
    return merged


def get_feed_entries(feed_name: str, database_path: Path) -> list[Entry]:
    """Entries of one feed, oldest first (by updated, then id)."""
    entries = [entry for entry in read_entries(database_path) if entry.feed == feed_name]
    entries.sort(key=lambda entry: (entry.updated, entry.id))
    return entries


def count_unread_entries(database_path: Path) -> Counter[str]:
    """Number of unread entries per feed; feeds with none are absent."""
    return Counter(entry.feed for entry in read_entries(database_path) if not entry.read)
