"""Operations on feeds and their entries in the database."""

from __future__ import annotations

import io
import logging
import os
import subprocess
from pathlib import Path
from typing import Optional

from common.config import ToolsConfig, get_config
from common.errors import FeedProgramError
from common.sources import read_chunks
from feed_db.database import get_database_path, merge_feed, modify_database
from feed_db.feeds import get_feed_dir
from feed_db.models import Entry
from feed_db.parse_feed import parse_feed

logger = logging.getLogger(__name__)

FETCH_PROGRAM = "fetch"
OPEN_PROGRAM = "open"
ERROR_LOG = "error.log"


def describe_status(returncode: int) -> str:
    if returncode < 0:
        return f"signal {-returncode}"
    return f"exit status {returncode}"


def run_fetch(feed_dir: Path) -> bytes:
    """Run the feed's fetch program and return what it printed.

    On failure its stderr is saved to error.log in the feed directory for
    later inspection; on success any old error.log is removed.
    """
    exec_path = feed_dir / FETCH_PROGRAM
    error_path = feed_dir / ERROR_LOG
    try:
        result = subprocess.run([str(exec_path)], capture_output=True)
    except OSError as e:
        raise FeedProgramError(f"Failed to launch fetch executable: {e.strerror or e}: {exec_path}") from e

    if result.returncode != 0:
        try:
            error_path.write_bytes(result.stderr)
        except OSError as e:
            logger.warning("Unable to save fetch errors: %s", e)
        raise FeedProgramError(f"Failed to run fetch, got {describe_status(result.returncode)}")

    try:
        error_path.unlink(missing_ok=True)
    except OSError as e:
        logger.debug("Unable to remove old error log: %s", e)
    return result.stdout


def update_feed(feed_name: str, config: Optional[ToolsConfig] = None) -> None:
    """Fetch a feed and merge its entries into the database."""
    config = config or get_config()
    feed_dir = get_feed_dir(feed_name)
    output = run_fetch(feed_dir)
    entries = parse_feed(read_chunks(io.BytesIO(output), config.read_chunk_size), feed_name, config)
    database_path = get_database_path()
    modify_database(
        lambda existing: merge_feed(feed_name, entries, existing),
        database_path,
        config,
    )
    logger.debug("Merged %d fetched entries of %s", len(entries), feed_name)


def mark_entry_as_read(
    feed_name: str,
    entry_id: str,
    database_path: Path,
    config: Optional[ToolsConfig] = None,
) -> None:
    def modifier(entries: list[Entry]) -> list[Entry]:
        for entry in entries:
            if entry.feed == feed_name and entry.id == entry_id:
                entry.read = True
        return entries

    modify_database(modifier, database_path, config)


def mark_feed_as_read(feed_name: str, database_path: Path, config: Optional[ToolsConfig] = None) -> None:
    def modifier(entries: list[Entry]) -> list[Entry]:
        for entry in entries:
            if entry.feed == feed_name:
                entry.read = True
        return entries

    modify_database(modifier, database_path, config)


def delete_feed_entries(feed_name: str, database_path: Path, config: Optional[ToolsConfig] = None) -> None:
    modify_database(
        lambda entries: [entry for entry in entries if entry.feed != feed_name],
        database_path,
        config,
    )


def read_entry(entry: Entry, database_path: Path, config: Optional[ToolsConfig] = None) -> None:
    """Run the feed's open program with TITLE and LINK set, then mark the entry read.

    The open program's exit status does not stop the entry being marked read.
    """
    exec_path = get_feed_dir(entry.feed) / OPEN_PROGRAM
    env = {**os.environ, "TITLE": entry.title, "LINK": entry.link}
    try:
        result = subprocess.run([str(exec_path)], env=env)
    except OSError as e:
        raise FeedProgramError(f"Failed to launch open executable: {e.strerror or e}: {exec_path}") from e
    if result.returncode != 0:
        logger.warning("open exited with %s for %s", describe_status(result.returncode), entry.id)

    mark_entry_as_read(entry.feed, entry.id, database_path, config)
