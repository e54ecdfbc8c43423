"""Feed configuration directories.

Each feed is a directory named after the feed under the config directory,
holding a ``fetch`` program that prints the feed document and an ``open``
program run with TITLE and LINK set to read one entry.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from common.errors import FeedDirError
from feed_db.models import sanitize

CONFIG_DIR_ENV_VAR = "FEEDUTILS_CONFIGDIR"


def get_feed_config_dir() -> Optional[Path]:
    """$FEEDUTILS_CONFIGDIR, else feeds/ under $XDG_CONFIG_HOME or $HOME/.config."""
    if os.environ.get(CONFIG_DIR_ENV_VAR):
        return Path(os.environ[CONFIG_DIR_ENV_VAR])
    if os.environ.get("XDG_CONFIG_HOME"):
        return Path(os.environ["XDG_CONFIG_HOME"]) / "feeds"
    if os.environ.get("HOME"):
        return Path(os.environ["HOME"]) / ".config" / "feeds"
    return None


def get_feed_dir(feed_name: str) -> Path:
    config_dir = get_feed_config_dir()
    if config_dir is None or not config_dir.is_dir():
        raise FeedDirError("Cannot read feed config", feed_name)
    # A feed name is one path component.
    if feed_name in ("", ".", "..") or "/" in feed_name:
        raise FeedDirError("Feed does not exist", feed_name)
    feed_dir = config_dir / feed_name
    if not feed_dir.is_dir():
        raise FeedDirError("Feed does not exist", feed_name)
    return feed_dir


def get_all_feed_names() -> list[str]:
    config_dir = get_feed_config_dir()
    if config_dir is None:
        raise FeedDirError("Cannot list feeds: no feed config directory")
    try:
        names = [sanitize(path.name) for path in config_dir.iterdir() if path.is_dir()]
    except OSError as e:
        raise FeedDirError(f"Cannot list feeds: {e.strerror or e}: {config_dir}") from e
    return sorted(names)
