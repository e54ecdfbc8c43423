"""CLIs for the entry database: feed-update, feed-read, feed-unread,
feed-markasread and feed-delete."""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from typing import Optional

from common.cli_helpers import add_common_arguments, init_cli
from common.config import ToolsConfig
from common.errors import FeedError
from feed_db.database import count_unread_entries, get_database_path, get_feed_entries
from feed_db.feed_db import delete_feed_entries, mark_feed_as_read, read_entry, update_feed
from feed_db.feeds import get_all_feed_names, get_feed_dir

logger = logging.getLogger(__name__)


def parse_args(
    parser: argparse.ArgumentParser,
    argv: Optional[list[str]],
) -> tuple[argparse.Namespace, ToolsConfig]:
    add_common_arguments(parser)
    args = parser.parse_args(argv)
    return args, init_cli(parser.prog, args)


def update_main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="feed-update",
        description="Fetch feeds and merge new entries into the database",
    )
    parser.add_argument("feed", nargs="?", help="Feed name (default: every feed)")
    args, config = parse_args(parser, argv)

    if args.feed is not None:
        feeds = [args.feed]
    else:
        try:
            feeds = get_all_feed_names()
        except FeedError as e:
            logger.error("%s", e)
            sys.exit(1)

    ok = True
    for feed_name in feeds:
        print(f"Updating feed {feed_name}", flush=True)
        try:
            update_feed(feed_name, config)
        except FeedError as e:
            logger.error("%s", e)
            ok = False
    if not ok:
        sys.exit(1)


def read_main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="feed-read",
        description="Open every unread entry of the given feeds, oldest first",
    )
    parser.add_argument("feeds", nargs="+", metavar="feed", help="Feed name")
    args, config = parse_args(parser, argv)

    ok = True
    for feed_name in args.feeds:
        try:
            get_feed_dir(feed_name)
        except FeedError as e:
            logger.error("%s", e)
            ok = False
            continue

        try:
            database_path = get_database_path()
            entries = get_feed_entries(feed_name, database_path)
        except FeedError as e:
            logger.error("%s", e)
            sys.exit(1)

        for entry in entries:
            if entry.read:
                continue
            try:
                read_entry(entry, database_path, config)
            except FeedError as e:
                logger.error("%s", e)
                ok = False
    if not ok:
        sys.exit(1)


def unread_main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="feed-unread",
        description="Print the number of unread entries of each feed",
    )
    parse_args(parser, argv)

    try:
        counts = count_unread_entries(get_database_path())
    except FeedError as e:
        logger.error("%s", e)
        sys.exit(1)

    for feed_name, unread in sorted(counts.items(), key=lambda item: (item[1], item[0])):
        print(f"{unread:>4} {feed_name}")


def markasread_main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="feed-markasread", description="Mark every entry of a feed as read")
    parser.add_argument("feed", help="Feed name")
    args, config = parse_args(parser, argv)

    try:
        get_feed_dir(args.feed)
        database_path = get_database_path()
    except FeedError as e:
        logger.error("%s", e)
        sys.exit(1)

    try:
        mark_feed_as_read(args.feed, database_path, config)
    except FeedError as e:
        logger.error("Failed to mark %s as read: %s", args.feed, e)
        sys.exit(1)


def delete_main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(prog="feed-delete", description="Delete a feed's entries and its configuration")
    parser.add_argument("feed", help="Feed name")
    args, config = parse_args(parser, argv)

    try:
        feed_dir = get_feed_dir(args.feed)
        database_path = get_database_path()
    except FeedError as e:
        logger.error("%s", e)
        sys.exit(1)

    try:
        delete_feed_entries(args.feed, database_path, config)
    except FeedError as e:
        logger.error("Failed to delete entries: %s", e)
        sys.exit(1)

    try:
        shutil.rmtree(feed_dir)
    except OSError as e:
        logger.error("Failed to delete feed configuration: %s", e)
        sys.exit(1)
