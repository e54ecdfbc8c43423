"""Helper functions for the rss2atom CLI."""

from __future__ import annotations

import argparse
from contextlib import contextmanager
from typing import Iterator, Optional

from common.cli_helpers import add_common_arguments
from common.config import ToolsConfig
from common.errors import FeedReadError
from common.sources import fetch_chunks, read_chunks


def parse_convert_feed_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    '''Parse CLI arguments for rss2atom.'''

    parser = argparse.ArgumentParser(
        prog="rss2atom",
        description="Convert an RSS feed to an Atom feed on stdout",
    )
    parser.add_argument(
        "file",
        nargs="?",
        default=None,
        help="RSS file to convert (default: stdin)",
    )
    parser.add_argument("--url", default=None, help="Fetch the RSS feed from this URL")
    add_common_arguments(parser)
    args = parser.parse_args(argv)

    if args.file and args.url:
        parser.error("give either FILE or --url, not both")
    return args


@contextmanager
def open_input(
    args: argparse.Namespace,
    stdin,
    config: ToolsConfig,
) -> Iterator[Iterator[bytes]]:
    '''Yield the chunk iterator for the input selected on the command line.'''

    if args.url:
        yield fetch_chunks(
            args.url,
            config.read_chunk_size,
            timeout=config.request_timeout,
            user_agent=config.user_agent,
        )
    elif args.file:
        try:
            stream = open(args.file, "rb")
        except OSError as e:
            raise FeedReadError(f"open({args.file}): {e.strerror or e}") from e
        with stream:
            yield read_chunks(stream, config.read_chunk_size)
    else:
        yield read_chunks(stdin, config.read_chunk_size)
