"""CLI for listing the entry ids of an Atom feed read from stdin."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from common.cli_helpers import add_common_arguments, init_cli
from common.errors import FeedError
from common.sources import read_chunks
from list_entries.list_entries import list_entries

logger = logging.getLogger(__name__)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="atom-list",
        description="Print the filesystem-escaped id of each entry, NUL-terminated",
    )
    add_common_arguments(parser)
    args = parser.parse_args(argv)
    config = init_cli("atom-list", args)

    try:
        list_entries(read_chunks(sys.stdin.buffer, config.read_chunk_size), sys.stdout, config)
    except FeedError as e:
        logger.error("%s", e)
        sys.exit(1)


if __name__ == "__main__":
    main()
