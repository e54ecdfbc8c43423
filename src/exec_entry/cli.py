"""CLI for running a program with an Atom entry's fields in its environment."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from common.cli_helpers import add_common_arguments, init_cli
from common.errors import FeedError, FeedReadError
from common.sources import read_chunks
from exec_entry.exec_entry import exec_child, extract_entry_fields

logger = logging.getLogger(__name__)


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="atom-exec",
        description="Run CHILD with TITLE, LINK, CONTENT and UPDATED set from an Atom entry",
    )
    parser.add_argument("file", help="Atom entry file")
    parser.add_argument("child", help="Program to execute")
    parser.add_argument("child_args", nargs=argparse.REMAINDER, help="Arguments for the program")
    add_common_arguments(parser)
    args = parser.parse_args(argv)
    config = init_cli("atom-exec", args)

    try:
        try:
            stream = open(args.file, "rb")
        except OSError as e:
            raise FeedReadError(f"open({args.file}): {e.strerror or e}") from e
        with stream:
            values = extract_entry_fields(read_chunks(stream, config.read_chunk_size), config)
    except FeedError as e:
        logger.error("%s", e)
        sys.exit(1)

    try:
        exec_child(values, args.child, args.child_args)
    except OSError as e:
        logger.error("exec(): %s", e.strerror or e)
        sys.exit(1)


if __name__ == "__main__":
    main()
