"""CLI for printing an escaped entry id in its original form."""

import argparse
import sys
from typing import Optional

from common.cli_helpers import use_utf8_stdout
from common.ids import unescape_id


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        prog="feed-unescape",
        description="Print the given escaped id in unescaped form",
    )
    parser.add_argument("id", help="Id as printed by atom-list")
    args = parser.parse_args(argv)

    # Ids taken from file names may carry undecodable bytes; write them back unchanged.
    use_utf8_stdout(errors="surrogateescape")
    sys.stdout.write(unescape_id(args.id))
    sys.stdout.flush()


if __name__ == "__main__":
    main()
