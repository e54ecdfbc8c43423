"""CLI for converting an RSS feed to Atom."""

from __future__ import annotations

import logging
import sys
from typing import Optional

from common.cli_helpers import init_cli
from common.errors import FeedError
from convert_feed.convert_feed import transcode
from convert_feed.helpers import open_input, parse_convert_feed_args

logger = logging.getLogger(__name__)


def main(argv: Optional[list[str]] = None) -> None:
    args = parse_convert_feed_args(argv)
    config = init_cli("rss2atom", args)

    try:
        with open_input(args, sys.stdin.buffer, config) as chunks:
            transcode(chunks, sys.stdout, config)
    except FeedError as e:
        logger.error("%s", e)
        sys.exit(1)
    except OSError as e:
        logger.error("write(): %s", e.strerror or e)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
