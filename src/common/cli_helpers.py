"""Common CLI helper utilities."""

from __future__ import annotations

import argparse
import logging
import sys

import yaml
from dotenv import load_dotenv

from common.config import ToolsConfig, load_config, set_config

logger = logging.getLogger(__name__)


def setup_logging(prog: str, verbose: bool = False) -> None:
    """Configure one-line "prog: message" diagnostics on stderr."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format=f"{prog.replace('%', '%%')}: %(message)s",
        stream=sys.stderr,
        force=True,
    )


def use_utf8_stdout(errors: str = "strict") -> None:
    """Encode standard output as UTF-8 whatever the locale says."""
    reconfigure = getattr(sys.stdout, "reconfigure", None)
    if reconfigure is not None:
        reconfigure(encoding="utf-8", errors=errors)


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the --config and --verbose options shared by every tool."""
    parser.add_argument(
        "--config",
        default=None,
        help="Config name (default/test) or path to YAML file. "
        "Defaults to $FEEDTOOLS_CONFIG or 'default'",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log state transitions and rendered records",
    )


def init_cli(prog: str, args: argparse.Namespace) -> ToolsConfig:
    """Set up logging, UTF-8 stdout and the global config for a CLI run.

    Exits with status 1 if the config cannot be loaded.
    """
    load_dotenv()
    setup_logging(prog, args.verbose)
    use_utf8_stdout()
    try:
        config = load_config(args.config)
    except (OSError, ValueError, TypeError, yaml.YAMLError) as e:
        logger.error("failed to load config: %s", e)
        sys.exit(1)
    set_config(config)
    return config
