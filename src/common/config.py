"""Shared configuration for the feed tools."""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable

import yaml

CONFIG_DIR = Path(__file__).parent / "configs"
CONFIG_ENV_VAR = "FEEDTOOLS_CONFIG"


@dataclass
class ToolsConfig:
    read_chunk_size: int = 4096
    arena_capacity: int = 1_000_000  # bytes of field text per channel/item
    unknown_author: str = "Unknown Author"
    updated_placeholder: str = "1970-01-01T00:00:00Z"
    request_timeout: int = 30
    user_agent: str = "rss2atom/1.0 (feed converter)"
    # Entry database lock: first retry delay, doubled until it reaches the timeout.
    lock_retry_delay: float = 0.05
    lock_timeout: float = 2.0


POSITIVE_FIELDS = (
    "read_chunk_size",
    "arena_capacity",
    "request_timeout",
    "lock_retry_delay",
    "lock_timeout",
)


def find_config_path(config_name: str | None, config_dir: Path = CONFIG_DIR) -> Path:
    """Resolve --config to a file: a .yaml/.yml path as given, else a name under config_dir.

    With no name, $FEEDTOOLS_CONFIG or "default" is used.
    """
    if config_name is None:
        config_name = os.environ.get(CONFIG_ENV_VAR) or "default"

    if config_name.endswith((".yaml", ".yml")):
        config_path = Path(config_name)
    else:
        config_path = config_dir / f"{config_name}.yaml"
    if not config_path.is_file():
        raise FileNotFoundError(f"config file not found: {config_path}")
    return config_path


def load_yaml(path: Path) -> dict:
    """Read a config file; an empty file gives an empty dict."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping of config keys")
    return data


def parse_config(data: dict) -> ToolsConfig:
    known = {f.name for f in fields(ToolsConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ValueError(f"Unknown config keys: {', '.join(unknown)}")

    config = ToolsConfig(**data)
    for name in POSITIVE_FIELDS:
        if getattr(config, name) <= 0:
            raise ValueError(f"{name} must be positive")
    return config


def load_config(config_name: str | None = None) -> ToolsConfig:
    """Load a ToolsConfig from a name under common/configs or a YAML path."""
    return parse_config(load_yaml(find_config_path(config_name)))


class ConfigSingleton:
    """The ToolsConfig installed by the running command, loaded from "default" on first use."""

    def __init__(self, loader: Callable[[], ToolsConfig] | None = None):
        self._config: ToolsConfig | None = None
        self._loader = loader

    def get(self) -> ToolsConfig:
        if self._config is None:
            if self._loader is None:
                raise RuntimeError("No config loaded and no loader set")
            self._config = self._loader()
        return self._config

    def set(self, config: ToolsConfig) -> None:
        self._config = config

    def reset(self) -> None:
        self._config = None


_manager = ConfigSingleton(load_config)
get_config = _manager.get
set_config = _manager.set
reset_config = _manager.reset
