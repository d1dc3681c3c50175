"""Configuration package for rssdd."""

from __future__ import annotations

from rssdd.config.config import (
    ConfigManager,
    create_default_config,
    get_config,
    init_config,
    reload_config,
    set_config,
)
from rssdd.models import Config

__all__ = [
    "Config",
    "ConfigManager",
    "create_default_config",
    "get_config",
    "init_config",
    "reload_config",
    "set_config",
]
