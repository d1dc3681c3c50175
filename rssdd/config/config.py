"""Configuration management for rssdd.

Provides centralized configuration with TOML support and validation,
loaded hierarchically from defaults -> config file -> environment.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

import toml

from rssdd.models import Config
from rssdd.utils.exceptions import ConfigurationError
from rssdd.utils.logging_config import setup_logging

CONFIG_FILENAME = "rssdd.toml"

# Mapping of environment variables to config paths
ENV_MAPPINGS: dict[str, str] = {
    # Observability
    "RSSDD_LOG_LEVEL": "observability.log_level",
    "RSSDD_LOG_FILE": "observability.log_file",
    "RSSDD_STRUCTURED_LOGGING": "observability.structured_logging",
    # Storage
    "RSSDD_DATA_DIR": "storage.data_dir",
    # Discord
    "RSSDD_DISCORD_TOKEN": "discord.token",
    "RSSDD_DISCORD_CHANNEL": "discord.channel",
    # Codec limits
    "RSSDD_MAX_DEPTH": "codec.max_depth",
    "RSSDD_MAX_INPUT_BYTES": "codec.max_input_bytes",
}

# Values that must stay strings even when they look numeric or boolean
_STRING_PATHS = {
    "observability.log_level",
    "observability.log_file",
    "storage.data_dir",
    "discord.token",
    "discord.channel",
}

# Global configuration instance
_config_manager: ConfigManager | None = None


def default_search_paths() -> list[Path]:
    """Locations searched for a config file, in order."""
    return [
        Path.cwd() / CONFIG_FILENAME,
        Path.home() / ".config" / "rssdd" / CONFIG_FILENAME,
        Path.home() / f".{CONFIG_FILENAME}",
    ]


def create_default_config(path: str | Path) -> Path:
    """Write a default config file at ``path`` unless one already exists."""
    path = Path(path).expanduser()
    if path.exists():
        return path
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        data = Config().model_dump(mode="json", exclude_none=True)
        path.write_text(toml.dumps(data), encoding="utf-8")
    except OSError as e:
        msg = f"Failed to create config file {path}: {e}"
        raise ConfigurationError(msg) from e
    return path


class ConfigManager:
    """Manages configuration loading and validation."""

    def __init__(self, config_file: str | Path | None = None, setup_logs: bool = True):
        """Initialize configuration manager.

        Args:
            config_file: Path to TOML config file. If None, searches for rssdd.toml
            setup_logs: Configure logging from the loaded observability section

        """
        self.config_file = self._find_config_file(config_file)
        self.config = self._load_config()
        if setup_logs:
            self._setup_logging()

    def _find_config_file(
        self,
        config_file: str | Path | None,
    ) -> Path | None:
        """Find configuration file in standard locations."""
        if config_file:
            return Path(config_file).expanduser()

        for path in default_search_paths():
            if path.exists():
                return path

        return None

    def _load_config(self) -> Config:
        """Load configuration from file and environment."""
        config_data: dict[str, Any] = {}

        if self.config_file is not None:
            if not self.config_file.exists():
                msg = f"Config file not found: {self.config_file}"
                raise ConfigurationError(msg)
            try:
                with open(self.config_file, encoding="utf-8") as f:
                    config_data.update(toml.load(f))
            except (OSError, toml.TomlDecodeError) as e:
                msg = f"Failed to load config file {self.config_file}: {e}"
                raise ConfigurationError(msg) from e

        env_config = self._get_env_config()
        config_data = self._merge_config(config_data, env_config)

        try:
            return Config(**config_data)
        except Exception as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigurationError(msg) from e

    def _get_env_config(self) -> dict[str, Any]:
        """Get configuration from environment variables."""
        env_config: dict[str, Any] = {}

        def _parse_env_value(raw: str, path: str) -> bool | int | float | str:
            if path in _STRING_PATHS:
                return raw
            low = raw.lower()
            if low in {"true", "yes", "on"}:
                return True
            if low in {"false", "no", "off"}:
                return False
            try:
                if "." in raw:
                    return float(raw)
                return int(raw)
            except ValueError:
                return raw

        def _set_nested(d: dict[str, Any], path: str, value: Any) -> None:
            parts = path.split(".")
            cur = d
            for p in parts[:-1]:
                cur = cur.setdefault(p, {})
            cur[parts[-1]] = value

        for env_name, cfg_path in ENV_MAPPINGS.items():
            raw = os.getenv(env_name)
            if raw is None:
                continue
            _set_nested(env_config, cfg_path, _parse_env_value(raw, cfg_path))

        return env_config

    def _merge_config(
        self,
        base: dict[str, Any],
        override: dict[str, Any],
    ) -> dict[str, Any]:
        """Merge configuration dictionaries recursively."""
        result = base.copy()

        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = self._merge_config(result[key], value)
            else:
                result[key] = value

        return result

    def export(self, fmt: str = "toml") -> str:
        """Export current configuration as a string in the given format.

        Args:
            fmt: one of "toml" or "json"

        """
        data = self.config.model_dump(mode="json", exclude_none=True)

        fmt = (fmt or "toml").lower()
        if fmt == "toml":
            return toml.dumps(data)
        if fmt == "json":
            return json.dumps(data, indent=2)
        msg = f"Unsupported export format: {fmt}"
        raise ConfigurationError(msg)

    def _setup_logging(self) -> None:
        """Set up logging configuration."""
        setup_logging(self.config.observability)


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager.config


def init_config(config_file: str | Path | None = None) -> ConfigManager:
    """Initialize the global configuration manager."""
    global _config_manager
    _config_manager = ConfigManager(config_file)
    return _config_manager


def reload_config() -> Config:
    """Reload configuration from file."""
    if _config_manager is None:
        msg = "Configuration not initialized"
        raise ConfigurationError(msg)

    _config_manager.config = _config_manager._load_config()  # noqa: SLF001
    _config_manager._setup_logging()  # noqa: SLF001
    return _config_manager.config


def set_config(new_config: Config) -> None:
    """Replace the global configuration at runtime.

    Reconfigures logging based on the new config.
    """
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager(None, setup_logs=False)
    _config_manager.config = new_config
    _config_manager._setup_logging()  # noqa: SLF001
    logging.getLogger(__name__).debug("Configuration replaced at runtime")
