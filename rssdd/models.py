"""Pydantic models for rssdd.

Provides validated configuration models for type safety and runtime validation.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from rssdd.core.bencode import DEFAULT_MAX_DEPTH


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: LogLevel = Field(default=LogLevel.INFO, description="Log level")
    log_file: str | None = Field(None, description="Log file path")
    structured_logging: bool = Field(
        default=False,
        description="Emit JSON log lines instead of rich console output",
    )
    log_correlation_id: bool = Field(
        default=True,
        description="Include correlation IDs",
    )


class CodecConfig(BaseModel):
    """Limits applied when decoding untrusted bencoded data."""

    max_depth: int = Field(
        default=DEFAULT_MAX_DEPTH,
        ge=1,
        le=10000,
        description="Maximum list/dict nesting depth",
    )
    max_input_bytes: int = Field(
        default=10 * 1024 * 1024,
        ge=1,
        description="Maximum size of a bencoded blob accepted for decoding",
    )


class FeedConfig(BaseModel):
    """A single RSS feed to watch."""

    url: str = Field(..., description="Feed URL")
    interval: int = Field(
        default=300,
        ge=1,
        description="Seconds between polls",
    )
    match: list[str] = Field(
        default_factory=list,
        description="Regular expressions matched against item titles",
    )
    folder: str = Field(default=".", description="Download directory")
    cookie: str | None = Field(
        default=None,
        description="Cookie header sent with download requests",
    )

    @field_validator("match")
    @classmethod
    def validate_patterns(cls, v: list[str]) -> list[str]:
        """Ensure every pattern compiles."""
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as e:
                msg = f"Invalid match pattern {pattern!r}: {e}"
                raise ValueError(msg) from e
        return v

    def compiled_patterns(self) -> list[re.Pattern[str]]:
        """Return the match patterns compiled."""
        return [re.compile(pattern) for pattern in self.match]


class DiscordConfig(BaseModel):
    """Discord notification settings."""

    token: str = Field(default="", description="Discord bot token")
    channel: str = Field(default="", description="Channel name to post to")
    api_base: str = Field(
        default="https://discord.com/api/v10",
        description="Discord REST API base URL",
    )

    @property
    def enabled(self) -> bool:
        """Whether notifications should be sent."""
        return bool(self.token and self.channel)


class StorageConfig(BaseModel):
    """Download history storage settings."""

    data_dir: str = Field(
        default="~/.local/share/rssdd",
        description="Directory holding the download history database",
    )
    database_name: str = Field(
        default="downloads.db",
        description="History database file name",
    )

    @property
    def db_path(self) -> Path:
        """Full path to the history database."""
        return Path(self.data_dir).expanduser() / self.database_name


class Config(BaseModel):
    """Main rssdd configuration."""

    feeds: list[FeedConfig] = Field(default_factory=list)
    discord: DiscordConfig = Field(default_factory=DiscordConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    codec: CodecConfig = Field(default_factory=CodecConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)
