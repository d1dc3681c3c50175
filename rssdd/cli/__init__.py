"""Command-line interface for rssdd."""

from __future__ import annotations

from rssdd.cli.main import cli, main

__all__ = ["cli", "main"]
