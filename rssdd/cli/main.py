"""Command-line interface for rssdd.

Provides commands:
- run: watch configured feeds and download matching items
- inspect: print the shape of a bencoded file
- history: show recent downloads
- config show / config init
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from pathlib import Path

import aiohttp
import click
from rich.console import Console
from rich.table import Table

from rssdd.cli.inspect import inspect as inspect_cmd
from rssdd.config.config import (
    ConfigManager,
    create_default_config,
    default_search_paths,
)
from rssdd.feed.history import DownloadHistory
from rssdd.feed.notifier import DiscordNotifier, Notifier, NullNotifier
from rssdd.feed.watcher import FeedWatcher
from rssdd.models import Config, LogLevel
from rssdd.utils.exceptions import ConfigurationError, NotificationError, StorageError
from rssdd.utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path.home() / ".config" / "rssdd" / "rssdd.toml"

# Applies to one feed fetch or one download request
HTTP_TIMEOUT_SECONDS = 300


def _get_config_manager(ctx: click.Context) -> ConfigManager:
    """Load the configuration once per invocation."""
    obj = ctx.ensure_object(dict)
    if "config_manager" not in obj:
        try:
            cfg_mgr = ConfigManager(obj.get("config_file"))
        except ConfigurationError as e:
            raise click.ClickException(str(e)) from e
        if obj.get("verbose"):
            cfg_mgr.config.observability.log_level = LogLevel.DEBUG
            setup_logging(cfg_mgr.config.observability)
        obj["config_manager"] = cfg_mgr
    return obj["config_manager"]


@click.group()
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(dir_okay=False),
    help="Configuration file path",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_file: str | None, verbose: bool) -> None:
    """rssdd - download matching RSS feed items."""
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    ctx.obj["verbose"] = verbose


async def _run_watcher(config: Config) -> None:
    timeout = aiohttp.ClientTimeout(total=HTTP_TIMEOUT_SECONDS)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        with DownloadHistory(config.storage.db_path) as history:
            notifier: Notifier = NullNotifier()
            if config.discord.enabled:
                discord = DiscordNotifier(
                    config.discord.token,
                    config.discord.channel,
                    session,
                    api_base=config.discord.api_base,
                )
                try:
                    await discord.resolve_channel_id()
                except NotificationError as e:
                    logger.warning("Discord notifications unavailable: %s", e)
                else:
                    notifier = discord

            watcher = FeedWatcher(config, history, notifier, session)
            await watcher.run()


@cli.command()
@click.pass_context
def run(ctx: click.Context) -> None:
    """Watch configured feeds and download matching items."""
    obj = ctx.ensure_object(dict)
    if obj.get("config_file") is None and not any(
        p.exists() for p in default_search_paths()
    ):
        try:
            path = create_default_config(DEFAULT_CONFIG_PATH)
        except ConfigurationError as e:
            raise click.ClickException(str(e)) from e
        click.echo(f"Created default configuration at {path}")

    config = _get_config_manager(ctx).config
    logger.info("Download history: %s", config.storage.db_path)
    try:
        asyncio.run(_run_watcher(config))
    except StorageError as e:
        raise click.ClickException(str(e)) from e
    except KeyboardInterrupt:
        click.echo("Stopped")


@cli.command()
@click.option("--limit", "-n", type=click.IntRange(min=1), default=20, show_default=True)
@click.pass_context
def history(ctx: click.Context, limit: int) -> None:
    """Show recently downloaded items."""
    config = _get_config_manager(ctx).config
    console = Console()
    try:
        with DownloadHistory(config.storage.db_path) as store:
            entries = store.recent(limit)
    except StorageError as e:
        raise click.ClickException(str(e)) from e

    if not entries:
        console.print("[yellow]No downloads recorded[/yellow]")
        return

    table = Table(title="Downloads")
    table.add_column("When", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Link")
    for entry in entries:
        when = datetime.fromtimestamp(entry.created_at).strftime("%Y-%m-%d %H:%M:%S")
        table.add_row(when, entry.title, entry.link)
    console.print(table)


@cli.group()
def config() -> None:
    """Configuration commands."""


@config.command("show")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["toml", "json"]),
    default="toml",
    show_default=True,
)
@click.pass_context
def config_show(ctx: click.Context, fmt: str) -> None:
    """Print the effective configuration."""
    click.echo(_get_config_manager(ctx).export(fmt))


@config.command("init")
@click.argument("path", type=click.Path(dir_okay=False), required=False)
def config_init(path: str | None) -> None:
    """Write a default configuration file to PATH."""
    target = Path(path) if path else DEFAULT_CONFIG_PATH
    if target.exists():
        click.echo(f"Configuration already exists at {target}")
        return
    try:
        written = create_default_config(target)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e
    click.echo(f"Created default configuration at {written}")


cli.add_command(inspect_cmd)


def main() -> None:
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    main()
