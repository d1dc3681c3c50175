"""Bencode inspection command.

Prints the top-level shape of a bencoded file: ``int``, ``string`` or
``list``, or one line per key for a dictionary.
"""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from rssdd.core.bencode import DEFAULT_MAX_DEPTH, decode
from rssdd.core.metainfo import MetainfoSummary, describe_shape, summarize_value
from rssdd.utils.exceptions import BencodeError, TorrentError


def show_summary(summary: MetainfoSummary, console: Console) -> None:
    """Show a metainfo summary table."""
    table = Table(title="Metainfo")
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Name", summary.name)
    table.add_row("Info Hash", summary.info_hash_hex)
    table.add_row("Files", str(summary.file_count))
    table.add_row("Total Size", f"{summary.total_length} bytes")
    table.add_row("Announce", summary.announce or "-")

    console.print(table)


@click.command("inspect")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option(
    "--summary",
    is_flag=True,
    help="Also show a torrent metainfo summary",
)
@click.option(
    "--max-depth",
    type=click.IntRange(min=1),
    default=DEFAULT_MAX_DEPTH,
    show_default=True,
    help="Maximum list/dict nesting depth",
)
@click.option("--strict", is_flag=True, help="Reject trailing bytes after the value")
def inspect(file: str, summary: bool, max_depth: int, strict: bool) -> None:
    """Print the top-level shape of a bencoded FILE."""
    try:
        with open(file, "rb") as f:
            value = decode(f, max_depth=max_depth, strict=strict)
    except BencodeError as e:
        msg = f"Unable to decode: {e}"
        raise click.ClickException(msg) from e
    except OSError as e:
        msg = f"Unable to read {file}: {e}"
        raise click.ClickException(msg) from e

    for line in describe_shape(value):
        click.echo(line)

    if summary:
        try:
            info = summarize_value(value)
        except TorrentError as e:
            raise click.ClickException(str(e)) from e
        show_summary(info, Console())


def main() -> None:
    """Standalone inspector entry point."""
    inspect()


if __name__ == "__main__":
    main()
