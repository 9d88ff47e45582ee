"""CLI entry point for tomltree.

Invoked as::

    tomltree [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m tomltree.cli.main

Commands
--------
check       Parse a TOML file and report the first error
dump        Dump the parsed tree to JSON or YAML
get         Print the value stored at a dotted key
tokens      Show the token stream of a TOML file
version     Show version information
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

if TYPE_CHECKING:
    from tomltree.tree.nodes import Tree

console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def _configure_logging(level: str) -> None:
    """Send library log records to stderr through rich."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _read_source(path: str) -> str:
    """Read a TOML source file, exiting on error."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        err_console.print(f"[red]Error:[/red] File not found: {escape(path)}")
        sys.exit(1)
    except OSError as exc:
        err_console.print(f"[red]Error:[/red] Cannot read {escape(path)}: {escape(str(exc))}")
        sys.exit(1)


def _parse_or_exit(source: str, path: str) -> "Tree":
    """Parse TOML source, printing the error and exiting on failure."""
    from tomltree import ParseError, parse

    try:
        return parse(source)
    except ParseError as exc:
        err_console.print(
            f"[red]{exc.kind.name.lower()} error[/red] in {escape(path)}: {escape(str(exc))}"
        )
        sys.exit(1)


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="tomltree")
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar="TOMLTREE_LOG_LEVEL",
    show_default=True,
    help="Verbosity of diagnostic logging on stderr",
)
def cli(log_level: str) -> None:
    """Parse TOML documents into typed trees and inspect them."""
    _configure_logging(log_level)


# ---------------------------------------------------------------------------
# version command
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from tomltree import __version__

    table = Table(show_header=False, box=None)
    table.add_row("[bold]tomltree[/bold]", f"v{__version__}")
    table.add_row("Python", f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}")
    table.add_row("Platform", sys.platform)
    console.print(table)


# ---------------------------------------------------------------------------
# check command
# ---------------------------------------------------------------------------


@cli.command(name="check")
@click.argument("file", type=click.Path(exists=False))
def check_command(file: str) -> None:
    """Parse a TOML file and report whether it is valid.

    FILE is the path to the .toml file to check.
    """
    source = _read_source(file)
    tree = _parse_or_exit(source, file)
    logger.info("checked %s", file)
    console.print(f"[green]OK[/green] {escape(file)} ({len(tree)} top-level key(s))")


# ---------------------------------------------------------------------------
# dump command
# ---------------------------------------------------------------------------


@cli.command(name="dump")
@click.argument("file", type=click.Path(exists=False))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "yaml"], case_sensitive=False),
    default="json",
    help="Tree output format",
)
@click.option("--typed", is_flag=True, default=False, help="Tag every scalar with its type")
@click.option("--output", "-o", default=None, help="Output file path (defaults to stdout)")
def dump_command(file: str, output_format: str, typed: bool, output: str | None) -> None:
    """Parse a TOML file and dump the tree.

    FILE is the path to the .toml file to parse.
    """
    from tomltree.tree import TreeSerializer

    source = _read_source(file)
    tree = _parse_or_exit(source, file)

    serializer = TreeSerializer()

    if output_format.lower() == "json":
        text = serializer.to_json(tree, typed=typed, indent=2)
        lang = "json"
    else:
        text = serializer.to_yaml(tree, typed=typed)
        lang = "yaml"

    if output:
        Path(output).write_text(text, encoding="utf-8")
        console.print(f"[green]Tree written to[/green] {escape(output)}")
    else:
        console.print(Syntax(text, lang, line_numbers=True))


# ---------------------------------------------------------------------------
# get command
# ---------------------------------------------------------------------------


@cli.command(name="get")
@click.argument("file", type=click.Path(exists=False))
@click.argument("key")
def get_command(file: str, key: str) -> None:
    """Print the value stored at KEY in FILE.

    KEY is a dotted key such as ``server.port``.  Table arrays resolve
    to their last element on the way.
    """
    from tomltree.parser import split_key
    from tomltree.tree import Scalar, TreeSerializer

    source = _read_source(file)
    tree = _parse_or_exit(source, file)

    try:
        keys = split_key(key)
    except ValueError as exc:
        err_console.print(f"[red]Error:[/red] invalid key {escape(key)}: {escape(str(exc))}")
        sys.exit(1)

    value = tree.get_path(keys)
    if value is None:
        err_console.print(f"[red]Error:[/red] key not found: {escape(key)}")
        sys.exit(1)

    serializer = TreeSerializer()
    if isinstance(value, Scalar):
        click.echo(serializer.scalar_text(value))
    else:
        click.echo(serializer.to_json(value, indent=2))


# ---------------------------------------------------------------------------
# tokens command
# ---------------------------------------------------------------------------


@cli.command(name="tokens")
@click.argument("file", type=click.Path(exists=False))
def tokens_command(file: str) -> None:
    """Show the token stream the lexer produces for FILE."""
    from tomltree.grammar import TokenType
    from tomltree.lexer import tokenize

    source = _read_source(file)
    tokens = tokenize(source)

    table = Table(title=f"Tokens: {escape(file)}")
    table.add_column("Position", style="dim", no_wrap=True)
    table.add_column("Type", style="cyan")
    table.add_column("Value")
    for tok in tokens:
        style = "red" if tok.type is TokenType.ERROR else ""
        table.add_row(str(tok.position), tok.type.name, escape(repr(tok.value)), style=style)
    console.print(table)

    if tokens and tokens[-1].type is TokenType.ERROR:
        sys.exit(1)


if __name__ == "__main__":
    cli()
