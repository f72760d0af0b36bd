"""Click CLI for imgdelivery — inspect and manage an image cache."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any, NoReturn

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from imgdelivery.cache.keys import as_description
from imgdelivery.cache.stats import scan_usage
from imgdelivery.cache.store import CacheStore
from imgdelivery.config.hierarchy import load_config_hierarchy
from imgdelivery.config.schema import build_store
from imgdelivery.errors.exceptions import ImageDeliveryError
from imgdelivery.providers.encoded import EncodedProvider
from imgdelivery.types import TransformDescription

console = Console()
error_console = Console(stderr=True)


def _setup_logging(verbosity: int, base_level: str = "WARNING") -> None:
    """Configure logging from the configured level, raised by -v flags."""
    level = logging.getLevelName(base_level.upper())
    if not isinstance(level, int):
        level = logging.WARNING
    if verbosity == 1:
        level = min(level, logging.INFO)
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _fail(error: Exception) -> NoReturn:
    error_console.print(f"[red]Error:[/red] {error}")
    sys.exit(1)


def _store_options(fn: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every command that opens a cache."""
    fn = click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")(fn)
    fn = click.option(
        "--format", "filetypes", multiple=True, help="Candidate extension (repeatable, in order)."
    )(fn)
    fn = click.option("--base-url", type=str, default=None, help="Public URL of the cache root.")(fn)
    fn = click.option(
        "--root", type=click.Path(file_okay=False), default=None, help="Cache root directory."
    )(fn)
    return fn


def _open_store(
    root: str | None,
    base_url: str | None,
    filetypes: tuple[str, ...],
    verbose: int,
) -> CacheStore:
    config = load_config_hierarchy(
        cache_root=root,
        base_url=base_url,
        filetypes=list(filetypes) or None,
    )
    _setup_logging(verbose, str(config.get("log_level", "WARNING")))
    try:
        return build_store(config)
    except ImageDeliveryError as e:
        _fail(e)


def _description(source: str, steps: tuple[str, ...]) -> TransformDescription:
    return as_description({"source": source, "steps": steps})


@click.group()
@click.version_option(package_name="imgdelivery")
def cli() -> None:
    """imgdelivery — content-addressed disk cache for derived images."""


@cli.command()
@click.argument("source")
@click.argument("steps", nargs=-1)
@_store_options
def path(
    source: str,
    steps: tuple[str, ...],
    root: str | None,
    base_url: str | None,
    filetypes: tuple[str, ...],
    verbose: int,
) -> None:
    """Print the cache path stem for SOURCE transformed by STEPS."""
    store = _open_store(root, base_url, filetypes, verbose)
    try:
        stem = store.filename(_description(source, steps))
    except ImageDeliveryError as e:
        _fail(e)
    console.print(stem)


@cli.command()
@click.argument("source")
@click.argument("steps", nargs=-1)
@_store_options
def exists(
    source: str,
    steps: tuple[str, ...],
    root: str | None,
    base_url: str | None,
    filetypes: tuple[str, ...],
    verbose: int,
) -> None:
    """Print the URL of a cached image; exit 1 if it is not cached."""
    store = _open_store(root, base_url, filetypes, verbose)
    try:
        location = store.exists(_description(source, steps))
    except ImageDeliveryError as e:
        _fail(e)
    if location is None:
        error_console.print("[yellow]Not cached.[/yellow]")
        sys.exit(1)
    console.print(location.url)
    if verbose >= 1:
        error_console.print(str(location.path))


@cli.command()
@click.argument("source")
@click.argument("steps", nargs=-1)
@click.option("-o", "--output", type=click.Path(dir_okay=False), required=True, help="Output file.")
@_store_options
def get(
    source: str,
    steps: tuple[str, ...],
    output: str,
    root: str | None,
    base_url: str | None,
    filetypes: tuple[str, ...],
    verbose: int,
) -> None:
    """Copy a cached image to OUTPUT; exit 1 if it is not cached."""
    store = _open_store(root, base_url, filetypes, verbose)
    try:
        data = store.get(_description(source, steps))
    except ImageDeliveryError as e:
        _fail(e)
    if data is None:
        error_console.print("[yellow]Not cached.[/yellow]")
        sys.exit(1)
    Path(output).write_bytes(data)
    console.print(f"[green]Written to {output}[/green]")


@cli.command()
@click.argument("image_file", type=click.Path(exists=True, dir_okay=False))
@click.argument("source")
@click.argument("steps", nargs=-1)
@_store_options
def put(
    image_file: str,
    source: str,
    steps: tuple[str, ...],
    root: str | None,
    base_url: str | None,
    filetypes: tuple[str, ...],
    verbose: int,
) -> None:
    """Store IMAGE_FILE as the result of SOURCE transformed by STEPS."""
    store = _open_store(root, base_url, filetypes, verbose)
    try:
        provider = EncodedProvider(
            _description(source, steps),
            Path(image_file).read_bytes,
            formats=store.filetypes,
        )
        location = store.set(provider)
    except ImageDeliveryError as e:
        _fail(e)
    console.print(location.url)


@cli.command()
@click.argument("source")
@click.argument("steps", nargs=-1)
@_store_options
def clear(
    source: str,
    steps: tuple[str, ...],
    root: str | None,
    base_url: str | None,
    filetypes: tuple[str, ...],
    verbose: int,
) -> None:
    """Remove the cached image for SOURCE transformed by STEPS."""
    store = _open_store(root, base_url, filetypes, verbose)
    try:
        store.clear(_description(source, steps))
    except ImageDeliveryError as e:
        _fail(e)
    console.print("[green]Cleared.[/green]")


@cli.command()
@_store_options
def stats(
    root: str | None,
    base_url: str | None,
    filetypes: tuple[str, ...],
    verbose: int,
) -> None:
    """Show what is stored under the cache root."""
    store = _open_store(root, base_url, filetypes, verbose)
    try:
        usage = scan_usage(store.location.path)
    except OSError as e:
        _fail(e)

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")

    table.add_row("Root", str(store.location.path))
    table.add_row("URL", store.location.url)
    table.add_row("Entries", str(usage.entries))
    table.add_row("Size (MB)", f"{usage.size_mb:.1f}")
    for extension, count in sorted(usage.formats.items()):
        table.add_row(f"  .{extension}", str(count))

    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    cli()
