"""Click CLI for imgcache: fetch, inspect and evict cached images."""

from __future__ import annotations

import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, TypeVar

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from imgcache.cache.manager import CacheManager
from imgcache.config.hierarchy import load_config_hierarchy
from imgcache.errors.exceptions import CacheMissError, ImageCacheError
from imgcache.types import CacheOptions

console = Console()
error_console = Console(stderr=True)

T = TypeVar("T")


def _setup_logging(verbosity: int, default_level: str = "WARNING") -> None:
    """Configure logging based on verbosity level."""
    level = getattr(logging, str(default_level).upper(), logging.WARNING)
    if verbosity == 1:
        level = logging.INFO
    elif verbosity >= 2:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=error_console, show_time=False, show_path=False)],
    )


def _parse_query_params(value: str | None) -> bool | list[str]:
    if not value:
        return False
    if value.lower() == "all":
        return True
    return [name.strip() for name in value.split(",") if name.strip()]


def _parse_headers(raw: tuple[str, ...]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for item in raw:
        name, sep, value = item.partition(":")
        if not sep or not name.strip():
            raise click.BadParameter(f"Expected 'Name: value', got {item!r}", param_hint="-H")
        headers[name.strip()] = value.strip()
    return headers


def _build_options(group: str | None, query_params: str | None, headers: dict[str, str]) -> CacheOptions:
    try:
        return CacheOptions(
            cache_group=group,
            use_query_params_in_cache_key=_parse_query_params(query_params),
            headers_resolver=(lambda: headers) if headers else None,
        )
    except ValueError as e:
        raise click.BadParameter(str(e)) from e


def _run(ctx: click.Context, action: Callable[[CacheManager], Awaitable[T]], **kwargs: Any) -> T:
    """Run an async action against a manager built from the CLI config."""

    async def _main(manager: CacheManager) -> T:
        async with manager:
            return await action(manager)

    try:
        manager = CacheManager.from_config(ctx.obj["config"], **kwargs)
        return asyncio.run(_main(manager))
    except ImageCacheError as e:
        error_console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)


def _option_flags(func: Callable[..., Any]) -> Callable[..., Any]:
    func = click.option(
        "--query-params",
        type=str,
        default=None,
        help="Query params in the cache key: 'all' or comma-separated names.",
    )(func)
    func = click.option("--group", type=str, default=None, help="Cache group directory.")(func)
    return func


@click.group(name="imgcache")
@click.version_option(package_name="imgcache")
@click.option("--cache-root", type=click.Path(file_okay=False), default=None, help="Cache root directory.")
@click.option("-v", "--verbose", count=True, help="Increase verbosity (-v info, -vv debug).")
@click.pass_context
def cli(ctx: click.Context, cache_root: str | None, verbose: int) -> None:
    """imgcache: content-addressed disk cache for remote images."""
    config = load_config_hierarchy(cache_root=cache_root)
    _setup_logging(verbose, config.get("log_level", "WARNING"))
    ctx.ensure_object(dict)
    ctx.obj["config"] = config


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@_option_flags
@click.option("-H", "--header", "header", multiple=True, help="Request header 'Name: value'.")
@click.pass_context
def fetch(
    ctx: click.Context,
    urls: tuple[str, ...],
    group: str | None,
    query_params: str | None,
    header: tuple[str, ...],
) -> None:
    """Download URL(s) into the cache and print the stored paths."""
    options = _build_options(group, query_params, _parse_headers(header))

    async def action(manager: CacheManager) -> list[Path]:
        return list(await asyncio.gather(*(manager.cache_image(url, options) for url in urls)))

    for stored in _run(ctx, action):
        click.echo(str(stored))


@cli.command()
@click.argument("url")
@_option_flags
@click.pass_context
def path(ctx: click.Context, url: str, group: str | None, query_params: str | None) -> None:
    """Print the cached path of URL; exit 1 if it is not cached."""
    options = _build_options(group, query_params, {})

    async def action(manager: CacheManager) -> Path | None:
        try:
            return await manager.get_cached_image_path(url, options)
        except CacheMissError:
            return None

    cached = _run(ctx, action)
    if cached is None:
        error_console.print(f"[yellow]Not cached:[/yellow] {url}")
        sys.exit(1)
    click.echo(str(cached))


@cli.command()
@click.argument("urls", nargs=-1)
@click.option(
    "--from-file",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="File with one URL per line.",
)
@click.option("--workers", type=int, default=None, help="Cap on concurrent workers.")
@_option_flags
@click.pass_context
def prefetch(
    ctx: click.Context,
    urls: tuple[str, ...],
    from_file: str | None,
    workers: int | None,
    group: str | None,
    query_params: str | None,
) -> None:
    """Populate the cache for many URLs concurrently."""
    url_list = list(urls)
    if from_file:
        lines = Path(from_file).read_text().splitlines()
        url_list.extend(line.strip() for line in lines if line.strip())
    if not url_list:
        error_console.print("[yellow]No URLs given.[/yellow]")
        return

    options = _build_options(group, query_params, {})
    overrides: dict[str, Any] = {}
    if workers is not None:
        overrides["prefetch_workers"] = workers

    report = _run(
        ctx, lambda manager: manager.cache_multiple_images(url_list, options), **overrides
    )

    table = Table(title="Prefetch Report", show_header=True)
    table.add_column("Outcome", style="cyan")
    table.add_column("Count")
    table.add_row("Total", str(report.total))
    table.add_row("Downloaded", str(report.cached))
    table.add_row("Already cached", str(report.already_cached))
    table.add_row("Skipped (not cacheable)", str(report.skipped))
    table.add_row("Failed", f"[red]{report.failed}[/red]" if report.failed else "0")
    console.print(table)


@cli.command()
@click.argument("urls", nargs=-1, required=True)
@_option_flags
@click.pass_context
def delete(ctx: click.Context, urls: tuple[str, ...], group: str | None, query_params: str | None) -> None:
    """Delete the cached files of URL(s)."""
    options = _build_options(group, query_params, {})
    _run(ctx, lambda manager: manager.delete_multiple_cached_images(list(urls), options))
    console.print(f"[green]Deleted {len(urls)} entr{'y' if len(urls) == 1 else 'ies'}.[/green]")


@cli.command()
@click.confirmation_option(prompt="Are you sure you want to clear the cache?")
@click.pass_context
def clear(ctx: click.Context) -> None:
    """Clear all cached images."""
    _run(ctx, lambda manager: manager.clear_cache())
    console.print("[green]Cache cleared.[/green]")


@cli.command()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Show cache statistics."""
    async def action(manager: CacheManager) -> tuple[Path, Any]:
        return manager.base_dir, await manager.stats()

    base_dir, result = _run(ctx, action)

    table = Table(title="Cache Statistics", show_header=True)
    table.add_column("Metric", style="cyan")
    table.add_column("Value")
    table.add_row("Location", str(base_dir))
    table.add_row("Files", str(result.file_count))
    table.add_row("Size (MB)", f"{result.size_mb:.1f}")
    console.print(table)


def main() -> None:
    """Entry point for the CLI."""
    cli()
