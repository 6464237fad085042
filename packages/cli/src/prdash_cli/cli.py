"""CLI entry point for prdash.

Commands:
  prs: filtered, sorted PR list with review status badges
  stats: dashboard counters and the most recently updated open PRs
  show: one PR's status, reviewer breakdown and review timeline
  watch: keep refreshing and print the counters on every update
  categorization: AI comment categorization summary (cached)
"""

from __future__ import annotations

import importlib.metadata
import logging

import click
from rich.console import Console
from rich.logging import RichHandler

from prdash_cli.commands.categorization import categorization_cmd
from prdash_cli.commands.prs import prs_cmd
from prdash_cli.commands.show import show_cmd
from prdash_cli.commands.stats import stats_cmd
from prdash_cli.commands.watch import watch_cmd

console = Console()


def _build_cache(config: dict):
    """Instantiate the configured cache from .prdash.yml settings.

    Cache selection hierarchy:
      cache: sqlite → SQLiteCache (uses cache_path or .prdash-cache.db)
      cache: none   → NoOpCache   (always fetch)
      (default)     → MemoryCache (per-process)
    """
    cache_type = config.get("cache", "memory")

    if cache_type == "sqlite":
        from prdash_store.sqlite import SQLiteCache

        return SQLiteCache(db_path=config.get("cache_path", ".prdash-cache.db"))

    if cache_type == "none":
        from prdash_store.noop import NoOpCache

        return NoOpCache()

    if cache_type != "memory":
        console.print(f"[yellow]Unknown cache type {cache_type!r}. Falling back to in-memory cache.[/yellow]")

    from prdash_store.memory import MemoryCache

    return MemoryCache()


def _build_client(config: dict):
    from prdash_core.api.client import DashboardClient

    return DashboardClient(base_url=config["api_url"], timeout=config.get("request_timeout", 10))


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


@click.group()
@click.version_option(
    version=importlib.metadata.version("prdash"),
    prog_name="prdash",
)
@click.option(
    "--config",
    "config_path",
    default=".prdash.yml",
    show_default=True,
    help="Path to the configuration file.",
    envvar="PRDASH_CONFIG",
)
@click.option("--api-url", default=None, help="Dashboard backend URL (overrides config).")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: str, api_url: str | None, verbose: bool):
    """Review status dashboard for connector-integration pull requests."""
    from prdash_core.config import load_config

    _setup_logging(verbose)
    ctx.ensure_object(dict)

    try:
        config = load_config(config_path, cli_overrides={"api_url": api_url})
    except ValueError as e:
        raise click.UsageError(str(e))

    client = _build_client(config)
    cache = _build_cache(config)
    ctx.obj["config"] = config
    ctx.obj["client"] = client
    ctx.obj["cache"] = cache
    ctx.call_on_close(cache.close)
    ctx.call_on_close(client.close)


main.add_command(prs_cmd)
main.add_command(stats_cmd)
main.add_command(show_cmd)
main.add_command(watch_cmd)
main.add_command(categorization_cmd)
