"""categorization command: AI comment categorization summary.

The payload is computed by the backend's analytics endpoint and shown as
is. It is slow to produce, so it is cached and reused until it is older
than ``cache_ttl_hours``.
"""

from __future__ import annotations

from datetime import timedelta

import click
from rich.console import Console
from rich.table import Table

from prdash_core.errors import ApiError
from prdash_store.base import is_fresh

console = Console()

CACHE_KEY = "comment-categorization-cache"
_ENDPOINT = "/api/analytics/comment-categorization"


@click.command("categorization")
@click.option("--refresh", is_flag=True, help="Ignore the cached payload and fetch a fresh one.")
@click.pass_context
def categorization_cmd(ctx, refresh: bool):
    """Show how review comments are distributed across categories."""
    client = ctx.obj["client"]
    cache = ctx.obj["cache"]
    ttl = timedelta(hours=ctx.obj["config"].get("cache_ttl_hours", 24))

    entry = None if refresh else cache.get(CACHE_KEY)
    if is_fresh(entry, ttl):
        data = entry.value
        console.print(f"[dim]Using cached categorization from {entry.stored_at:%Y-%m-%d %H:%M} UTC[/dim]")
    else:
        try:
            data = client.get_json(_ENDPOINT)
        except ApiError as e:
            raise click.ClickException(str(e))
        cache.put(CACHE_KEY, data)

    summary = (data.get("overall_summary") if isinstance(data, dict) else None) or {}
    if not summary:
        console.print("[yellow]No categorization data available.[/yellow]")
        return

    console.print("\n[bold]Comment categorization[/bold]")
    console.print(f"  PRs analyzed:         {summary.get('total_prs_analyzed', 0)}")
    console.print(f"  Comments categorized: {summary.get('total_comments_categorized', 0)}")
    console.print(f"  Avg confidence:       {summary.get('avg_confidence_score', 0):.2f}")

    distribution = summary.get("category_distribution") or {}
    if distribution:
        total = sum(distribution.values())
        table = Table(title="Category Distribution", show_header=True)
        table.add_column("Category", style="bold")
        table.add_column("Count", justify="right")
        table.add_column("% of total", justify="right")
        for category, count in sorted(distribution.items(), key=lambda kv: (-kv[1], kv[0])):
            pct = f"{count / total * 100:.1f}%" if total else "0%"
            table.add_row(category.replace("_", " "), str(count), pct)
        console.print(table)
