"""watch command: live counters driven by the refresh scheduler."""

from __future__ import annotations

import asyncio

import click
from rich.console import Console

from prdash_cli.render import print_stats
from prdash_core.models import Snapshot
from prdash_core.refresh import RefreshScheduler
from prdash_core.stats import summarize

console = Console()


@click.command("watch")
@click.option("--interval", type=float, default=None, help="Seconds between refreshes (default: poll_interval).")
@click.option("--count", type=int, default=None, help="Stop after this many refreshes.")
@click.pass_context
def watch_cmd(ctx, interval: float | None, count: int | None):
    """Refresh periodically and print the dashboard counters on every update."""
    client = ctx.obj["client"]
    poll_interval = interval if interval is not None else ctx.obj["config"].get("poll_interval", 30)

    def on_snapshot(snapshot: Snapshot) -> None:
        stamp = snapshot.fetched_at.strftime("%H:%M:%S")
        if not snapshot.prs:
            console.print(f"[dim]{stamp}[/dim] [yellow]No pull requests available.[/yellow]")
            return
        console.print(f"[dim]{stamp}[/dim]")
        print_stats(console, summarize(snapshot.prs, snapshot.reviews_by_pr))

    scheduler = RefreshScheduler(client.fetch_snapshot, on_snapshot, poll_interval=poll_interval)
    try:
        asyncio.run(scheduler.run(max_refreshes=count))
    except KeyboardInterrupt:
        console.print("[dim]Stopped.[/dim]")
