"""prs command: the filterable PR list."""

from __future__ import annotations

import click
from rich.console import Console

from prdash_cli.render import fetch_snapshot, pr_table
from prdash_core.query import SORT_KEYS, SORT_ORDERS, FilterSpec, SortSpec, query_collection

console = Console()


@click.command("prs")
@click.option(
    "--status",
    type=click.Choice(["all", "open", "merged", "closed"]),
    default="all",
    show_default=True,
    help="Only show PRs in this lifecycle state.",
)
@click.option("--needs-review", is_flag=True, help="Only PRs without any approval.")
@click.option("--changes-requested", "has_changes_requested", is_flag=True, help="Only PRs with changes requested.")
@click.option("--sort", "sort_by", type=click.Choice(SORT_KEYS), default="updated", show_default=True)
@click.option("--order", type=click.Choice(SORT_ORDERS), default="desc", show_default=True)
@click.option("--limit", default=50, show_default=True, help="Maximum number of PRs to show.")
@click.pass_context
def prs_cmd(ctx, status: str, needs_review: bool, has_changes_requested: bool, sort_by: str, order: str, limit: int):
    """List pull requests with their review status."""
    snapshot = fetch_snapshot(ctx)
    filter_spec = FilterSpec(status=status, needs_review=needs_review, has_changes_requested=has_changes_requested)
    rows = query_collection(snapshot.prs, snapshot.reviews_by_pr, filter_spec, SortSpec(sort_by=sort_by, order=order))

    if not rows:
        if filter_spec.is_active:
            console.print("[yellow]No pull requests match the active filters.[/yellow]")
        else:
            console.print("[yellow]No pull requests available.[/yellow]")
        return

    console.print(pr_table(rows[:limit], title=f"Pull Requests ({len(rows)})"))
