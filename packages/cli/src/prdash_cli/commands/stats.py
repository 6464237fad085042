"""stats command: dashboard summary counters and analytics breakdowns."""

from __future__ import annotations

import click
from rich.console import Console

from prdash_cli.render import distribution_table, fetch_snapshot, pr_table, print_stats, reviewer_table
from prdash_core.query import recent_open
from prdash_core.stats import age_distribution, approval_distribution, reviewer_activity, summarize
from prdash_core.status import classify

console = Console()


@click.command("stats")
@click.option("--recent", default=None, type=int, help="Number of recently updated open PRs to list.")
@click.option("--detailed", is_flag=True, help="Also show approval, age and reviewer activity breakdowns.")
@click.pass_context
def stats_cmd(ctx, recent: int | None, detailed: bool):
    """Show how many PRs are open, merged, waiting for review or ready to merge."""
    snapshot = fetch_snapshot(ctx)
    if not snapshot.prs:
        console.print("[yellow]No pull requests available.[/yellow]")
        return

    stats = summarize(snapshot.prs, snapshot.reviews_by_pr)
    print_stats(console, stats)

    limit = recent if recent is not None else ctx.obj["config"].get("recent_limit", 5)
    recent_prs = recent_open(snapshot.prs, limit=limit)
    if recent_prs:
        rows = [(pr, classify(pr, snapshot.reviews_for(pr))) for pr in recent_prs]
        console.print(pr_table(rows, title="Recently Updated"))

    if detailed:
        approvals = approval_distribution(snapshot.prs, snapshot.reviews_by_pr)
        console.print(distribution_table("Approval Distribution", "Approvals", approvals))
        console.print(distribution_table("PR Age", "Age", age_distribution(snapshot.prs)))
        activity = reviewer_activity(snapshot.reviews_by_pr)
        if activity:
            console.print(reviewer_table(activity))
        else:
            console.print("[dim]No reviews submitted yet.[/dim]")
