"""Shared rich rendering helpers for the dashboard commands."""

from __future__ import annotations

from datetime import datetime, timezone

import click
from rich.console import Console
from rich.table import Table

from prdash_core.errors import ApiError
from prdash_core.models import PullRequest, Severity, Snapshot, StatusClassification
from prdash_core.stats import DashboardStats

SEVERITY_STYLE = {
    Severity.SUCCESS: "green",
    Severity.WARNING: "yellow",
    Severity.DANGER: "red",
    Severity.PRIMARY: "blue",
}


def fetch_snapshot(ctx: click.Context) -> Snapshot:
    client = ctx.obj["client"]
    try:
        return client.fetch_snapshot()
    except ApiError as e:
        raise click.ClickException(str(e))


def badge(classification: StatusClassification) -> str:
    style = SEVERITY_STYLE.get(classification.severity, "white")
    return f"[{style}]{classification.label}[/{style}]"


def relative_time(when: datetime, now: datetime | None = None) -> str:
    """Render a timestamp as "5h ago" below a day and "3d ago" above."""
    now = now or datetime.now(timezone.utc)
    hours = max(int((now - when).total_seconds() // 3600), 0)
    if hours < 24:
        return f"{hours}h ago"
    return f"{hours // 24}d ago"


def pr_table(rows: list[tuple[PullRequest, StatusClassification]], title: str) -> Table:
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column("PR", style="bold", no_wrap=True)
    table.add_column("Title", max_width=40)
    table.add_column("Author")
    table.add_column("Status", no_wrap=True)
    table.add_column("Approvals", justify="right", no_wrap=True)
    table.add_column("Updated", no_wrap=True)

    for pr, classification in rows:
        table.add_row(
            f"#{pr.github_pr_number}",
            pr.title[:40],
            pr.author,
            badge(classification),
            f"{classification.approvals}/{classification.total_required}",
            relative_time(pr.updated_at),
        )
    return table


def print_stats(console: Console, stats: DashboardStats) -> None:
    console.print("\n[bold]Pull request overview[/bold]")
    console.print(f"  Total:             {stats.total}")
    console.print(f"  Open:              {stats.open}")
    console.print(f"  Merged:            {stats.merged}")
    console.print(f"  Closed:            {stats.closed}")
    console.print(f"  [red]Needing review:    {stats.needing_review}[/red]")
    console.print(f"  [green]Ready to merge:    {stats.ready_to_merge}[/green]")
    console.print(f"  [yellow]Changes requested: {stats.changes_requested}[/yellow]")


def distribution_table(title: str, label: str, counts: dict[str, int]) -> Table:
    total = sum(counts.values())
    table = Table(title=title, show_header=True, header_style="bold cyan")
    table.add_column(label, style="bold")
    table.add_column("PRs", justify="right")
    table.add_column("%", justify="right")
    for bucket, count in counts.items():
        share = count / total * 100 if total else 0.0
        table.add_row(bucket, str(count), f"{share:.0f}%")
    return table


def reviewer_table(activity: list[tuple[str, int]]) -> Table:
    table = Table(title="Most Active Reviewers", show_header=True, header_style="bold cyan")
    table.add_column("Reviewer", style="bold")
    table.add_column("Reviews", justify="right")
    for reviewer, count in activity:
        table.add_row(reviewer, str(count))
    return table
