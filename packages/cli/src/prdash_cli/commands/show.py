"""show command: review breakdown of a single PR."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from prdash_cli.render import badge, relative_time
from prdash_core.errors import ApiError
from prdash_core.models import ReviewState
from prdash_core.normalize import review_timeline
from prdash_core.status import classify

console = Console()

_STATE_STYLE = {
    ReviewState.APPROVED: "green",
    ReviewState.CHANGES_REQUESTED: "yellow",
    ReviewState.COMMENTED: "dim",
}


@click.command("show")
@click.argument("pr_number", type=int)
@click.pass_context
def show_cmd(ctx, pr_number: int):
    """Show status, reviewers and review timeline of PR_NUMBER."""
    client = ctx.obj["client"]
    try:
        prs = client.list_pull_requests()
    except ApiError as e:
        raise click.ClickException(str(e))

    pr = next((p for p in prs if p.github_pr_number == pr_number), None)
    if pr is None:
        raise click.ClickException(f"Pull request #{pr_number} not found.")

    try:
        reviews = client.list_reviews(pr_number)
    except ApiError as e:
        console.print(f"[yellow]Could not load reviews ({e}); showing roster only.[/yellow]")
        reviews = []

    classification = classify(pr, reviews)

    console.print(f"\n[bold]#{pr.github_pr_number} {pr.title}[/bold] by {pr.author}")
    if pr.url:
        console.print(f"  {pr.url}")
    console.print(f"  Status:    {badge(classification)}")
    console.print(
        f"  Approvals: {classification.approvals}/{classification.total_required}"
        f" ({classification.progress_ratio:.0%})"
    )
    if classification.approved_by:
        console.print(f"  [green]Approved by: {', '.join(classification.approved_by)}[/green]")
    if classification.changes_requested_by:
        console.print(f"  [yellow]Changes requested by: {', '.join(classification.changes_requested_by)}[/yellow]")
    if classification.waiting_for:
        console.print(f"  Waiting for: {', '.join(classification.waiting_for)}")
    if pr.labels:
        console.print(f"  Labels:    {', '.join(pr.labels)}")

    timeline = review_timeline(reviews)
    if not timeline:
        console.print("[yellow]No reviews yet.[/yellow]")
        return

    table = Table(title="Review Timeline", show_header=True, header_style="bold cyan")
    table.add_column("Reviewer", width=20)
    table.add_column("State", width=20)
    table.add_column("Submitted", width=22)
    for review in timeline:
        style = _STATE_STYLE.get(review.review_state, "white")
        table.add_row(
            review.reviewer_username,
            f"[{style}]{review.review_state.value}[/{style}]",
            review.submitted_at[:19].replace("T", " "),
        )
    console.print(table)
    console.print(f"Created {relative_time(pr.created_at)}, updated {relative_time(pr.updated_at)}")
