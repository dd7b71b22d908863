"""Review commands: status decisions, listings and integration plans."""

import json
from typing import List, Optional

import click
import typer
from rich.table import Table

from ..models import CommitState, Priority
from ..triage import TriagedCommit
from . import app
from ._common import console, open_tracker, priority_label

_STATES = [s.value for s in CommitState]
_PRIORITIES = [p.value for p in Priority]


def _triaged_table(title: str, items: List[TriagedCommit]) -> Table:
    table = Table(title=title)
    table.add_column("Hash", style="cyan", no_wrap=True)
    table.add_column("Priority")
    table.add_column("Category")
    table.add_column("Risk", justify="right")
    table.add_column("Effort")
    table.add_column("Message", overflow="ellipsis", max_width=60)
    for item in items:
        t = item.triage
        table.add_row(
            item.commit.short_hash,
            priority_label(t.priority),
            t.category.value,
            f"{t.conflict_risk:.2f}",
            t.effort_estimate.value,
            item.commit.message,
        )
    return table


@app.command()
def status(
    ctx: typer.Context,
    commit_hash: str = typer.Argument(..., metavar="HASH", help="Commit hash (7+ char prefix)"),
    new_status: str = typer.Argument(
        ..., metavar="STATUS", click_type=click.Choice(_STATES, case_sensitive=False)
    ),
    reasoning: Optional[str] = typer.Option(None, "--reasoning", "-r", help="Why"),
    reviewer: Optional[str] = typer.Option(None, "--reviewer", help="Who decided"),
    notes: Optional[str] = typer.Option(None, "--notes", help="Adaptation notes"),
    effort: Optional[str] = typer.Option(None, "--effort", help="Actual integration effort"),
):
    """
    Record a review decision for one commit.

    [bold cyan]Examples:[/bold cyan]

      fork-parity status abc1234 integrated --reviewer alex

      fork-parity status abc1234 skipped -r "not relevant to our fork"
    """
    with open_tracker(ctx) as tracker:
        record = tracker.set_status(
            commit_hash, CommitState(new_status.lower()), reasoning, reviewer, notes, effort
        )
    console.print(f"[green]Updated[/green] {commit_hash[:8]} -> {record.status.value}")


@app.command("batch-status")
def batch_status(
    ctx: typer.Context,
    new_status: str = typer.Argument(
        ..., metavar="STATUS", click_type=click.Choice(_STATES, case_sensitive=False)
    ),
    hashes: List[str] = typer.Argument(..., metavar="HASH...", help="Commit hashes"),
    reasoning: Optional[str] = typer.Option(None, "--reasoning", "-r", help="Why"),
    reviewer: Optional[str] = typer.Option(None, "--reviewer", help="Who decided"),
):
    """
    Set the same status on several commits at once (all or nothing).
    """
    with open_tracker(ctx) as tracker:
        count = tracker.batch_status(hashes, CommitState(new_status.lower()), reasoning, reviewer)
    console.print(f"[green]Updated[/green] {count} commit(s) -> {new_status.lower()}")


@app.command("list")
def list_commits(
    ctx: typer.Context,
    status_filter: Optional[str] = typer.Option(
        None,
        "--status",
        help="Only commits with this status",
        click_type=click.Choice(_STATES, case_sensitive=False),
    ),
    priority: Optional[str] = typer.Option(
        None,
        "--priority",
        help="Only commits with this priority",
        click_type=click.Choice(_PRIORITIES, case_sensitive=False),
    ),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum rows", min=1),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    List tracked upstream commits, newest first.
    """
    with open_tracker(ctx) as tracker:
        rows = tracker.list_commits(
            status_filter.lower() if status_filter else None,
            priority.lower() if priority else None,
            limit,
        )

    if json_output:
        print(json.dumps(rows, indent=2))
        return
    if not rows:
        console.print("[yellow]No commits match.[/yellow]")
        return

    table = Table(title=f"Upstream commits ({len(rows)})")
    table.add_column("Hash", style="cyan", no_wrap=True)
    table.add_column("Status")
    table.add_column("Priority")
    table.add_column("Category")
    table.add_column("Author")
    table.add_column("Message", overflow="ellipsis", max_width=60)
    for row in rows:
        triage = row["triage"] or {}
        prio = triage.get("priority")
        table.add_row(
            row["hash"][:8],
            row["status"],
            priority_label(Priority(prio)) if prio else "[dim]-[/dim]",
            triage.get("category", "-"),
            row["author"],
            row["message"],
        )
    console.print(table)


@app.command()
def actionable(
    ctx: typer.Context,
    min_priority: str = typer.Option(
        "medium",
        "--min-priority",
        help="Lowest priority to include",
        click_type=click.Choice(_PRIORITIES, case_sensitive=False),
    ),
    limit: int = typer.Option(20, "--limit", "-n", help="Maximum items", min=1),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Pending commits at or above a priority, most urgent first.
    """
    with open_tracker(ctx) as tracker:
        items = tracker.actionable(Priority(min_priority.lower()), limit)

    if json_output:
        print(json.dumps([i.to_dict() for i in items], indent=2))
        return
    if not items:
        console.print("[green]Nothing actionable.[/green]")
        return
    console.print(_triaged_table(f"Actionable commits ({len(items)})", items))


@app.command()
def plan(
    ctx: typer.Context,
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Split pending commits into immediate, next-sprint and backlog buckets.
    """
    with open_tracker(ctx) as tracker:
        integration = tracker.integration_plan()

    if json_output:
        print(json.dumps(integration.to_dict(), indent=2))
        return

    s = integration.summary
    console.print(
        f"[bold]Integration plan[/bold]: {s.total_commits} pending commit(s), "
        f"estimated effort {s.estimated_effort} point(s)"
    )
    for title, bucket in (
        ("Immediate", integration.immediate),
        ("Next sprint", integration.next_sprint),
        ("Backlog", integration.backlog),
    ):
        if bucket:
            console.print(_triaged_table(f"{title} ({len(bucket)})", bucket))
        else:
            console.print(f"[dim]{title}: empty[/dim]")