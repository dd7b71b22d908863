"""Notification commands."""

from pathlib import Path
from typing import Any, Optional

import click
import typer
from rich.table import Table

from ..notifications import TEMPLATES, NotificationDispatcher, write_config_template
from ..tracker import ParityTracker
from . import app
from ._common import console, fail, open_tracker, project_path

_NEEDS_COMMIT = ("security", "integration")


def _notification_config(ctx: typer.Context, path: Optional[Path]) -> Path:
    if path is not None:
        return path
    return project_path(ctx) / ctx.obj["config"].notification_config


def _event_data(
    tracker: ParityTracker, notification_type: str, commit_hash: Optional[str]
) -> dict[str, Any]:
    if notification_type in _NEEDS_COMMIT:
        if not commit_hash:
            fail(f"--commit is required for '{notification_type}' notifications")
        if notification_type == "security":
            report = tracker.analyze(commit_hash, ("security",)).security
            return {
                "findings": [f.to_dict() for f in report.findings],
                "risk_level": report.risk_level.value,
            }
        triaged = tracker.triage(commit_hash)
        return {
            "commit_hash": triaged.commit.hash,
            "status": tracker.status(triaged.commit.hash).status.value,
            "author": triaged.commit.author,
        }

    data = tracker.dashboard()
    return {
        "repository_path": data["repository"]["path"],
        "critical_count": data["summary"]["critical"],
        "high_count": data["summary"]["high"],
        "summary": data["summary"],
    }


@app.command("setup-notifications")
def setup_notifications(
    ctx: typer.Context,
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Where to write the channel config"
    ),
    force: bool = typer.Option(False, "--force", help="Overwrite an existing config"),
):
    """
    Write a starter notification config (Slack, Discord, Teams, webhooks).
    """
    path = _notification_config(ctx, output)
    if path.exists() and not force:
        fail(f"{path} already exists (use --force to overwrite)")
    write_config_template(path)
    console.print(f"[green]Wrote[/green] notification config to {path}")
    console.print("Enable channels and fill in webhook URLs, then run [bold]fork-parity notify[/bold].")


@app.command()
def notify(
    ctx: typer.Context,
    notification_type: str = typer.Argument(
        "daily",
        metavar="TYPE",
        click_type=click.Choice(sorted(TEMPLATES), case_sensitive=False),
    ),
    commit_hash: Optional[str] = typer.Option(
        None, "--commit", help="Commit for security and integration notifications"
    ),
    config_path: Optional[Path] = typer.Option(
        None, "--notify-config", help="Notification channel config (JSON)"
    ),
    check: bool = typer.Option(
        False, "--check", help="Only alert when critical/high thresholds are crossed"
    ),
):
    """
    Send a notification to every enabled channel.

    [bold cyan]Examples:[/bold cyan]

      fork-parity notify daily

      fork-parity notify --check

      fork-parity notify security --commit abc1234
    """
    notification_type = notification_type.lower()
    with open_tracker(ctx) as tracker:
        dispatcher = NotificationDispatcher.from_file(_notification_config(ctx, config_path))
        if check:
            results = dispatcher.check_thresholds(tracker.dashboard())
        else:
            results = dispatcher.send(
                notification_type, _event_data(tracker, notification_type, commit_hash)
            )

    if not results:
        if check:
            console.print("[green]No thresholds crossed; nothing sent.[/green]")
        else:
            console.print("[yellow]No channels enabled.[/yellow]")
        return

    table = Table(title="Notifications")
    table.add_column("Channel", style="cyan")
    table.add_column("Result")
    for result in results:
        table.add_row(
            result.channel,
            "[green]sent[/green]" if result.success else f"[red]failed[/red] {result.error}",
        )
    console.print(table)
    if not all(r.success for r in results):
        raise typer.Exit(1)
