"""Repository commands: init, sync and cleanup."""

import json
from typing import Optional

import typer

from . import app
from ._common import console, open_tracker


@app.command()
def init(
    ctx: typer.Context,
    upstream_url: Optional[str] = typer.Option(
        None, "--upstream-url", help="URL of the upstream repository"
    ),
    upstream_branch: str = typer.Option("main", "--upstream-branch", help="Upstream branch"),
    fork_branch: str = typer.Option("main", "--fork-branch", help="Fork branch"),
):
    """
    Register this checkout for fork tracking.

    Creates .fork-parity/parity.db and, when --upstream-url is given, points
    the upstream remote at it.
    """
    with open_tracker(ctx) as tracker:
        tracker.init(upstream_url, upstream_branch, fork_branch)
        console.print(f"[green]Initialized[/green] fork tracking for [bold]{tracker.root}[/bold]")
        if upstream_url:
            console.print(
                f"  upstream: {upstream_url} ({upstream_branch} -> {fork_branch})"
            )


@app.command()
def sync(
    ctx: typer.Context,
    limit: Optional[int] = typer.Option(
        None, "--limit", "-n", help="Only fetch the most recent N upstream commits", min=1
    ),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """
    Fetch upstream and triage every commit the fork does not have yet.
    """
    with open_tracker(ctx) as tracker:
        result = tracker.sync(limit)

    if json_output:
        print(json.dumps(result.to_dict(), indent=2))
        return
    console.print(
        f"[green]Synced[/green] {result.total} upstream commit(s): "
        f"{result.new} new, {result.updated} updated"
    )


@app.command()
def cleanup(ctx: typer.Context):
    """
    Compact the tracking database.
    """
    with open_tracker(ctx) as tracker:
        tracker.repository()
        tracker.cleanup()
    console.print("[green]Database compacted[/green]")
