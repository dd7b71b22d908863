"""Reporting commands: dashboard and export."""

import json
from pathlib import Path
from typing import Optional

import click
import typer

from ..formatters import TextFormatter, commits_to_csv, get_formatter
from . import app
from ._common import console, open_tracker


@app.command()
def dashboard(
    ctx: typer.Context,
    fmt: str = typer.Option(
        "text",
        "--format",
        "-f",
        help="Output format",
        click_type=click.Choice(["text", "markdown", "json", "csv"], case_sensitive=False),
    ),
):
    """
    Summary of tracked commits, actionable items and recent decisions.
    """
    with open_tracker(ctx) as tracker:
        data = tracker.dashboard()

    fmt = fmt.lower()
    formatter = TextFormatter(console) if fmt == "text" else get_formatter(fmt)
    formatter.render(data)


@app.command()
def export(
    ctx: typer.Context,
    fmt: str = typer.Option(
        "json",
        "--format",
        "-f",
        help="Output format",
        click_type=click.Choice(["json", "csv"], case_sensitive=False),
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write to this file instead of stdout"
    ),
):
    """
    Export every tracked commit with its triage and status.
    """
    with open_tracker(ctx) as tracker:
        commits = tracker.export_commits()

    if fmt.lower() == "csv":
        text = commits_to_csv(commits)
    else:
        text = json.dumps(commits, indent=2) + "\n"

    if output is None:
        print(text, end="")
        return
    output.write_text(text, encoding="utf-8")
    console.print(f"[green]Exported[/green] {len(commits)} commit(s) to {output}")
