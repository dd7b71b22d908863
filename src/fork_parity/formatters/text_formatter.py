"""Rich terminal formatter for the parity dashboard."""

import io
from typing import Any, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .base import BaseFormatter

_PRIORITY_STYLES = {
    "critical": "[red bold]critical[/red bold]",
    "high": "[red]high[/red]",
    "medium": "[yellow]medium[/yellow]",
    "low": "[green]low[/green]",
}


def _priority_label(priority: Optional[str]) -> str:
    if priority is None:
        return "[dim]untriaged[/dim]"
    return _PRIORITY_STYLES.get(priority, priority)


def _risk_label(risk: float) -> str:
    if risk >= 0.7:
        return f"[red]{risk:.2f}[/red]"
    elif risk >= 0.4:
        return f"[yellow]{risk:.2f}[/yellow]"
    else:
        return f"[green]{risk:.2f}[/green]"


class TextFormatter(BaseFormatter):
    """Summary panel plus tables of actionable commits and recent decisions."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def render(self, dashboard: dict[str, Any]) -> None:
        self._print(self.console, dashboard)

    def format(self, dashboard: dict[str, Any]) -> str:
        buffer = io.StringIO()
        self._print(Console(file=buffer, width=120, force_terminal=False), dashboard)
        return buffer.getvalue()

    def _print(self, console: Console, dashboard: dict[str, Any]) -> None:
        summary = dashboard.get("summary", {})
        repo = dashboard.get("repository") or {}

        lines = [
            f"Upstream: [bold]{repo.get('upstream_url') or '-'}[/bold] "
            f"({repo.get('upstream_branch', 'main')} -> {repo.get('fork_branch', 'main')})",
            f"Last sync: {repo.get('last_sync') or 'never'}",
            "",
            f"Total commits: [bold]{summary.get('total_commits', 0)}[/bold]   "
            f"Pending: [yellow]{summary.get('pending', 0)}[/yellow]   "
            f"Integrated: [green]{summary.get('integrated', 0)}[/green]   "
            f"Skipped: {summary.get('skipped', 0)}   "
            f"Conflict: [red]{summary.get('conflict', 0)}[/red]",
            f"Critical: {summary.get('critical', 0)}   High: {summary.get('high', 0)}   "
            f"Medium: {summary.get('medium', 0)}   Low: {summary.get('low', 0)}   "
            f"Avg conflict risk: {summary.get('avg_conflict_risk', 0):.2f}",
        ]
        console.print(
            Panel("\n".join(lines), title="[bold cyan]Fork Parity[/bold cyan]", expand=False)
        )

        actionable = dashboard.get("actionable", [])
        if actionable:
            table = Table(title="Actionable commits", show_lines=False)
            table.add_column("Hash", style="cyan", no_wrap=True)
            table.add_column("Priority")
            table.add_column("Category")
            table.add_column("Risk", justify="right")
            table.add_column("Effort")
            table.add_column("Message", overflow="ellipsis", max_width=60)
            for item in actionable:
                triage = item.get("triage") or {}
                table.add_row(
                    item["hash"][:8],
                    _priority_label(triage.get("priority")),
                    triage.get("category", "-"),
                    _risk_label(triage.get("conflict_risk", 0.0)),
                    triage.get("effort_estimate", "-"),
                    item.get("message", ""),
                )
            console.print(table)
        else:
            console.print("[green]No critical or high priority commits pending.[/green]")

        recent = dashboard.get("recent_changes", [])
        if recent:
            table = Table(title="Recent decisions")
            table.add_column("Hash", style="cyan", no_wrap=True)
            table.add_column("Status")
            table.add_column("Reviewer")
            table.add_column("Updated")
            for change in recent:
                table.add_row(
                    change["hash"][:8],
                    change["status"],
                    change.get("reviewer") or "-",
                    str(change.get("updated_at") or ""),
                )
            console.print(table)
