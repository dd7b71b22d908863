"""Markdown formatter for sharing dashboards in issues and chat."""

from typing import Any

from .base import BaseFormatter


def _escape(text: str) -> str:
    return text.replace("|", "\\|").replace("\n", " ")


class MarkdownFormatter(BaseFormatter):
    """Render the dashboard as a Markdown report."""

    def render(self, dashboard: dict[str, Any]) -> None:
        print(self.format(dashboard))

    def format(self, dashboard: dict[str, Any]) -> str:
        summary = dashboard.get("summary", {})
        repo = dashboard.get("repository") or {}
        out = ["# Fork Parity Dashboard", ""]
        if repo:
            out.append(
                f"Upstream `{repo.get('upstream_url') or '-'}` "
                f"({repo.get('upstream_branch', 'main')} -> {repo.get('fork_branch', 'main')}), "
                f"last sync: {repo.get('last_sync') or 'never'}"
            )
            out.append("")

        out += ["## Summary", "", "| Metric | Value |", "| --- | --- |"]
        for key in (
            "total_commits",
            "pending",
            "reviewed",
            "integrated",
            "skipped",
            "conflict",
            "deferred",
            "critical",
            "high",
            "medium",
            "low",
        ):
            out.append(f"| {key.replace('_', ' ').title()} | {summary.get(key, 0)} |")
        out.append(f"| Avg Conflict Risk | {summary.get('avg_conflict_risk', 0):.2f} |")
        out.append("")

        out += ["## Actionable Commits", ""]
        actionable = dashboard.get("actionable", [])
        if not actionable:
            out.append("_No critical or high priority commits pending._")
        else:
            out += [
                "| Hash | Priority | Category | Risk | Message |",
                "| --- | --- | --- | --- | --- |",
            ]
            for item in actionable:
                triage = item.get("triage") or {}
                out.append(
                    f"| `{item['hash'][:8]}` | {triage.get('priority', '-')} "
                    f"| {triage.get('category', '-')} "
                    f"| {triage.get('conflict_risk', 0.0):.2f} "
                    f"| {_escape(item.get('message', ''))} |"
                )
        out.append("")

        recent = dashboard.get("recent_changes", [])
        if recent:
            out += ["## Recent Decisions", ""]
            for change in recent:
                reviewer = f" by {change['reviewer']}" if change.get("reviewer") else ""
                out.append(f"- `{change['hash'][:8]}` {change['status']}{reviewer}")
            out.append("")
        return "\n".join(out)
