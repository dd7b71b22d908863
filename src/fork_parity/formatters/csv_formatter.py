"""CSV formatter for commit listings."""

import csv
import io
from typing import Any, Iterable

from .base import BaseFormatter

COMMIT_COLUMNS = [
    "hash",
    "message",
    "author",
    "commit_date",
    "priority",
    "category",
    "conflict_risk",
    "effort_estimate",
    "impact_areas",
    "status",
    "reviewer",
]


def commits_to_csv(commits: Iterable[dict[str, Any]]) -> str:
    """One row per commit dict as produced by ``ParityStore.list_commits``."""
    output = io.StringIO()
    writer = csv.writer(output)
    writer.writerow(COMMIT_COLUMNS)
    for c in commits:
        triage = c.get("triage") or {}
        writer.writerow([
            c.get("hash", ""),
            c.get("message", ""),
            c.get("author", ""),
            c.get("commit_date", ""),
            triage.get("priority", ""),
            triage.get("category", ""),
            f"{triage['conflict_risk']:.4f}" if "conflict_risk" in triage else "",
            triage.get("effort_estimate", ""),
            ";".join(triage.get("impact_areas") or []),
            c.get("status", ""),
            c.get("reviewer") or "",
        ])
    return output.getvalue()


class CsvFormatter(BaseFormatter):
    """Render the dashboard's actionable commits as CSV."""

    def render(self, dashboard: dict[str, Any]) -> None:
        print(self.format(dashboard), end="")

    def format(self, dashboard: dict[str, Any]) -> str:
        return commits_to_csv(dashboard.get("actionable", []))
