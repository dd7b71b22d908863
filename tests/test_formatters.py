"""Tests for the dashboard formatters."""

import csv
import io
import json

import pytest

from fork_parity.formatters import (
    CsvFormatter,
    JsonFormatter,
    MarkdownFormatter,
    TextFormatter,
    commits_to_csv,
    get_formatter,
)
from fork_parity.formatters.csv_formatter import COMMIT_COLUMNS


def _item(hash_: str, priority: str, message: str = "Fix crash | parser") -> dict:
    return {
        "hash": hash_,
        "message": message,
        "author": "Rae",
        "commit_date": "2024-04-01T00:00:00+00:00",
        "status": "pending",
        "reviewer": None,
        "triage": {
            "priority": priority,
            "category": "bugfix",
            "impact_areas": ["api", "core"],
            "conflict_risk": 0.456,
            "effort_estimate": "small",
        },
    }


@pytest.fixture
def dashboard():
    return {
        "summary": {
            "total_commits": 5,
            "pending": 3,
            "reviewed": 0,
            "integrated": 2,
            "skipped": 0,
            "conflict": 0,
            "deferred": 0,
            "critical": 1,
            "high": 1,
            "medium": 1,
            "low": 2,
            "avg_conflict_risk": 0.3,
        },
        "actionable": [_item("a" * 40, "critical"), _item("b" * 40, "high")],
        "recent_changes": [
            {"hash": "c" * 40, "status": "integrated", "reviewer": "sam", "updated_at": "x"}
        ],
        "repository": {
            "path": "/work/fork",
            "upstream_url": "https://example.com/up.git",
            "upstream_branch": "main",
            "fork_branch": "fork",
            "last_sync": None,
        },
    }


class TestGetFormatter:
    @pytest.mark.parametrize(
        "name,cls",
        [
            ("text", TextFormatter),
            ("markdown", MarkdownFormatter),
            ("json", JsonFormatter),
            ("csv", CsvFormatter),
        ],
    )
    def test_known_names(self, name, cls):
        assert isinstance(get_formatter(name), cls)

    def test_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown formatter"):
            get_formatter("html")


class TestMarkdownFormatter:
    def test_sections(self, dashboard):
        out = MarkdownFormatter().format(dashboard)
        assert out.startswith("# Fork Parity Dashboard")
        assert "## Summary" in out
        assert "| Total Commits | 5 |" in out
        assert "| Avg Conflict Risk | 0.30 |" in out
        assert "(main -> fork), last sync: never" in out
        assert "- `cccccccc` integrated by sam" in out

    def test_pipes_escaped_in_messages(self, dashboard):
        out = MarkdownFormatter().format(dashboard)
        assert "Fix crash \\| parser" in out
        assert "| `aaaaaaaa` | critical | bugfix | 0.46 |" in out

    def test_empty_actionable(self, dashboard):
        dashboard["actionable"] = []
        dashboard["recent_changes"] = []
        out = MarkdownFormatter().format(dashboard)
        assert "_No critical or high priority commits pending._" in out
        assert "Recent Decisions" not in out


class TestJsonFormatter:
    def test_round_trips(self, dashboard):
        assert json.loads(JsonFormatter().format(dashboard)) == dashboard

    def test_render_prints(self, dashboard, capsys):
        JsonFormatter().render(dashboard)
        assert json.loads(capsys.readouterr().out)["summary"]["total_commits"] == 5


class TestCsv:
    def test_columns_and_rows(self, dashboard):
        rows = list(csv.reader(io.StringIO(CsvFormatter().format(dashboard))))
        assert rows[0] == COMMIT_COLUMNS
        assert len(rows) == 3
        first = dict(zip(rows[0], rows[1]))
        assert first["priority"] == "critical"
        assert first["conflict_risk"] == "0.4560"
        assert first["impact_areas"] == "api;core"
        assert first["reviewer"] == ""

    def test_untriaged_commit(self):
        rows = list(csv.reader(io.StringIO(commits_to_csv([{"hash": "d" * 40, "triage": None}]))))
        row = dict(zip(rows[0], rows[1]))
        assert row["priority"] == ""
        assert row["conflict_risk"] == ""


class TestTextFormatter:
    def test_format_contains_summary_and_tables(self, dashboard):
        out = TextFormatter().format(dashboard)
        assert "Fork Parity" in out
        assert "Total commits: 5" in out
        assert "Actionable commits" in out
        assert "aaaaaaaa" in out
        assert "Recent decisions" in out

    def test_no_actionable(self, dashboard):
        dashboard["actionable"] = []
        out = TextFormatter().format(dashboard)
        assert "No critical or high priority commits pending." in out
