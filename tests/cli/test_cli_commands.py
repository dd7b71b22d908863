"""End-to-end tests for the fork-parity command line."""

import csv
import io
import json

import pytest
from typer.testing import CliRunner

from fork_parity import __version__
from fork_parity.cli import app
from fork_parity.tracker import ParityTracker

runner = CliRunner()

SECURITY = "a1b2c3d4e5f6a7b8c9d0a1b2c3d4e5f6a7b8c9d0"
DOCS = "b2c3d4e5f6a7b8c9d0a1b2c3d4e5f6a7b8c9d0a1"


def invoke(root, *args):
    return runner.invoke(app, ["-C", str(root), *args])


def text(result) -> str:
    """Console output with line wrapping undone."""
    return " ".join(result.output.split())


@pytest.fixture
def project(tmp_path, security_commit, docs_commit):
    """An initialized fork with two triaged upstream commits and no git remote."""
    with ParityTracker(tmp_path) as tracker:
        tracker.init()
        repo_id = tracker.repository()["id"]
        tracker.store.save_triaged(
            repo_id, tracker.engine.batch_classify([security_commit, docs_commit])
        )
    return tmp_path


class TestGlobalOptions:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert f"version {__version__}" in text(result)

    def test_help_lists_commands(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        for command in ("init", "sync", "dashboard", "migration-plan", "notify"):
            assert command in text(result)

    def test_log_file_option(self, project):
        log_file = project / "logs" / "parity.log"
        result = runner.invoke(app, ["-C", str(project), "--log-file", str(log_file), "list"])
        assert result.exit_code == 0
        assert log_file.exists()

    def test_uninitialized_repository(self, tmp_path):
        result = invoke(tmp_path, "list")
        assert result.exit_code == 1
        assert "Repository not initialized" in text(result)


class TestRepoCommands:
    def test_init(self, tmp_path):
        result = invoke(tmp_path, "init", "--upstream-branch", "develop")
        assert result.exit_code == 0
        assert "Initialized" in text(result)
        assert (tmp_path / ".fork-parity" / "parity.db").exists()
        with ParityTracker(tmp_path) as tracker:
            assert tracker.repository()["upstream_branch"] == "develop"

    def test_sync_outside_git_fails_cleanly(self, project):
        result = invoke(project, "sync")
        assert result.exit_code == 1
        assert "Error:" in text(result)

    def test_cleanup(self, project):
        result = invoke(project, "cleanup")
        assert result.exit_code == 0
        assert "Database compacted" in text(result)


class TestReviewCommands:
    def test_list_table(self, project):
        result = invoke(project, "list")
        assert result.exit_code == 0
        assert SECURITY[:8] in text(result)
        assert DOCS[:8] in text(result)

    def test_list_json_filters(self, project):
        rows = json.loads(invoke(project, "list", "--json").stdout)
        assert {r["hash"] for r in rows} == {SECURITY, DOCS}
        critical = json.loads(invoke(project, "list", "--priority", "critical", "--json").stdout)
        assert [r["hash"] for r in critical] == [SECURITY]

    def test_list_nothing_matches(self, project):
        result = invoke(project, "list", "--status", "skipped")
        assert "No commits match." in text(result)

    def test_status_update(self, project):
        result = invoke(project, "status", SECURITY[:7], "integrated", "--reviewer", "sam")
        assert result.exit_code == 0
        assert f"Updated {SECURITY[:7]} -> integrated" in text(result)
        rows = json.loads(invoke(project, "list", "--status", "integrated", "--json").stdout)
        assert [r["reviewer"] for r in rows] == ["sam"]

    def test_status_rejects_unknown_state(self, project):
        result = invoke(project, "status", SECURITY, "merged")
        assert result.exit_code == 2

    def test_status_unknown_commit(self, project):
        result = invoke(project, "status", "f" * 40, "skipped")
        assert result.exit_code == 1
        assert "not found" in text(result)

    def test_batch_status(self, project):
        result = invoke(project, "batch-status", "skipped", SECURITY, DOCS[:9])
        assert result.exit_code == 0
        assert "Updated 2 commit(s) -> skipped" in text(result)

    def test_batch_status_is_atomic(self, project):
        result = invoke(project, "batch-status", "skipped", SECURITY, "f" * 40)
        assert result.exit_code == 1
        rows = json.loads(invoke(project, "list", "--status", "pending", "--json").stdout)
        assert len(rows) == 2

    def test_actionable(self, project):
        items = json.loads(invoke(project, "actionable", "--json").stdout)
        assert [i["hash"] for i in items] == [SECURITY]
        invoke(project, "status", SECURITY, "deferred")
        result = invoke(project, "actionable")
        assert "Nothing actionable." in text(result)

    def test_plan(self, project):
        result = invoke(project, "plan")
        assert result.exit_code == 0
        assert "2 pending commit(s)" in text(result)
        data = json.loads(invoke(project, "plan", "--json").stdout)
        assert data["summary"]["immediate_count"] == 1
        assert data["summary"]["backlog_count"] == 1


class TestReportCommands:
    def test_dashboard_text(self, project):
        result = invoke(project, "dashboard")
        assert result.exit_code == 0
        assert "Fork Parity" in text(result)

    def test_dashboard_json(self, project):
        data = json.loads(invoke(project, "dashboard", "--format", "json").stdout)
        assert data["summary"]["total_commits"] == 2
        assert data["summary"]["critical"] == 1

    def test_dashboard_markdown(self, project):
        result = invoke(project, "dashboard", "-f", "markdown")
        assert result.stdout.startswith("# Fork Parity Dashboard")

    def test_export_csv_to_file(self, project, tmp_path):
        target = tmp_path / "commits.csv"
        result = invoke(project, "export", "--format", "csv", "--output", str(target))
        assert result.exit_code == 0
        assert "Exported 2 commit(s)" in text(result)
        rows = list(csv.reader(io.StringIO(target.read_text())))
        assert len(rows) == 3

    def test_export_json_stdout(self, project):
        rows = json.loads(invoke(project, "export").stdout)
        assert len(rows) == 2


class TestAnalysisCommands:
    def test_analyze_security_json(self, project):
        result = invoke(project, "analyze", SECURITY[:8], "--type", "security", "--json")
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["security"]["has_security_impact"] is True
        assert data["breaking"] is None

    def test_analyze_text(self, project):
        result = invoke(project, "analyze", DOCS)
        assert result.exit_code == 0
        assert f"Analysis of {DOCS[:8]}" in text(result)

    def test_conflicts_clean(self, project):
        result = invoke(project, "conflicts", SECURITY)
        assert result.exit_code == 0
        assert "No conflict markers found." in text(result)

    def test_conflicts_found(self, project):
        target = project / "src" / "auth" / "login.js"
        target.parent.mkdir(parents=True)
        target.write_text("<<<<<<< HEAD\nconst a = 1;\n=======\nconst a = 2;\n>>>>>>> up\n")
        result = invoke(project, "conflicts", SECURITY, "--json")
        data = json.loads(result.stdout)
        assert data["has_conflicts"] is True
        assert data["conflict_count"] == 1

    def test_similar(self, project):
        data = json.loads(invoke(project, "similar", DOCS, "--json").stdout)
        assert data["has_similar_changes"] is False
        assert data["similarities"] == []
        result = invoke(project, "similar", SECURITY[:8])
        assert result.exit_code == 0
        assert "No similar changes found" in text(result)

    def test_migration_plan(self, project):
        data = json.loads(invoke(project, "migration-plan", DOCS, "--json").stdout)
        assert data["commit_hash"] == DOCS
        assert len(data["phases"]) == 4
        result = invoke(project, "migration-plan", DOCS)
        assert "Preparation" in text(result)

    def test_learn_adaptation(self, project):
        result = invoke(
            project,
            "learn-adaptation",
            DOCS,
            "--type",
            "import",
            "--source",
            "old",
            "--target",
            "new",
            "--file-type",
            ".md",
        )
        assert result.exit_code == 0
        assert "Learned adaptation pattern" in text(result)
        with ParityTracker(project) as tracker:
            (pattern,) = tracker.pattern_store.load_all()
        assert pattern.file_type == ".md"


class TestNotifyCommands:
    def test_setup_refuses_overwrite(self, project):
        assert invoke(project, "setup-notifications").exit_code == 0
        assert (project / "fork-parity-notifications.json").exists()
        again = invoke(project, "setup-notifications")
        assert again.exit_code == 1
        assert "already exists" in text(again)
        assert invoke(project, "setup-notifications", "--force").exit_code == 0

    def test_notify_daily_to_console(self, project):
        invoke(project, "setup-notifications")
        result = invoke(project, "notify", "daily")
        assert result.exit_code == 0
        assert "Daily Fork Parity Summary" in text(result)
        assert "sent" in text(result)

    def test_notify_check_sends_critical_alert(self, project):
        invoke(project, "setup-notifications")
        result = invoke(project, "notify", "--check")
        assert result.exit_code == 0
        assert "Fork Parity Critical Alert" in text(result)

    def test_notify_security_needs_commit(self, project):
        invoke(project, "setup-notifications")
        result = invoke(project, "notify", "security")
        assert result.exit_code == 1
        assert "--commit is required" in text(result)

    def test_notify_without_config(self, project):
        result = invoke(project, "notify")
        assert result.exit_code == 1
        assert "Notification config not found" in text(result)
