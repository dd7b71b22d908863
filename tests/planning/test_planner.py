"""Tests for migration plan assembly."""

import pytest

from fork_parity.conflicts import ConflictAnalysis, ConflictBlock, ConflictType, FileConflict
from fork_parity.impact import (
    AnalysisResults,
    BreakingChangeReport,
    Complexity,
    DependencyImpact,
    PerformanceReport,
    SecurityReport,
)
from fork_parity.models import AdaptationPattern, Commit, Effort, Severity
from fork_parity.persistence import InMemoryPatternStore
from fork_parity.planning import MigrationPlanner, learn_adaptation_pattern


@pytest.fixture
def planner():
    return MigrationPlanner()


@pytest.fixture
def commit():
    return Commit(hash="0123456789abcdef" * 2 + "01234567", files_changed=["src/a.js"])


def _conflicts(blocks=2):
    return ConflictAnalysis(
        has_conflicts=True,
        conflicts=[
            FileConflict(
                file="src/a.js",
                conflict_type=ConflictType.CODE,
                blocks=[ConflictBlock(file="src/a.js", start_line=i) for i in range(blocks)],
            )
        ],
    )


def _pattern(pattern_type, success=True, file_type=None):
    return AdaptationPattern(
        id=f"p-{pattern_type}-{success}",
        commit_hash="f" * 40,
        pattern_type=pattern_type,
        source_pattern="a",
        target_pattern="b",
        context={"file_type": file_type} if file_type else {},
        success=success,
    )


class TestBaselinePlan:
    def test_clean_commit(self, planner, commit):
        plan = planner.create_migration_plan(commit, AnalysisResults())
        assert [p.name for p in plan.phases] == [
            "preparation",
            "integration",
            "testing",
            "deployment",
        ]
        assert plan.phase("integration").tasks == [
            "Cherry-pick commit changes",
            "Verify changes applied",
        ]
        assert plan.total_hours == pytest.approx(9)
        assert plan.effort is Effort.MEDIUM
        assert plan.risk_score == 0
        assert plan.risk_level is Severity.LOW
        assert plan.risks == []
        assert plan.testing_strategy == ["unit", "integration"]
        assert plan.rollback.steps == [
            "Revert commit",
            "Redeploy previous version",
            "Verify system stability",
        ]

    def test_unknown_phase_raises(self, planner, commit):
        plan = planner.create_migration_plan(commit, AnalysisResults())
        with pytest.raises(KeyError):
            plan.phase("celebration")

    def test_to_dict(self, planner, commit):
        data = planner.create_migration_plan(commit, AnalysisResults()).to_dict()
        assert data["phases"][0]["estimated_time"] == "1-2 hours"
        assert data["risk_level"] == "low"
        assert data["rollback"]["estimated_time"] == "30 minutes"


class TestConditionalSections:
    def test_breaking_change_with_migration(self, planner, commit):
        results = AnalysisResults(
            breaking=BreakingChangeReport(
                has_breaking_changes=True, severity=Severity.CRITICAL, migration_required=True
            )
        )
        plan = planner.create_migration_plan(commit, results)
        integration = plan.phase("integration")
        assert "Adapt to breaking API changes" in integration.tasks
        assert (integration.min_hours, integration.max_hours) == (6, 12)
        deployment = plan.phase("deployment").tasks
        assert deployment[0] == "Execute database migrations"
        assert deployment[-1] == "Verify migration success"
        assert plan.prerequisites == ["Database backup completed"]
        assert [r.type for r in plan.risks] == ["breaking_changes", "migration_failure"]
        assert plan.risks[-1].severity is Severity.CRITICAL
        assert plan.risk_score == 3
        assert plan.risk_level is Severity.MEDIUM
        assert "e2e" in plan.testing_strategy
        assert "Restore database backup" in plan.rollback.steps

    def test_conflicts_replace_cherry_pick(self, planner, commit):
        plan = planner.create_migration_plan(commit, AnalysisResults(conflicts=_conflicts(2)))
        assert plan.phase("integration").tasks == [
            "Resolve merge conflicts manually",
            "Apply adaptation patterns",
        ]
        assert plan.risks[0].type == "conflict_resolution"
        assert plan.risk_score == 2

    def test_security_review(self, planner, commit):
        results = AnalysisResults(
            security=SecurityReport(
                has_security_impact=True,
                risk_level=Severity.CRITICAL,
                requires_security_review=True,
            )
        )
        plan = planner.create_migration_plan(commit, results)
        assert "Schedule security review" in plan.phase("preparation").tasks
        assert "Security review scheduled" in plan.prerequisites
        assert "Run security scans" in plan.phase("testing").tasks
        assert plan.testing_strategy[-1] == "security"
        assert plan.risk_score == 3

    def test_dependency_impact_tasks(self, planner, commit):
        results = AnalysisResults(
            dependency=DependencyImpact(
                complexity=Complexity.VERY_HIGH, package_changes=["package.json"]
            )
        )
        plan = planner.create_migration_plan(commit, results)
        tasks = plan.phase("preparation").tasks
        assert "Analyze dependency impact" in tasks
        assert "Review dependency changes and compatibility" in tasks
        assert plan.risk_score == 2

    def test_everything_at_once(self, planner, commit):
        results = AnalysisResults(
            dependency=DependencyImpact(complexity=Complexity.VERY_HIGH),
            breaking=BreakingChangeReport(
                has_breaking_changes=True, severity=Severity.CRITICAL, migration_required=True
            ),
            security=SecurityReport(has_security_impact=True, risk_level=Severity.CRITICAL),
            performance=PerformanceReport(has_performance_impact=True),
            conflicts=_conflicts(2),
        )
        plan = planner.create_migration_plan(commit, results, impact_areas=["api"])
        assert plan.risk_score == 10
        assert plan.risk_level is Severity.HIGH
        assert plan.total_hours == pytest.approx(17)
        assert plan.effort is Effort.LARGE
        assert plan.testing_strategy == ["unit", "integration", "e2e", "performance", "security"]


class TestHelpers:
    @pytest.mark.parametrize(
        "hours,expected",
        [
            (8, Effort.SMALL),
            (8.5, Effort.MEDIUM),
            (16, Effort.MEDIUM),
            (32, Effort.LARGE),
            (33, Effort.XL),
        ],
    )
    def test_effort_for_hours(self, planner, hours, expected):
        assert planner.effort_for_hours(hours) is expected

    def test_risk_level_boundaries(self, planner):
        assert planner.risk_level(2) is Severity.LOW
        assert planner.risk_level(3) is Severity.MEDIUM
        assert planner.risk_level(5) is Severity.HIGH

    def test_impact_areas_drive_e2e(self, planner):
        assert "e2e" in planner.testing_strategy(["ui"], False, False, False)
        assert "e2e" not in planner.testing_strategy(["docs"], False, False, False)

    def test_relevant_patterns(self, planner):
        commit = Commit(hash="a" * 40, files_changed=["src/a.js", "package.json"])
        patterns = [
            _pattern("import", file_type=".js"),
            _pattern("dependency"),
            _pattern("code", success=False),
            _pattern("import", file_type="js"),
            _pattern("style", file_type=".css"),
        ]
        assert planner.relevant_pattern_types(commit, patterns) == ["import", "dependency"]

    def test_patterns_become_integration_tasks(self, planner, commit):
        plan = planner.create_migration_plan(
            commit, AnalysisResults(), patterns=[_pattern("import", file_type=".js")]
        )
        assert plan.phase("integration").tasks[-1] == "Apply learned adaptation: import"


class TestLearnAdaptation:
    def test_pattern_is_stored(self):
        store = InMemoryPatternStore()
        pattern = learn_adaptation_pattern(
            store,
            "deadbeefcafebabe",
            "import",
            "import x from 'x'",
            "import x from '@fork/x'",
            context={"file_type": ".js"},
            notes="scoped package",
        )
        assert pattern.id.startswith("deadbeef-import-")
        assert len(pattern.id) == len("deadbeef-import-") + 8
        assert pattern.file_type == ".js"
        assert store.load_all() == [pattern]

    def test_file_type_is_normalized(self):
        assert _pattern("style", file_type=" CSS ").file_type == ".css"
        assert _pattern("style", file_type=".SCSS").file_type == ".scss"
        assert _pattern("style").file_type is None

    def test_ids_are_unique(self):
        store = InMemoryPatternStore()
        a = learn_adaptation_pattern(store, "deadbeef", "import", "a", "b")
        b = learn_adaptation_pattern(store, "deadbeef", "import", "a", "b")
        assert a.id != b.id
