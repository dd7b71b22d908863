"""Compose triage and analysis output into a phased migration plan.

Planning adds no detection of its own: every task, risk and estimate below is
switched on by a field of ``AnalysisResults``.
"""

from __future__ import annotations

import uuid
from pathlib import PurePosixPath
from typing import Any, Iterable, Optional, Sequence

from ..config import PlanningThresholds
from ..conflicts.markers import conflict_type_for_path
from ..impact.models import AnalysisResults, Complexity
from ..logging_config import get_logger
from ..models import AdaptationPattern, Commit, Effort, Severity
from .models import MigrationPlan, Phase, PlanRisk, RollbackPlan

logger = get_logger(__name__)

E2E_AREAS = frozenset({"api", "core", "ui"})

ROLLBACK_TRIGGERS = (
    "Critical test failures",
    "Performance degradation > 20%",
    "Security vulnerabilities detected",
    "User-reported critical issues",
)


class MigrationPlanner:
    """Build a ``MigrationPlan`` from the analyses of one commit."""

    def __init__(self, thresholds: Optional[PlanningThresholds] = None) -> None:
        self.thresholds = thresholds or PlanningThresholds()

    def create_migration_plan(
        self,
        commit: Commit,
        results: AnalysisResults,
        patterns: Iterable[AdaptationPattern] = (),
        impact_areas: Sequence[str] = (),
    ) -> MigrationPlan:
        """Assemble the four-phase plan.

        Args:
            commit: The upstream commit being integrated.
            results: Whatever analyses were run; missing ones count as clean.
            patterns: Learned adaptation patterns to draw integration tasks from.
            impact_areas: Triage impact areas, used for the testing strategy.
        """
        plan = MigrationPlan(commit_hash=commit.hash)
        dependency = results.dependency
        breaking = results.breaking
        security = results.security
        performance = results.performance
        conflicts = results.conflicts

        has_breaking = bool(breaking and breaking.has_breaking_changes)
        has_conflicts = bool(conflicts and conflicts.has_conflicts)
        has_security = bool(security and security.has_security_impact)
        has_performance = bool(performance and performance.has_performance_impact)
        migration_required = bool(breaking and breaking.migration_required)

        # Preparation
        preparation = Phase(
            "preparation",
            ["Create feature branch", "Backup current state", "Review commit changes"],
            1,
            2,
        )
        if dependency and dependency.complexity is not Complexity.MINIMAL:
            preparation.tasks += ["Analyze dependency impact", "Update affected modules"]
        if dependency and dependency.package_changes:
            preparation.tasks.append("Review dependency changes and compatibility")
        if security and security.requires_security_review:
            preparation.tasks.append("Schedule security review")
            plan.prerequisites.append("Security review scheduled")

        # Integration
        integration = Phase(
            "integration", ["Cherry-pick commit changes", "Verify changes applied"], 2, 4
        )
        if has_conflicts:
            integration.tasks = ["Resolve merge conflicts manually", "Apply adaptation patterns"]
            integration.min_hours, integration.max_hours = 4, 8
            plan.risks.append(
                PlanRisk(
                    type="conflict_resolution",
                    severity=Severity.MEDIUM,
                    description=f"{conflicts.conflict_count} merge conflict(s) to resolve",
                    mitigation="Use learned adaptation patterns and review each resolution",
                )
            )
        if has_breaking:
            integration.tasks += ["Adapt to breaking API changes", "Update dependent code"]
            integration.min_hours, integration.max_hours = 6, 12
            plan.risks.append(
                PlanRisk(
                    type="breaking_changes",
                    severity=Severity.HIGH,
                    description="Upstream commit introduces breaking changes",
                    mitigation="Update integration tests and dependent code before merging",
                )
            )
        for pattern_type in self.relevant_pattern_types(commit, patterns):
            integration.tasks.append(f"Apply learned adaptation: {pattern_type}")

        # Testing
        testing = Phase(
            "testing",
            ["Run test suite", "Manual testing", "Verify no regressions"],
            2,
            4,
        )
        if has_performance:
            testing.tasks += ["Run performance benchmarks", "Compare performance metrics"]
            testing.min_hours, testing.max_hours = 4, 6
        if has_security:
            testing.tasks += ["Run security scans", "Review security implications"]

        # Deployment
        deployment = Phase(
            "deployment",
            ["Deploy to staging", "Run smoke tests", "Monitor for issues"],
            1,
            2,
        )
        if migration_required:
            deployment.tasks.insert(0, "Execute database migrations")
            deployment.tasks.append("Verify migration success")
            plan.prerequisites.append("Database backup completed")
            plan.risks.append(
                PlanRisk(
                    type="migration_failure",
                    severity=Severity.CRITICAL,
                    description="Schema or API migration required",
                    mitigation="Take a database backup and rehearse the migration on staging",
                )
            )

        plan.phases = [preparation, integration, testing, deployment]
        plan.total_hours = sum(p.midpoint for p in plan.phases)
        plan.effort = self.effort_for_hours(plan.total_hours)
        plan.risk_score = self.risk_score(results)
        plan.risk_level = self.risk_level(plan.risk_score)
        plan.rollback = self.rollback_plan(migration_required)
        plan.testing_strategy = self.testing_strategy(
            impact_areas, has_breaking, has_performance, has_security
        )
        logger.debug(
            "Migration plan for %s: %.1fh (%s), risk %s",
            commit.short_hash,
            plan.total_hours,
            plan.effort.value,
            plan.risk_level.value,
        )
        return plan

    @staticmethod
    def relevant_pattern_types(
        commit: Commit, patterns: Iterable[AdaptationPattern]
    ) -> list[str]:
        """Distinct types of successful patterns that apply to the commit's files."""
        extensions = {PurePosixPath(f).suffix.lower() for f in commit.files_changed}
        extensions.discard("")
        conflict_types = {conflict_type_for_path(f).value for f in commit.files_changed}
        found: list[str] = []
        for pattern in patterns:
            if not pattern.success or pattern.pattern_type in found:
                continue
            if pattern.file_type in extensions or pattern.pattern_type in conflict_types:
                found.append(pattern.pattern_type)
        return found

    def effort_for_hours(self, hours: float) -> Effort:
        t = self.thresholds
        if hours <= t.small_hours:
            return Effort.SMALL
        if hours <= t.medium_hours:
            return Effort.MEDIUM
        if hours <= t.large_hours:
            return Effort.LARGE
        return Effort.XL

    @staticmethod
    def risk_score(results: AnalysisResults) -> int:
        score = 0
        breaking = results.breaking
        if breaking and breaking.severity is Severity.CRITICAL:
            score += 3
        elif breaking and breaking.has_breaking_changes:
            score += 2
        if results.conflicts:
            score += results.conflicts.conflict_count
        security = results.security
        if security and security.risk_level is Severity.CRITICAL:
            score += 3
        elif security and security.has_security_impact:
            score += 1
        if results.dependency and results.dependency.complexity is Complexity.VERY_HIGH:
            score += 2
        return score

    def risk_level(self, score: int) -> Severity:
        if score >= self.thresholds.high_risk_score:
            return Severity.HIGH
        if score >= self.thresholds.medium_risk_score:
            return Severity.MEDIUM
        return Severity.LOW

    @staticmethod
    def rollback_plan(migration_required: bool) -> RollbackPlan:
        steps = ["Revert commit"]
        if migration_required:
            steps.append("Restore database backup")
        steps += ["Redeploy previous version", "Verify system stability"]
        return RollbackPlan(triggers=list(ROLLBACK_TRIGGERS), steps=steps)

    @staticmethod
    def testing_strategy(
        impact_areas: Sequence[str],
        has_breaking: bool,
        has_performance: bool,
        has_security: bool,
    ) -> list[str]:
        strategy = ["unit", "integration"]
        if has_breaking or E2E_AREAS & set(impact_areas):
            strategy.append("e2e")
        if has_performance:
            strategy.append("performance")
        if has_security:
            strategy.append("security")
        return strategy


def learn_adaptation_pattern(
    store,
    commit_hash: str,
    pattern_type: str,
    source_pattern: str,
    target_pattern: str,
    context: Optional[dict[str, Any]] = None,
    success: bool = True,
    effort_level: Optional[str] = None,
    notes: Optional[str] = None,
) -> AdaptationPattern:
    """Record a transformation learned from a manual integration.

    The pattern is appended to *store* and returned.
    """
    pattern = AdaptationPattern(
        id=f"{commit_hash[:8]}-{pattern_type}-{uuid.uuid4().hex[:8]}",
        commit_hash=commit_hash,
        pattern_type=pattern_type,
        source_pattern=source_pattern,
        target_pattern=target_pattern,
        context=dict(context or {}),
        success=success,
        effort_level=effort_level,
        notes=notes,
    )
    store.append(pattern)
    logger.info("Learned %s adaptation pattern %s", pattern_type, pattern.id)
    return pattern
