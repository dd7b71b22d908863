"""Dependency, breaking-change, security and performance analysis of a commit.

Every public method is read-only, returns a report object and never raises
for analysis problems: unreadable files are skipped, and an unexpected
failure is returned in the report's ``error`` field together with whatever
was computed before it.
"""

from __future__ import annotations

import functools
from typing import Iterable, Iterator, Optional, Sequence

from ..config import ImpactThresholds
from ..logging_config import get_logger
from ..models import Commit, Severity, max_severity
from ..workspace import SourceTree
from .graph import DependencyGraph, bounded_bfs, build_dependency_graph
from .models import (
    AnalysisResults,
    BreakingChangeReport,
    Complexity,
    CriticalPath,
    DependencyImpact,
    Finding,
    PerformanceReport,
    PerformanceVerdict,
    SecurityReport,
)
from .patterns import (
    DEFAULT_IMPACT_CATALOG,
    SECRET_RECOMMENDATION,
    ImpactCatalog,
    ScanCategory,
    is_package_file,
)

logger = get_logger(__name__)

ANALYSIS_KINDS = ("dependency", "breaking", "security", "performance")


def _guarded(report_cls):
    """Run an analysis, turning unexpected exceptions into ``report.error``.

    The wrapped method receives the report instance to fill in, so partial
    results survive a failure.
    """

    def decorator(method):
        @functools.wraps(method)
        def wrapper(self, commit, tree):
            report = report_cls()
            try:
                method(self, commit, tree, report)
            except Exception as e:
                logger.warning("%s failed for %s: %s", method.__name__, commit.short_hash, e)
                report.error = f"analysis failed: {e}"
            return report

        return wrapper

    return decorator


class ImpactAnalyzer:
    """Pattern-scan analyses over the changed files of a commit."""

    def __init__(
        self,
        catalog: ImpactCatalog = DEFAULT_IMPACT_CATALOG,
        thresholds: Optional[ImpactThresholds] = None,
    ) -> None:
        self.catalog = catalog
        self.thresholds = thresholds or ImpactThresholds()

    def analyze(
        self, commit: Commit, tree: SourceTree, kinds: Iterable[str] = ANALYSIS_KINDS
    ) -> AnalysisResults:
        """Run the requested subset of analyses."""
        wanted = set(kinds)
        unknown = wanted - set(ANALYSIS_KINDS)
        if unknown:
            raise ValueError(f"Unknown analysis type(s): {', '.join(sorted(unknown))}")
        results = AnalysisResults()
        if "dependency" in wanted:
            results.dependency = self.analyze_dependency_chain(commit, tree)
        if "breaking" in wanted:
            results.breaking = self.identify_breaking_changes(commit, tree)
        if "security" in wanted:
            results.security = self.assess_security_impact(commit, tree)
        if "performance" in wanted:
            results.performance = self.predict_performance_impact(commit, tree)
        return results

    def _changed_contents(self, commit: Commit, tree: SourceTree) -> Iterator[tuple[str, str]]:
        for path in commit.files_changed:
            content = tree.read_text(path)
            if content is not None:
                yield path, content

    def _scan(self, category: ScanCategory, path: str, content: str) -> Optional[Finding]:
        evidence: list[str] = []
        count = 0
        for pattern in category.patterns:
            for m in pattern.finditer(content):
                count += 1
                if len(evidence) < self.thresholds.max_evidence:
                    evidence.append(m.group(0))
        if count == 0:
            return None
        return Finding(
            type=category.name,
            severity=category.severity,
            description=category.description,
            file=path,
            match_count=count,
            evidence=evidence,
        )

    # ── dependency chain ──────────────────────────────────────────

    def build_graph(self, tree: SourceTree) -> DependencyGraph:
        return build_dependency_graph(tree, self.thresholds.max_source_files)

    @_guarded(DependencyImpact)
    def analyze_dependency_chain(
        self, commit: Commit, tree: SourceTree, report: DependencyImpact
    ) -> None:
        t = self.thresholds
        changed = list(dict.fromkeys(commit.files_changed))
        report.package_changes = [f for f in changed if is_package_file(f)]

        graph = self.build_graph(tree)
        direct = set()
        for path in changed:
            direct.update(graph.dependencies(path))
        report.direct_dependencies = sorted(direct)

        traversal = bounded_bfs(graph.reverse, changed, t.max_depth)
        report.affected_files = traversal.affected
        report.impact_radius = traversal.radius

        critical = [
            CriticalPath(file=node, dependent_count=len(graph.dependents(node)), radius=depth)
            for node, depth in traversal.depth_of.items()
            if len(graph.dependents(node)) > t.critical_dependents
        ]
        critical.sort(key=lambda c: (-c.dependent_count, c.file))
        report.critical_paths = critical[: t.max_critical_paths]

        report.complexity = self.dependency_complexity(
            report.impact_radius, len(report.affected_files), len(critical)
        )
        report.impacted_modules = self.impacted_modules(changed + report.affected_files)
        report.risk_level = self._dependency_risk(report)

    def dependency_complexity(self, radius: int, affected: int, critical: int) -> Complexity:
        t = self.thresholds
        if (
            radius >= t.very_high_radius
            or affected > t.very_high_affected
            or critical > t.very_high_critical
        ):
            return Complexity.VERY_HIGH
        if radius >= t.high_radius or affected > t.high_affected or critical > t.high_critical:
            return Complexity.HIGH
        if radius >= t.medium_radius or affected > t.medium_affected:
            return Complexity.MEDIUM
        if affected > 0:
            return Complexity.LOW
        return Complexity.MINIMAL

    def impacted_modules(self, paths: Iterable[str]) -> list[str]:
        """Module areas named anywhere in *paths*, matched case-insensitively."""
        lowered = [p.lower() for p in paths]
        return sorted(
            module
            for module, markers in self.catalog.module_areas
            if any(marker in path for path in lowered for marker in markers)
        )

    @staticmethod
    def _dependency_risk(report: DependencyImpact) -> Severity:
        if report.package_changes or report.complexity is Complexity.VERY_HIGH:
            return Severity.HIGH
        sensitive = {"core", "api", "auth"} & set(report.impacted_modules)
        if report.complexity.rank >= Complexity.MEDIUM.rank or sensitive:
            return Severity.MEDIUM
        return Severity.LOW

    # ── breaking changes ──────────────────────────────────────────

    @_guarded(BreakingChangeReport)
    def identify_breaking_changes(
        self, commit: Commit, tree: SourceTree, report: BreakingChangeReport
    ) -> None:
        message = (commit.message or "").lower()
        if any(keyword in message for keyword in self.catalog.breaking_keywords):
            report.changes.append(
                Finding(
                    type="explicit",
                    severity=Severity.HIGH,
                    description="Explicitly marked as breaking change in commit message",
                )
            )

        for path, content in self._changed_contents(commit, tree):
            for category in self.catalog.breaking:
                finding = self._scan(category, path, content)
                if finding is not None:
                    report.changes.append(finding)
                    if category.name == "api":
                        report.affected_apis.extend(finding.evidence)

        if report.changes:
            version_files = [
                f
                for f in commit.files_changed
                if any(marker in f.lower() for marker in self.catalog.version_markers)
            ]
            if version_files:
                report.changes.append(
                    Finding(
                        type="version",
                        severity=Severity.MEDIUM,
                        description="Version files modified alongside breaking changes",
                        file=version_files[0],
                        match_count=len(version_files),
                        evidence=version_files[: self.thresholds.max_evidence],
                    )
                )

        report.has_breaking_changes = bool(report.changes)
        report.severity = max_severity(c.severity for c in report.changes)
        report.migration_required = any(
            c.type in ("database", "api") or c.severity is Severity.CRITICAL
            for c in report.changes
        )
        report.affected_apis = list(dict.fromkeys(report.affected_apis))
        report.recommendations = [self._breaking_recommendation(report.severity)]

    @staticmethod
    def _breaking_recommendation(severity: Severity) -> str:
        if severity is Severity.NONE:
            return "No breaking changes detected. Safe to integrate."
        if severity is Severity.CRITICAL:
            return "CRITICAL: Review all changes carefully. Consider creating adaptation branch."
        if severity is Severity.HIGH:
            return "HIGH IMPACT: Thorough testing required. Update integration tests."
        return "MODERATE IMPACT: Review changes and update documentation as needed."

    # ── security ──────────────────────────────────────────────────

    @_guarded(SecurityReport)
    def assess_security_impact(
        self, commit: Commit, tree: SourceTree, report: SecurityReport
    ) -> None:
        message = (commit.message or "").lower()
        if any(keyword in message for keyword in self.catalog.security_keywords):
            report.findings.append(
                Finding(
                    type="explicit",
                    severity=Severity.HIGH,
                    description="Commit message references a security concern",
                )
            )

        recommendations: list[str] = []
        for path, content in self._changed_contents(commit, tree):
            for category in self.catalog.security:
                finding = self._scan(category, path, content)
                if finding is not None:
                    report.findings.append(finding)
                    recommendations.append(category.description)
            secrets = self._scan_secrets(path, content)
            if secrets is not None:
                report.findings.append(secrets)
                recommendations.append(SECRET_RECOMMENDATION)

        areas = []
        for area, markers in self.catalog.security_areas:
            if any(m in f.lower() for f in commit.files_changed for m in markers):
                areas.append(area)
        report.security_areas = areas

        report.risk_level = self.security_risk(report.findings)
        report.has_security_impact = bool(report.findings)
        report.requires_security_review = report.risk_level in (Severity.HIGH, Severity.CRITICAL)
        report.recommendations = list(dict.fromkeys(recommendations))

    def _scan_secrets(self, path: str, content: str) -> Optional[Finding]:
        preview = self.thresholds.secret_preview_chars
        evidence: list[str] = []
        count = 0
        for pattern in self.catalog.secrets:
            for m in pattern.finditer(content):
                count += 1
                if len(evidence) < self.thresholds.max_evidence:
                    evidence.append(m.group(0)[:preview] + "...")
        if count == 0:
            return None
        return Finding(
            type="hardcoded_secret",
            severity=Severity.CRITICAL,
            description="Potential hardcoded secret detected",
            file=path,
            match_count=count,
            evidence=evidence,
        )

    def security_risk(self, findings: Sequence[Finding]) -> Severity:
        """Max severity, with many low/medium findings escalating to medium."""
        if not findings:
            return Severity.NONE
        risk = max_severity(f.severity for f in findings)
        if (
            risk.rank < Severity.HIGH.rank
            and len(findings) > self.thresholds.finding_count_escalation
        ):
            risk = max_severity([risk, Severity.MEDIUM])
        return risk

    # ── performance ───────────────────────────────────────────────

    @_guarded(PerformanceReport)
    def predict_performance_impact(
        self, commit: Commit, tree: SourceTree, report: PerformanceReport
    ) -> None:
        recommendations: list[str] = []
        for path, content in self._changed_contents(commit, tree):
            for category in self.catalog.performance:
                finding = self._scan(category, path, content)
                if finding is not None:
                    report.hotspots.append(finding)
                    recommendations.append(category.description)

        for path in commit.files_changed:
            lowered = path.lower()
            for hotspot, impact, markers, advice in self.catalog.performance_paths:
                if any(m in lowered for m in markers):
                    report.hotspots.append(
                        Finding(
                            type=hotspot,
                            severity=impact,
                            description=f"Performance-sensitive path ({hotspot})",
                            file=path,
                        )
                    )
                    recommendations.append(advice)

        report.complexity_increase = self.complexity_increase(commit.lines_changed)
        report.requires_performance_test = report.complexity_increase >= 3 or any(
            h.severity is Severity.HIGH for h in report.hotspots
        )
        if report.requires_performance_test:
            report.verdict = PerformanceVerdict.NEGATIVE
            recommendations.append("Run performance benchmarks before integrating")
        elif report.hotspots:
            report.verdict = PerformanceVerdict.MINOR_NEGATIVE
        report.has_performance_impact = report.verdict is not PerformanceVerdict.NEUTRAL
        report.recommendations = list(dict.fromkeys(recommendations))

    def complexity_increase(self, lines_changed: int) -> int:
        """0-3 score from the number of changed lines."""
        return sum(1 for threshold in self.thresholds.complexity_lines if lines_changed > threshold)

