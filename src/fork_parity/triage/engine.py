"""Rule-based commit classifier.

``TriageEngine.classify`` maps a commit's message and changed-file set to a
``TriageResult``. The engine holds no state besides its immutable catalog and
thresholds, so a single instance can be shared freely.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..config import TriageThresholds
from ..logging_config import get_logger
from ..models import Category, Commit, Effort, Priority, TriageResult
from .models import IntegrationPlan, IntegrationSummary, TriagedCommit
from .patterns import DEFAULT_CATALOG, TriageCatalog

logger = get_logger(__name__)


class TriageEngine:
    """Classify commits into priority, category, effort and conflict risk."""

    def __init__(
        self,
        catalog: TriageCatalog = DEFAULT_CATALOG,
        thresholds: Optional[TriageThresholds] = None,
    ) -> None:
        self.catalog = catalog
        self.thresholds = thresholds or TriageThresholds()

    # ── single commit ─────────────────────────────────────────────

    def classify(self, commit: Commit) -> TriageResult:
        """Classify one commit. Deterministic and free of I/O."""
        files = list(commit.files_changed or [])

        category, base_priority, confidence = self._categorize(commit.message or "")
        priority = base_priority
        if category is not Category.SECURITY and self._touches_security_files(files):
            priority = priority.escalate()

        impact_areas = self._impact_areas(files)
        effort = self._estimate_effort(len(files), commit.lines_changed)
        conflict_risk = self._conflict_risk(files, impact_areas)

        final_priority = self._adjust_priority(priority, impact_areas, conflict_risk, effort)

        reasoning = self._reasoning(
            category, impact_areas, effort, conflict_risk, base_priority, final_priority
        )
        logger.debug(
            "Classified %s as %s/%s (risk %.2f)",
            commit.short_hash,
            category.value,
            final_priority.value,
            conflict_risk,
        )
        return TriageResult(
            priority=final_priority,
            category=category,
            impact_areas=impact_areas,
            conflict_risk=conflict_risk,
            effort_estimate=effort,
            reasoning=reasoning,
            confidence=confidence,
        )

    def _categorize(self, message: str) -> tuple[Category, Priority, float]:
        text = message.lower()
        best = (Category.CHORE, Priority.LOW, self.thresholds.default_confidence)

        for rule in self.catalog.categories:
            matches = sum(1 for keyword in rule.keywords if keyword in text)
            if matches == 0:
                continue
            confidence = min(
                self.thresholds.max_keyword_confidence,
                rule.confidence + self.thresholds.keyword_bonus * (matches - 1),
            )
            if confidence > best[2]:
                best = (rule.category, rule.priority, round(confidence, 4))

        return best

    def _touches_security_files(self, files: Sequence[str]) -> bool:
        pattern = self.catalog.security_file_pattern
        return any(pattern.search(f.lower()) for f in files)

    def _impact_areas(self, files: Sequence[str]) -> list[str]:
        areas = set()
        for path in files:
            for area, patterns in self.catalog.impact_areas.items():
                if area not in areas and any(p.search(path) for p in patterns):
                    areas.add(area)
        return sorted(areas)

    def _estimate_effort(self, file_count: int, line_count: int) -> Effort:
        for bucket in self.catalog.effort_buckets:
            if file_count <= bucket.max_files and line_count <= bucket.max_lines:
                return bucket.effort
        return Effort.XL

    def _conflict_risk(self, files: Sequence[str], impact_areas: Sequence[str]) -> float:
        t = self.thresholds
        risk = t.base_risk
        if "core" in impact_areas:
            risk += t.core_risk
        if "api" in impact_areas:
            risk += t.api_risk
        if "database" in impact_areas:
            risk += t.database_risk
        risk += min(t.max_file_risk, t.per_file_risk * len(files))
        if any(contested in path for path in files for contested in self.catalog.contested_files):
            risk += t.contested_file_risk
        return round(min(1.0, max(0.0, risk)), 4)

    def _adjust_priority(
        self,
        priority: Priority,
        impact_areas: Sequence[str],
        conflict_risk: float,
        effort: Effort,
    ) -> Priority:
        if "core" in impact_areas or "auth" in impact_areas:
            priority = priority.escalate()
        if conflict_risk > self.thresholds.escalation_risk_threshold:
            priority = priority.escalate()
        if effort is Effort.TRIVIAL and priority is not Priority.CRITICAL:
            priority = priority.deescalate()
        return priority

    def _reasoning(
        self,
        category: Category,
        impact_areas: Sequence[str],
        effort: Effort,
        conflict_risk: float,
        base_priority: Priority,
        final_priority: Priority,
    ) -> str:
        parts = [f"Categorized as {category.value} based on commit message"]
        if impact_areas:
            parts.append(f"affects {', '.join(impact_areas)} areas")
        parts.append(f"estimated {effort.value} effort")
        if conflict_risk > self.thresholds.reasoning_risk_threshold:
            parts.append(f"high conflict risk ({round(conflict_risk * 100)}%)")
        if final_priority is not base_priority:
            parts.append(
                f"priority adjusted from {base_priority.value} to {final_priority.value}"
            )
        return ", ".join(parts)

    # ── batches ───────────────────────────────────────────────────

    def batch_classify(self, commits: Iterable[Commit]) -> list[TriagedCommit]:
        """Classify each commit independently, preserving input order."""
        return [TriagedCommit(commit=c, triage=self.classify(c)) for c in commits]

    @staticmethod
    def get_actionable_items(
        items: Iterable[TriagedCommit],
        min_priority: Priority = Priority.MEDIUM,
        max_items: int = 20,
    ) -> list[TriagedCommit]:
        """Items at or above *min_priority*, most urgent first, capped at *max_items*."""
        eligible = [i for i in items if i.triage.priority.rank >= min_priority.rank]
        eligible.sort(key=lambda i: i.triage.priority.rank, reverse=True)
        return eligible[: max(0, max_items)]

    def generate_integration_plan(self, items: Iterable[TriagedCommit]) -> IntegrationPlan:
        """Partition triaged commits into immediate / next-sprint / backlog buckets.

        Within each priority the input order is kept, so callers decide which
        high and medium items count as "top".
        """
        by_priority: dict[Priority, list[TriagedCommit]] = {p: [] for p in Priority}
        for item in items:
            by_priority[item.triage.priority].append(item)

        high_slots = self.thresholds.immediate_high_slots
        medium_slots = self.thresholds.next_sprint_medium_slots
        high = by_priority[Priority.HIGH]
        medium = by_priority[Priority.MEDIUM]

        immediate = by_priority[Priority.CRITICAL] + high[:high_slots]
        next_sprint = high[high_slots:] + medium[:medium_slots]
        backlog = medium[medium_slots:] + by_priority[Priority.LOW]

        all_items = immediate + next_sprint + backlog
        summary = IntegrationSummary(
            total_commits=len(all_items),
            immediate_count=len(immediate),
            next_sprint_count=len(next_sprint),
            backlog_count=len(backlog),
            estimated_effort=sum(i.triage.effort_estimate.points for i in all_items),
        )
        return IntegrationPlan(
            immediate=immediate,
            next_sprint=next_sprint,
            backlog=backlog,
            summary=summary,
        )
