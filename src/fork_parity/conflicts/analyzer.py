"""Conflict detection, resolution suggestions and time estimation."""

from __future__ import annotations

import math
from pathlib import PurePosixPath
from typing import Iterable, Optional

from ..config import ConflictThresholds
from ..logging_config import get_logger
from ..models import AdaptationPattern, Commit
from ..workspace import SourceTree
from .markers import (
    DEFAULT_FILE_SUGGESTIONS,
    FILE_SUGGESTIONS,
    conflict_type_for_path,
    extract_blocks,
    resolution_complexity,
)
from .models import (
    Approach,
    ChangeCost,
    ConflictAnalysis,
    ConflictBlock,
    ConflictType,
    FileConflict,
    Outcome,
    Resolution,
    ResolverKind,
)
from .resolvers import ConflictResolver

logger = get_logger(__name__)


def format_duration(minutes: int) -> str:
    """Render minutes as ``N minutes`` below an hour, else whole hours rounded up."""
    if minutes < 60:
        return f"{minutes} minutes"
    hours = math.ceil(minutes / 60)
    return f"{hours} hour{'s' if hours != 1 else ''}"


class ConflictAnalyzer:
    """Find merge-marker conflicts in a commit's files and suggest resolutions.

    Args:
        pattern_store: Optional source of learned adaptation patterns. It is
            read once, on first use.
        thresholds: Confidence values and minute costs.
    """

    def __init__(self, pattern_store=None, thresholds: Optional[ConflictThresholds] = None):
        self.thresholds = thresholds or ConflictThresholds()
        self.resolver = ConflictResolver(self.thresholds)
        self._store = pattern_store
        self._patterns: Optional[list[AdaptationPattern]] = None

    @property
    def patterns(self) -> list[AdaptationPattern]:
        if self._patterns is None:
            self._patterns = list(self._store.load_all()) if self._store is not None else []
        return self._patterns

    def analyze_conflicts(self, commit: Commit, tree: SourceTree) -> ConflictAnalysis:
        return self.analyze_files(commit.files_changed, tree)

    def analyze_files(self, paths: Iterable[str], tree: SourceTree) -> ConflictAnalysis:
        """Scan *paths* under *tree* for conflict blocks.

        Never raises: an unexpected failure is reported in ``error`` with the
        files scanned so far.
        """
        analysis = ConflictAnalysis()
        try:
            self._analyze(list(dict.fromkeys(paths)), tree, analysis)
        except Exception as e:
            logger.warning("Conflict analysis failed: %s", e)
            analysis.error = f"analysis failed: {e}"
        return analysis

    def _analyze(self, paths: list[str], tree: SourceTree, analysis: ConflictAnalysis) -> None:
        threshold = self.thresholds.automatic_threshold
        total_blocks = 0
        automatic_blocks = 0
        minutes = 0

        for path in paths:
            content = tree.read_text(path)
            if content is None:
                continue
            blocks = extract_blocks(path, content)
            if not blocks:
                continue

            conflict_type = conflict_type_for_path(path)
            analysis.conflicts.append(
                FileConflict(
                    file=path,
                    conflict_type=conflict_type,
                    blocks=blocks,
                    complexity=resolution_complexity(blocks),
                    suggestions=list(
                        FILE_SUGGESTIONS.get(conflict_type, DEFAULT_FILE_SUGGESTIONS)
                    ),
                )
            )

            for index, block in enumerate(blocks):
                total_blocks += 1
                resolution = self.resolver.resolve(block, index, conflict_type)
                analysis.resolution_suggestions.append(resolution)
                automatic = resolution.is_automatic(threshold)

                if not automatic:
                    learned = self._apply_pattern(block, index, conflict_type)
                    if learned is not None:
                        analysis.resolution_suggestions.append(learned)
                        automatic = learned.is_automatic(threshold)

                if automatic:
                    automatic_blocks += 1
                minutes += self._block_minutes(block, resolution)

        analysis.has_conflicts = total_blocks > 0
        analysis.automation_rate = (
            round(automatic_blocks / total_blocks, 4) if total_blocks else 1.0
        )
        analysis.recommended_approach = self.recommend_approach(analysis.automation_rate)
        analysis.estimated_minutes = minutes
        analysis.estimated_resolution_time = format_duration(minutes)

    # ── adaptation patterns ───────────────────────────────────────

    def find_pattern(
        self, block: ConflictBlock, conflict_type: ConflictType
    ) -> Optional[AdaptationPattern]:
        ext = PurePosixPath(block.file).suffix.lower()
        for pattern in self.patterns:
            if ext and pattern.file_type == ext:
                return pattern
            if pattern.pattern_type in (block.kind.value, conflict_type.value):
                return pattern
        return None

    def _apply_pattern(
        self, block: ConflictBlock, index: int, conflict_type: ConflictType
    ) -> Optional[Resolution]:
        pattern = self.find_pattern(block, conflict_type)
        if pattern is None:
            return None
        t = self.thresholds
        confidence = (
            t.pattern_success_confidence if pattern.success else t.pattern_failure_confidence
        )
        return Resolution(
            file=block.file,
            block_index=index,
            resolver=ResolverKind.ADAPTATION_PATTERN,
            outcome=Outcome.AUTOMATIC if pattern.success else Outcome.MANUAL,
            confidence=confidence,
            description=f"Apply learned adaptation pattern ({pattern.pattern_type})",
            resolution=pattern.target_pattern,
            requires_manual_review=not pattern.success,
            details={"pattern_id": pattern.id, "source_commit": pattern.commit_hash},
        )

    # ── aggregate ─────────────────────────────────────────────────

    def recommend_approach(self, automation_rate: float) -> Approach:
        if automation_rate > self.thresholds.automated_rate:
            return Approach.AUTOMATED
        if automation_rate > self.thresholds.semi_automated_rate:
            return Approach.SEMI_AUTOMATED
        return Approach.MANUAL

    @staticmethod
    def change_cost(block: ConflictBlock, resolution: Resolution) -> ChangeCost:
        if any(line.lstrip().startswith("export ") for line in block.head + block.incoming):
            return ChangeCost.API_CHANGE
        if resolution.outcome is Outcome.SIGNATURE_CHANGE:
            return ChangeCost.SIGNATURE_CHANGE
        return ChangeCost.MERGE_CONFLICT

    def _block_minutes(self, block: ConflictBlock, resolution: Resolution) -> int:
        cost = self.change_cost(block, resolution)
        if cost is ChangeCost.API_CHANGE:
            return self.thresholds.api_change_minutes
        if cost is ChangeCost.SIGNATURE_CHANGE:
            return self.thresholds.signature_change_minutes
        return self.thresholds.merge_conflict_minutes
