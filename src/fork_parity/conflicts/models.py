"""Conflict blocks, resolutions and the aggregate conflict analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional


class BlockKind(str, Enum):
    """Content classification of a single conflict block."""

    IMPORT = "import"
    CODE = "code"
    DEPENDENCY = "dependency"
    UNKNOWN = "unknown"


class ConflictType(str, Enum):
    """Path-based classification of a conflicted file."""

    DEPENDENCY = "dependency"
    CONFIG = "config"
    CODE = "code"
    STYLE = "style"
    DOCUMENTATION = "documentation"
    OTHER = "other"


class ResolverKind(str, Enum):
    """Closed set of resolution strategies."""

    MERGE_IMPORTS = "merge_imports"
    MERGE_DEPENDENCIES = "merge_dependencies"
    MERGE_CONFIG = "merge_config"
    ANALYZE_FUNCTION = "analyze_function"
    MANUAL = "manual"
    ADAPTATION_PATTERN = "adaptation_pattern"


class Outcome(str, Enum):
    AUTOMATIC = "automatic"
    MANUAL = "manual"
    SIGNATURE_CHANGE = "signature-change"


class Approach(str, Enum):
    AUTOMATED = "automated"
    SEMI_AUTOMATED = "semi-automated"
    MANUAL = "manual"


class ChangeCost(str, Enum):
    """Which per-block minute cost a conflict is charged."""

    MERGE_CONFLICT = "merge-conflict"
    SIGNATURE_CHANGE = "function-signature"
    API_CHANGE = "api-change"


@dataclass
class ConflictBlock:
    """One ``<<<<<<< ... ======= ... >>>>>>>`` region."""

    file: str
    start_line: int
    head: list[str] = field(default_factory=list)
    incoming: list[str] = field(default_factory=list)
    kind: BlockKind = BlockKind.UNKNOWN

    @property
    def text(self) -> str:
        return "\n".join(self.head + self.incoming)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "start_line": self.start_line,
            "head": list(self.head),
            "incoming": list(self.incoming),
            "kind": self.kind.value,
        }


@dataclass
class Resolution:
    """A suggested resolution for one conflict block."""

    file: str
    block_index: int
    resolver: ResolverKind
    outcome: Outcome
    confidence: float
    description: str
    resolution: Any = None
    requires_manual_review: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    def is_automatic(self, threshold: float) -> bool:
        return not self.requires_manual_review and self.confidence > threshold

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "block_index": self.block_index,
            "resolver": self.resolver.value,
            "outcome": self.outcome.value,
            "confidence": self.confidence,
            "description": self.description,
            "resolution": self.resolution,
            "requires_manual_review": self.requires_manual_review,
            "details": self.details,
        }


@dataclass
class FileConflict:
    file: str
    conflict_type: ConflictType
    blocks: list[ConflictBlock] = field(default_factory=list)
    complexity: str = "none"
    suggestions: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "conflict_type": self.conflict_type.value,
            "conflict_count": len(self.blocks),
            "complexity": self.complexity,
            "suggestions": list(self.suggestions),
            "blocks": [b.to_dict() for b in self.blocks],
        }


@dataclass
class ConflictAnalysis:
    has_conflicts: bool = False
    conflicts: list[FileConflict] = field(default_factory=list)
    resolution_suggestions: list[Resolution] = field(default_factory=list)
    estimated_minutes: int = 0
    estimated_resolution_time: str = "0 minutes"
    recommended_approach: Approach = Approach.AUTOMATED
    automation_rate: float = 1.0
    error: Optional[str] = None

    @property
    def conflict_count(self) -> int:
        return sum(len(c.blocks) for c in self.conflicts)

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_conflicts": self.has_conflicts,
            "conflict_count": self.conflict_count,
            "conflicts": [c.to_dict() for c in self.conflicts],
            "resolution_suggestions": [r.to_dict() for r in self.resolution_suggestions],
            "estimated_minutes": self.estimated_minutes,
            "estimated_resolution_time": self.estimated_resolution_time,
            "recommended_approach": self.recommended_approach.value,
            "automation_rate": self.automation_rate,
            "error": self.error,
        }
