"""Core data models shared across triage, analysis, planning and storage."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional


class Priority(str, Enum):
    """Four-level priority ladder, ordered low to critical."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _PRIORITY_LADDER.index(self)

    def escalate(self) -> "Priority":
        """One step up the ladder; critical stays critical."""
        return _PRIORITY_LADDER[min(self.rank + 1, len(_PRIORITY_LADDER) - 1)]

    def deescalate(self) -> "Priority":
        """One step down the ladder; low stays low."""
        return _PRIORITY_LADDER[max(self.rank - 1, 0)]


_PRIORITY_LADDER = [Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.CRITICAL]


class Category(str, Enum):
    SECURITY = "security"
    BUGFIX = "bugfix"
    FEATURE = "feature"
    REFACTOR = "refactor"
    DOCS = "docs"
    TEST = "test"
    CHORE = "chore"


class Effort(str, Enum):
    """Effort buckets with their integration-plan point values."""

    TRIVIAL = "trivial"
    SMALL = "small"
    MEDIUM = "medium"
    LARGE = "large"
    XL = "xl"

    @property
    def points(self) -> int:
        return _EFFORT_POINTS[self]


_EFFORT_POINTS = {
    Effort.TRIVIAL: 1,
    Effort.SMALL: 3,
    Effort.MEDIUM: 8,
    Effort.LARGE: 20,
    Effort.XL: 40,
}


class Severity(str, Enum):
    """Finding severity shared by the breaking-change, security and performance scans."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def rank(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [Severity.NONE, Severity.LOW, Severity.MEDIUM, Severity.HIGH, Severity.CRITICAL]


def max_severity(severities) -> Severity:
    """Return the most severe value in *severities*, or NONE when empty."""
    result = Severity.NONE
    for sev in severities:
        if sev.rank > result.rank:
            result = sev
    return result


class CommitState(str, Enum):
    """Review decision recorded for a commit. PENDING means no decision row."""

    PENDING = "pending"
    REVIEWED = "reviewed"
    INTEGRATED = "integrated"
    SKIPPED = "skipped"
    CONFLICT = "conflict"
    DEFERRED = "deferred"


def _to_int(value: Any) -> int:
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


@dataclass
class Commit:
    """One upstream change under evaluation."""

    hash: str
    message: str = ""
    author: str = ""
    author_email: str = ""
    commit_date: str = ""
    files_changed: list[str] = field(default_factory=list)
    insertions: int = 0
    deletions: int = 0

    @property
    def short_hash(self) -> str:
        return self.hash[:8]

    @property
    def lines_changed(self) -> int:
        return self.insertions + self.deletions

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Commit":
        """Build a commit from the normalized input shape.

        Accepts camelCase (``authorEmail``, ``filesChanged``) and snake_case
        keys. Missing or malformed optional fields fall back to defaults.
        """
        files = data.get("files_changed", data.get("filesChanged"))
        if isinstance(files, str):
            files = [files]
        elif not isinstance(files, (list, tuple)):
            files = []
        return cls(
            hash=str(data.get("hash") or ""),
            message=str(data.get("message") or ""),
            author=str(data.get("author") or ""),
            author_email=str(data.get("author_email", data.get("authorEmail")) or ""),
            commit_date=str(data.get("commit_date", data.get("commitDate")) or ""),
            files_changed=[str(f) for f in files if f],
            insertions=_to_int(data.get("insertions")),
            deletions=_to_int(data.get("deletions")),
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TriageResult:
    """The classifier's verdict for exactly one commit."""

    priority: Priority
    category: Category
    impact_areas: list[str]
    conflict_risk: float
    effort_estimate: Effort
    reasoning: str
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "priority": self.priority.value,
            "category": self.category.value,
            "impact_areas": list(self.impact_areas),
            "conflict_risk": self.conflict_risk,
            "effort_estimate": self.effort_estimate.value,
            "reasoning": self.reasoning,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TriageResult":
        return cls(
            priority=Priority(data["priority"]),
            category=Category(data["category"]),
            impact_areas=list(data.get("impact_areas") or []),
            conflict_risk=float(data.get("conflict_risk", 0.0)),
            effort_estimate=Effort(data["effort_estimate"]),
            reasoning=str(data.get("reasoning") or ""),
            confidence=float(data.get("confidence", 0.0)),
        )


@dataclass
class CommitStatus:
    """Human review decision layered on top of a commit."""

    status: CommitState
    decision_reasoning: Optional[str] = None
    reviewer: Optional[str] = None
    review_date: Optional[str] = None
    adaptation_notes: Optional[str] = None
    integration_effort_actual: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["status"] = self.status.value
        return data


@dataclass
class AdaptationPattern:
    """A transformation learned from a completed manual integration."""

    id: str
    commit_hash: str
    pattern_type: str
    source_pattern: str
    target_pattern: str
    context: dict[str, Any] = field(default_factory=dict)
    success: bool = True
    effort_level: Optional[str] = None
    notes: Optional[str] = None
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    @property
    def file_type(self) -> Optional[str]:
        value = self.context.get("file_type") or self.context.get("fileType")
        if not value:
            return None
        value = str(value).strip().lower()
        return value if value.startswith(".") else f".{value}"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
