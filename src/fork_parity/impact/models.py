"""Result types produced by the impact analyzer. None of these are persisted."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..models import Severity


class Complexity(str, Enum):
    """Coarse dependency-impact label, ordered minimal to very-high."""

    MINIMAL = "minimal"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    VERY_HIGH = "very-high"

    @property
    def rank(self) -> int:
        return list(Complexity).index(self)


class PerformanceVerdict(str, Enum):
    NEUTRAL = "neutral"
    MINOR_NEGATIVE = "minor-negative"
    NEGATIVE = "negative"


def _plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, list):
        return [_plain(v) for v in value]
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if hasattr(value, "to_dict"):
        return value.to_dict()
    return value


class _Serializable:
    def to_dict(self) -> dict[str, Any]:
        return {name: _plain(getattr(self, name)) for name in self.__dataclass_fields__}


@dataclass
class CriticalPath(_Serializable):
    """A file whose dependent count makes it a high-fan-in node."""

    file: str
    dependent_count: int
    radius: int


@dataclass
class DependencyImpact(_Serializable):
    direct_dependencies: list[str] = field(default_factory=list)
    affected_files: list[str] = field(default_factory=list)
    impact_radius: int = 0
    critical_paths: list[CriticalPath] = field(default_factory=list)
    complexity: Complexity = Complexity.MINIMAL
    risk_level: Severity = Severity.LOW
    package_changes: list[str] = field(default_factory=list)
    impacted_modules: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class Finding(_Serializable):
    """One pattern-scan hit, aggregated per file and category."""

    type: str
    severity: Severity
    description: str
    file: Optional[str] = None
    match_count: int = 0
    evidence: list[str] = field(default_factory=list)


@dataclass
class BreakingChangeReport(_Serializable):
    has_breaking_changes: bool = False
    severity: Severity = Severity.NONE
    changes: list[Finding] = field(default_factory=list)
    migration_required: bool = False
    affected_apis: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class SecurityReport(_Serializable):
    has_security_impact: bool = False
    risk_level: Severity = Severity.NONE
    findings: list[Finding] = field(default_factory=list)
    security_areas: list[str] = field(default_factory=list)
    requires_security_review: bool = False
    recommendations: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class PerformanceReport(_Serializable):
    has_performance_impact: bool = False
    verdict: PerformanceVerdict = PerformanceVerdict.NEUTRAL
    hotspots: list[Finding] = field(default_factory=list)
    complexity_increase: int = 0
    requires_performance_test: bool = False
    recommendations: list[str] = field(default_factory=list)
    error: Optional[str] = None


@dataclass
class AnalysisResults(_Serializable):
    """Bundle of whichever analyses were run for one commit."""

    dependency: Optional[DependencyImpact] = None
    breaking: Optional[BreakingChangeReport] = None
    security: Optional[SecurityReport] = None
    performance: Optional[PerformanceReport] = None
    conflicts: Optional[Any] = None
