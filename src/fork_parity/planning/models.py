"""Migration plan data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..models import Effort, Severity


@dataclass
class Phase:
    """One step of a migration plan with an hour range estimate."""

    name: str
    tasks: list[str] = field(default_factory=list)
    min_hours: float = 0
    max_hours: float = 0

    @property
    def midpoint(self) -> float:
        return (self.min_hours + self.max_hours) / 2

    @property
    def estimated_time(self) -> str:
        return f"{self.min_hours:g}-{self.max_hours:g} hours"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "tasks": list(self.tasks),
            "estimated_time": self.estimated_time,
            "min_hours": self.min_hours,
            "max_hours": self.max_hours,
        }


@dataclass
class PlanRisk:
    type: str
    severity: Severity
    description: str
    mitigation: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "severity": self.severity.value,
            "description": self.description,
            "mitigation": self.mitigation,
        }


@dataclass
class RollbackPlan:
    triggers: list[str] = field(default_factory=list)
    steps: list[str] = field(default_factory=list)
    estimated_time: str = "30 minutes"

    def to_dict(self) -> dict[str, Any]:
        return {
            "triggers": list(self.triggers),
            "steps": list(self.steps),
            "estimated_time": self.estimated_time,
        }


@dataclass
class MigrationPlan:
    """Phased integration plan for a single upstream commit."""

    commit_hash: str
    phases: list[Phase] = field(default_factory=list)
    total_hours: float = 0
    effort: Effort = Effort.SMALL
    risk_score: int = 0
    risk_level: Severity = Severity.LOW
    risks: list[PlanRisk] = field(default_factory=list)
    prerequisites: list[str] = field(default_factory=list)
    rollback: RollbackPlan = field(default_factory=RollbackPlan)
    testing_strategy: list[str] = field(default_factory=list)

    def phase(self, name: str) -> Phase:
        for phase in self.phases:
            if phase.name == name:
                return phase
        raise KeyError(name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "commit_hash": self.commit_hash,
            "phases": [p.to_dict() for p in self.phases],
            "total_hours": self.total_hours,
            "effort": self.effort.value,
            "risk_score": self.risk_score,
            "risk_level": self.risk_level.value,
            "risks": [r.to_dict() for r in self.risks],
            "prerequisites": list(self.prerequisites),
            "rollback": self.rollback.to_dict(),
            "testing_strategy": list(self.testing_strategy),
        }
