"""Batch triage results and integration plans."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from ..models import Commit, TriageResult


@dataclass
class TriagedCommit:
    """A commit paired with its triage verdict."""

    commit: Commit
    triage: TriageResult

    @property
    def hash(self) -> str:
        return self.commit.hash

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.commit.hash,
            "message": self.commit.message,
            "author": self.commit.author,
            "triage": self.triage.to_dict(),
        }


@dataclass
class IntegrationSummary:
    total_commits: int = 0
    immediate_count: int = 0
    next_sprint_count: int = 0
    backlog_count: int = 0
    estimated_effort: int = 0


@dataclass
class IntegrationPlan:
    """Commits partitioned into scheduling buckets."""

    immediate: list[TriagedCommit] = field(default_factory=list)
    next_sprint: list[TriagedCommit] = field(default_factory=list)
    backlog: list[TriagedCommit] = field(default_factory=list)
    summary: IntegrationSummary = field(default_factory=IntegrationSummary)

    def to_dict(self) -> dict[str, Any]:
        return {
            "immediate": [i.to_dict() for i in self.immediate],
            "next_sprint": [i.to_dict() for i in self.next_sprint],
            "backlog": [i.to_dict() for i in self.backlog],
            "summary": {
                "total_commits": self.summary.total_commits,
                "immediate_count": self.summary.immediate_count,
                "next_sprint_count": self.summary.next_sprint_count,
                "backlog_count": self.summary.backlog_count,
                "estimated_effort": self.summary.estimated_effort,
            },
        }
