"""Guidance from earlier tracked commits that touched similar paths.

A past commit is similar to a changed file when it touched a file with the
same name or a file in the same directory. Candidates are scored by path
alone: name match 0.5, same directory 0.3, same extension 0.2.
"""

from __future__ import annotations

import posixpath
from dataclasses import dataclass, field
from typing import Any, Iterable, Sequence

from ..logging_config import get_logger
from ..models import Commit

logger = get_logger(__name__)

HISTORY_LIMIT = 20
MAX_SIMILAR = 5

NAME_WEIGHT = 0.5
DIRECTORY_WEIGHT = 0.3
EXTENSION_WEIGHT = 0.2

NO_SIMILAR_GUIDANCE = "No similar changes found. Proceed with careful manual integration."


@dataclass
class SimilarChange:
    commit_hash: str
    message: str
    similar_files: list[str]
    similarity: float

    def guidance(self) -> dict[str, str]:
        return {
            "approach": f"Similar to commit {self.commit_hash[:8]}",
            "description": self.message,
            "similarity": f"{round(self.similarity * 100)}%",
            "recommendation": "Review this commit for adaptation patterns",
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "commit_hash": self.commit_hash,
            "message": self.message,
            "similar_files": list(self.similar_files),
            "similarity": self.similarity,
        }


@dataclass
class FileSimilarity:
    file: str
    similar_changes: list[SimilarChange] = field(default_factory=list)

    @property
    def average(self) -> float:
        if not self.similar_changes:
            return 0.0
        return sum(c.similarity for c in self.similar_changes) / len(self.similar_changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "file": self.file,
            "similar_changes": [c.to_dict() for c in self.similar_changes],
            "adaptation_guidance": [c.guidance() for c in self.similar_changes],
        }


@dataclass
class SimilarityAnalysis:
    similarities: list[FileSimilarity] = field(default_factory=list)
    overall_guidance: str = NO_SIMILAR_GUIDANCE

    @property
    def has_similar_changes(self) -> bool:
        return bool(self.similarities)

    def to_dict(self) -> dict[str, Any]:
        return {
            "has_similar_changes": self.has_similar_changes,
            "similarities": [s.to_dict() for s in self.similarities],
            "overall_guidance": self.overall_guidance,
        }


def file_similarity(target: str, candidates: Iterable[str]) -> float:
    """Best path similarity between *target* and any of *candidates*."""
    name = posixpath.basename(target)
    directory = posixpath.dirname(target)
    ext = posixpath.splitext(target)[1]
    best = 0.0
    for candidate in candidates:
        score = 0.0
        if posixpath.basename(candidate) == name:
            score += NAME_WEIGHT
        if posixpath.dirname(candidate) == directory:
            score += DIRECTORY_WEIGHT
        if posixpath.splitext(candidate)[1] == ext:
            score += EXTENSION_WEIGHT
        best = max(best, score)
    return round(best, 4)


def find_similar_changes(
    path: str, history: Iterable[Commit], limit: int = MAX_SIMILAR
) -> list[SimilarChange]:
    """Past commits that touched *path*'s name or directory, most similar first.

    Ties keep the order of *history*.
    """
    name = posixpath.basename(path)
    directory = posixpath.dirname(path)
    found: list[SimilarChange] = []
    for commit in history:
        similar = [
            f
            for f in commit.files_changed
            if posixpath.basename(f) == name or posixpath.dirname(f) == directory
        ]
        if not similar:
            continue
        found.append(
            SimilarChange(
                commit_hash=commit.hash,
                message=commit.message,
                similar_files=similar,
                similarity=file_similarity(path, similar),
            )
        )
    found.sort(key=lambda c: -c.similarity)
    return found[:limit]


def overall_guidance(similarities: Sequence[FileSimilarity]) -> str:
    if not similarities:
        return NO_SIMILAR_GUIDANCE
    average = sum(s.average for s in similarities) / len(similarities)
    if average > 0.7:
        return "High similarity found with previous changes. Follow established patterns."
    if average > 0.4:
        return "Moderate similarity found. Use previous changes as guidance."
    return "Low similarity with previous changes. Proceed with caution."


def analyze_similarity(commit: Commit, history: Iterable[Commit]) -> SimilarityAnalysis:
    """Match each of *commit*'s files against *history*, skipping *commit* itself."""
    earlier = [c for c in history if c.hash != commit.hash]
    analysis = SimilarityAnalysis()
    for path in dict.fromkeys(commit.files_changed):
        changes = find_similar_changes(path, earlier)
        if changes:
            analysis.similarities.append(FileSimilarity(file=path, similar_changes=changes))
    analysis.overall_guidance = overall_guidance(analysis.similarities)
    logger.debug(
        "Similarity for %s: %d of %d file(s) matched",
        commit.short_hash,
        len(analysis.similarities),
        len(commit.files_changed),
    )
    return analysis
