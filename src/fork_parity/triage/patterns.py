"""Rule tables for commit triage.

All tables are immutable; ``TriageEngine`` receives a ``TriageCatalog`` at
construction and never mutates it.
"""

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping

from ..models import Category, Effort, Priority


@dataclass(frozen=True)
class CategoryRule:
    """Keywords that identify a commit category, with its base verdict."""

    category: Category
    keywords: tuple[str, ...]
    priority: Priority
    confidence: float


@dataclass(frozen=True)
class EffortBucket:
    """Upper bounds (inclusive) on file count and changed lines for a bucket."""

    effort: Effort
    max_files: int
    max_lines: int


def _compile(patterns, flags=0) -> tuple:
    return tuple(re.compile(p, flags) for p in patterns)


# Order matters: on equal confidence the earlier rule wins.
CATEGORY_RULES = (
    CategoryRule(
        Category.SECURITY,
        (
            "security",
            "vulnerability",
            "exploit",
            "cve",
            "xss",
            "csrf",
            "injection",
            "auth",
            "permission",
            "sanitize",
            "escape",
        ),
        Priority.CRITICAL,
        0.9,
    ),
    CategoryRule(
        Category.BUGFIX,
        ("fix", "bug", "issue", "error", "crash", "fail", "broken", "incorrect", "wrong", "patch"),
        Priority.HIGH,
        0.8,
    ),
    CategoryRule(
        Category.FEATURE,
        ("add", "new", "feature", "implement", "support", "enable", "introduce"),
        Priority.MEDIUM,
        0.7,
    ),
    CategoryRule(
        Category.REFACTOR,
        ("refactor", "cleanup", "reorganize", "restructure", "optimize", "improve", "simplify"),
        Priority.LOW,
        0.6,
    ),
    CategoryRule(
        Category.DOCS,
        ("doc", "readme", "comment", "documentation", "guide", "example", "tutorial"),
        Priority.LOW,
        0.9,
    ),
    CategoryRule(
        Category.TEST,
        ("test", "spec", "coverage", "mock", "stub", "fixture"),
        Priority.LOW,
        0.8,
    ),
    CategoryRule(
        Category.CHORE,
        ("chore", "update", "bump", "version", "dependency", "build", "ci", "lint"),
        Priority.LOW,
        0.7,
    ),
)

# Path regexes are case-sensitive and use search semantics.
IMPACT_AREAS: Mapping[str, tuple] = MappingProxyType(
    {
        "core": _compile([r"^src/core", r"^lib/core", r"^core/"]),
        "api": _compile([r"api", r"endpoint", r"route", r"controller"]),
        "ui": _compile([r"component", r"view", r"ui", r"frontend", r"client"]),
        "database": _compile([r"migration", r"schema", r"model", r"db", r"database"]),
        "auth": _compile([r"auth", r"login", r"permission", r"security"]),
        "config": _compile([r"config", r"setting", r"env", r"\.env"]),
        "build": _compile(
            [r"webpack", r"rollup", r"vite", r"build", r"package\.json", r"Dockerfile"]
        ),
        "test": _compile([r"test", r"spec", r"__tests__"]),
        "docs": _compile([r"readme", r"doc", r"\.md$"]),
    }
)

EFFORT_BUCKETS = (
    EffortBucket(Effort.TRIVIAL, 2, 10),
    EffortBucket(Effort.SMALL, 5, 50),
    EffortBucket(Effort.MEDIUM, 15, 200),
    EffortBucket(Effort.LARGE, 30, 500),
)

CONTESTED_FILES = ("package.json", "README.md", "config.js", "index.js")

SECURITY_FILE_PATTERN = re.compile(r"auth|security|permission|login")


@dataclass(frozen=True)
class TriageCatalog:
    """Bundle of the rule tables consumed by the triage engine."""

    categories: tuple[CategoryRule, ...] = CATEGORY_RULES
    impact_areas: Mapping[str, tuple] = field(default_factory=lambda: IMPACT_AREAS)
    effort_buckets: tuple[EffortBucket, ...] = EFFORT_BUCKETS
    contested_files: tuple[str, ...] = CONTESTED_FILES
    security_file_pattern: "re.Pattern[str]" = SECURITY_FILE_PATTERN


DEFAULT_CATALOG = TriageCatalog()
