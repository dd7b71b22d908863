"""Storage for learned adaptation patterns."""

import json
import sqlite3
from typing import Optional, Protocol

from ..exceptions import PersistenceError
from ..logging_config import get_logger
from ..models import AdaptationPattern

logger = get_logger(__name__)


class PatternStore(Protocol):
    """Anything that can list and append adaptation patterns."""

    def load_all(self) -> list[AdaptationPattern]: ...

    def append(self, pattern: AdaptationPattern) -> None: ...


class InMemoryPatternStore:
    """Process-local store, mainly for tests and one-off analyses."""

    def __init__(self, patterns=()):
        self._patterns: list[AdaptationPattern] = list(patterns)

    def load_all(self) -> list[AdaptationPattern]:
        return list(self._patterns)

    def append(self, pattern: AdaptationPattern) -> None:
        self._patterns.append(pattern)


class SQLitePatternStore:
    """Patterns in the ``adaptation_patterns`` table, cached after first load."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self._cache: Optional[list[AdaptationPattern]] = None

    def load_all(self) -> list[AdaptationPattern]:
        if self._cache is None:
            rows = self.conn.execute(
                "SELECT * FROM adaptation_patterns ORDER BY created_at, rowid"
            ).fetchall()
            self._cache = [self._from_row(r) for r in rows]
            logger.debug("Loaded %d adaptation pattern(s)", len(self._cache))
        return list(self._cache)

    def append(self, pattern: AdaptationPattern) -> None:
        try:
            with self.conn:
                self.conn.execute(
                    """
                    INSERT INTO adaptation_patterns (id, commit_hash, pattern_type,
                        source_pattern, target_pattern, context, success,
                        effort_level, notes, created_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        pattern.id,
                        pattern.commit_hash,
                        pattern.pattern_type,
                        pattern.source_pattern,
                        pattern.target_pattern,
                        json.dumps(pattern.context),
                        1 if pattern.success else 0,
                        pattern.effort_level,
                        pattern.notes,
                        pattern.created_at,
                    ),
                )
        except sqlite3.IntegrityError as e:
            raise PersistenceError(
                f"Cannot store adaptation pattern {pattern.id}", details={"reason": str(e)}
            ) from e
        if self._cache is not None:
            self._cache.append(pattern)

    @staticmethod
    def _from_row(row: sqlite3.Row) -> AdaptationPattern:
        return AdaptationPattern(
            id=row["id"],
            commit_hash=row["commit_hash"],
            pattern_type=row["pattern_type"],
            source_pattern=row["source_pattern"],
            target_pattern=row["target_pattern"],
            context=json.loads(row["context"] or "{}"),
            success=bool(row["success"]),
            effort_level=row["effort_level"],
            notes=row["notes"],
            created_at=row["created_at"],
        )
