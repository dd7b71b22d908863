"""SQLite-backed tracking database stored in .fork-parity/ at the project root."""

import sqlite3
from pathlib import Path
from typing import Optional

from ..exceptions import PersistenceError
from ..logging_config import get_logger

logger = get_logger(__name__)

# Current schema version (bump when tables change).
_SCHEMA_VERSION = 1

DEFAULT_DB_DIR = ".fork-parity"
DB_FILENAME = "parity.db"


class ParityDB:
    """Manages the ``.fork-parity/parity.db`` SQLite database.

    Usage::

        with ParityDB("/path/to/fork") as db:
            ParityStore(db.conn).upsert_commit(repo_id, commit)
    """

    def __init__(self, project_root: str, db_dir: str = DEFAULT_DB_DIR) -> None:
        self.db_dir: Path = Path(project_root) / db_dir
        self.db_path: Path = self.db_dir / DB_FILENAME
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def conn(self) -> sqlite3.Connection:
        """Return the active connection. Raises if not connected."""
        if self._conn is None:
            raise RuntimeError("ParityDB is not connected. Use as context manager or call connect().")
        return self._conn

    @property
    def exists(self) -> bool:
        return self.db_path.exists()

    # ── lifecycle ─────────────────────────────────────────────────

    def _ensure_dir(self) -> None:
        """Create .fork-parity/ and write a .gitignore so it stays untracked."""
        self.db_dir.mkdir(parents=True, exist_ok=True)
        gitignore = self.db_dir / ".gitignore"
        if not gitignore.exists():
            gitignore.write_text("*\n")

    def connect(self) -> sqlite3.Connection:
        """Open (or create) the database and run migrations."""
        try:
            self._ensure_dir()
            conn = sqlite3.connect(str(self.db_path))
            conn.execute("PRAGMA journal_mode=WAL")
            conn.execute("PRAGMA foreign_keys=ON")
        except (OSError, sqlite3.Error) as e:
            raise PersistenceError(
                f"Cannot open database at {self.db_path}", details={"reason": str(e)}
            ) from e
        conn.row_factory = sqlite3.Row
        self._conn = conn
        self._migrate()
        logger.debug("Parity DB connected at %s", self.db_path)
        return conn

    def close(self) -> None:
        """Close the connection if open."""
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "ParityDB":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── migration ─────────────────────────────────────────────────

    def _migrate(self) -> None:
        """Idempotently create / upgrade all tables."""
        c = self.conn

        c.execute(
            """
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER NOT NULL
            )
            """
        )
        row = c.execute("SELECT version FROM schema_version").fetchone()
        if row is None:
            c.execute(
                "INSERT INTO schema_version (version) VALUES (?)",
                (_SCHEMA_VERSION,),
            )

        # ── repositories ─────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS repositories (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                path            TEXT    NOT NULL UNIQUE,
                upstream_url    TEXT,
                upstream_branch TEXT    NOT NULL DEFAULT 'main',
                fork_branch     TEXT    NOT NULL DEFAULT 'main',
                last_sync       TEXT,
                created_at      TEXT    NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

        # ── commits ──────────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS commits (
                id            INTEGER PRIMARY KEY AUTOINCREMENT,
                repository_id INTEGER NOT NULL REFERENCES repositories(id) ON DELETE CASCADE,
                hash          TEXT    NOT NULL,
                message       TEXT    NOT NULL DEFAULT '',
                author        TEXT    NOT NULL DEFAULT '',
                author_email  TEXT    NOT NULL DEFAULT '',
                commit_date   TEXT    NOT NULL DEFAULT '',
                files_changed TEXT    NOT NULL DEFAULT '[]',
                insertions    INTEGER NOT NULL DEFAULT 0,
                deletions     INTEGER NOT NULL DEFAULT 0,
                created_at    TEXT    NOT NULL DEFAULT CURRENT_TIMESTAMP,
                UNIQUE (repository_id, hash)
            )
            """
        )

        # ── triage_results ───────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS triage_results (
                id              INTEGER PRIMARY KEY AUTOINCREMENT,
                commit_id       INTEGER NOT NULL UNIQUE REFERENCES commits(id) ON DELETE CASCADE,
                priority        TEXT    NOT NULL
                    CHECK (priority IN ('critical', 'high', 'medium', 'low')),
                category        TEXT    NOT NULL
                    CHECK (category IN ('security', 'bugfix', 'feature', 'refactor',
                                        'docs', 'test', 'chore')),
                impact_areas    TEXT    NOT NULL DEFAULT '[]',
                conflict_risk   REAL    NOT NULL DEFAULT 0
                    CHECK (conflict_risk >= 0 AND conflict_risk <= 1),
                effort_estimate TEXT    NOT NULL
                    CHECK (effort_estimate IN ('trivial', 'small', 'medium', 'large', 'xl')),
                reasoning       TEXT    NOT NULL DEFAULT '',
                confidence      REAL    NOT NULL DEFAULT 0,
                created_at      TEXT    NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

        # ── commit_status ────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS commit_status (
                id                        INTEGER PRIMARY KEY AUTOINCREMENT,
                commit_id                 INTEGER NOT NULL UNIQUE
                    REFERENCES commits(id) ON DELETE CASCADE,
                status                    TEXT    NOT NULL
                    CHECK (status IN ('pending', 'reviewed', 'integrated', 'skipped',
                                      'conflict', 'deferred')),
                decision_reasoning        TEXT,
                reviewer                  TEXT,
                review_date               TEXT,
                adaptation_notes          TEXT,
                integration_effort_actual TEXT,
                updated_at                TEXT    NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

        # ── integrations ─────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS integrations (
                id                INTEGER PRIMARY KEY AUTOINCREMENT,
                commit_id         INTEGER NOT NULL REFERENCES commits(id) ON DELETE CASCADE,
                integration_type  TEXT    NOT NULL,
                integration_hash  TEXT,
                notes             TEXT,
                integrated_at     TEXT    NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

        # ── metrics ──────────────────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS metrics (
                id            INTEGER PRIMARY KEY AUTOINCREMENT,
                repository_id INTEGER NOT NULL REFERENCES repositories(id) ON DELETE CASCADE,
                metric_name   TEXT    NOT NULL,
                value         REAL    NOT NULL,
                recorded_at   TEXT    NOT NULL DEFAULT CURRENT_TIMESTAMP
            )
            """
        )

        # ── adaptation_patterns ──────────────────────────────────
        c.execute(
            """
            CREATE TABLE IF NOT EXISTS adaptation_patterns (
                id             TEXT    PRIMARY KEY,
                commit_hash    TEXT    NOT NULL,
                pattern_type   TEXT    NOT NULL,
                source_pattern TEXT    NOT NULL DEFAULT '',
                target_pattern TEXT    NOT NULL DEFAULT '',
                context        TEXT    NOT NULL DEFAULT '{}',
                success        INTEGER NOT NULL DEFAULT 1,
                effort_level   TEXT,
                notes          TEXT,
                created_at     TEXT    NOT NULL
            )
            """
        )

        # ── indexes ──────────────────────────────────────────────
        c.execute("CREATE INDEX IF NOT EXISTS idx_commits_hash ON commits(hash)")
        c.execute("CREATE INDEX IF NOT EXISTS idx_triage_priority ON triage_results(priority)")
        c.execute("CREATE INDEX IF NOT EXISTS idx_status_status ON commit_status(status)")
        c.execute(
            "CREATE INDEX IF NOT EXISTS idx_metrics_repo ON metrics(repository_id, metric_name)"
        )

        c.commit()
