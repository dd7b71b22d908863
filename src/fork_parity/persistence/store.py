"""Read/write queries against the parity database.

``ParityStore`` wraps an open connection from ``ParityDB``. Writes commit
their own transaction; ``batch_update_status`` applies every row or none.
A commit with no ``commit_status`` row is pending.
"""

import json
import sqlite3
from datetime import datetime, timezone
from typing import Any, Iterable, Optional

from ..exceptions import CommitNotFoundError, PersistenceError
from ..logging_config import get_logger
from ..models import Commit, CommitState, CommitStatus, TriageResult
from ..triage.models import TriagedCommit

logger = get_logger(__name__)

MIN_PREFIX_LENGTH = 7

_PRIORITY_ORDER_SQL = (
    "CASE t.priority WHEN 'critical' THEN 0 WHEN 'high' THEN 1 "
    "WHEN 'medium' THEN 2 WHEN 'low' THEN 3 ELSE 4 END"
)

_COMMIT_COLUMNS = """
    c.id, c.hash, c.message, c.author, c.author_email, c.commit_date,
    c.files_changed, c.insertions, c.deletions,
    t.priority, t.category, t.impact_areas, t.conflict_risk,
    t.effort_estimate, t.reasoning, t.confidence,
    COALESCE(s.status, 'pending') AS status, s.reviewer, s.review_date,
    s.decision_reasoning, s.adaptation_notes
"""

_COMMIT_JOINS = """
    FROM commits c
    LEFT JOIN triage_results t ON t.commit_id = c.id
    LEFT JOIN commit_status s ON s.commit_id = c.id
"""


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def row_to_commit(row: sqlite3.Row) -> Commit:
    return Commit(
        hash=row["hash"],
        message=row["message"],
        author=row["author"],
        author_email=row["author_email"],
        commit_date=row["commit_date"],
        files_changed=json.loads(row["files_changed"] or "[]"),
        insertions=row["insertions"],
        deletions=row["deletions"],
    )


def row_to_triage(row: sqlite3.Row) -> Optional[TriageResult]:
    if row["priority"] is None:
        return None
    return TriageResult.from_dict(
        {
            "priority": row["priority"],
            "category": row["category"],
            "impact_areas": json.loads(row["impact_areas"] or "[]"),
            "conflict_risk": row["conflict_risk"],
            "effort_estimate": row["effort_estimate"],
            "reasoning": row["reasoning"],
            "confidence": row["confidence"],
        }
    )


def _commit_row_dict(row: sqlite3.Row) -> dict[str, Any]:
    data = row_to_commit(row).to_dict()
    triage = row_to_triage(row)
    data["triage"] = triage.to_dict() if triage else None
    data["status"] = row["status"]
    data["reviewer"] = row["reviewer"]
    data["review_date"] = row["review_date"]
    data["decision_reasoning"] = row["decision_reasoning"]
    data["adaptation_notes"] = row["adaptation_notes"]
    return data


class ParityStore:
    """Queries for repositories, commits, triage results and review status.

    Parameters
    ----------
    conn:
        An open ``sqlite3.Connection`` with ``row_factory = sqlite3.Row``
        (as returned by ``ParityDB.connect()``).
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    # ── repositories ──────────────────────────────────────────────

    def add_repository(
        self,
        path: str,
        upstream_url: Optional[str] = None,
        upstream_branch: str = "main",
        fork_branch: str = "main",
    ) -> int:
        """Register (or re-register) a fork and return its id."""
        with self.conn:
            self.conn.execute(
                """
                INSERT INTO repositories (path, upstream_url, upstream_branch, fork_branch)
                VALUES (?, ?, ?, ?)
                ON CONFLICT(path) DO UPDATE SET
                    upstream_url = excluded.upstream_url,
                    upstream_branch = excluded.upstream_branch,
                    fork_branch = excluded.fork_branch
                """,
                (path, upstream_url, upstream_branch, fork_branch),
            )
        row = self.conn.execute("SELECT id FROM repositories WHERE path = ?", (path,)).fetchone()
        return int(row["id"])

    def get_repository(self, path: str) -> Optional[dict[str, Any]]:
        row = self.conn.execute("SELECT * FROM repositories WHERE path = ?", (path,)).fetchone()
        return dict(row) if row is not None else None

    def update_repository(self, repo_id: int, **fields: Any) -> None:
        allowed = {"upstream_url", "upstream_branch", "fork_branch", "last_sync"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Unknown repository field(s): {', '.join(sorted(unknown))}")
        if not fields:
            return
        assignments = ", ".join(f"{name} = ?" for name in fields)
        with self.conn:
            self.conn.execute(
                f"UPDATE repositories SET {assignments} WHERE id = ?",
                (*fields.values(), repo_id),
            )

    # ── commits ───────────────────────────────────────────────────

    def upsert_commit(self, repo_id: int, commit: Commit) -> int:
        """Insert or refresh a commit, keeping its row id stable."""
        with self.conn:
            self._write_commit(repo_id, commit)
        return self.get_commit_id(repo_id, commit.hash)

    def _write_commit(self, repo_id: int, commit: Commit) -> None:
        self.conn.execute(
            """
            INSERT INTO commits (repository_id, hash, message, author, author_email,
                                 commit_date, files_changed, insertions, deletions)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(repository_id, hash) DO UPDATE SET
                message = excluded.message,
                author = excluded.author,
                author_email = excluded.author_email,
                commit_date = excluded.commit_date,
                files_changed = excluded.files_changed,
                insertions = excluded.insertions,
                deletions = excluded.deletions
            """,
            (
                repo_id,
                commit.hash,
                commit.message,
                commit.author,
                commit.author_email,
                commit.commit_date,
                json.dumps(commit.files_changed),
                commit.insertions,
                commit.deletions,
            ),
        )

    def _resolve(self, repo_id: int, commit_hash: str) -> sqlite3.Row:
        """Find a commit row by full hash or unambiguous prefix.

        Raises:
            CommitNotFoundError: If nothing (or more than one commit) matches.
        """
        row = self.conn.execute(
            "SELECT * FROM commits WHERE repository_id = ? AND hash = ?",
            (repo_id, commit_hash),
        ).fetchone()
        if row is not None:
            return row
        if len(commit_hash) < MIN_PREFIX_LENGTH:
            raise CommitNotFoundError(commit_hash)
        rows = self.conn.execute(
            "SELECT * FROM commits WHERE repository_id = ? AND hash LIKE ? LIMIT 2",
            (repo_id, commit_hash.replace("%", "").replace("_", "") + "%"),
        ).fetchall()
        if len(rows) != 1:
            raise CommitNotFoundError(commit_hash, matches=len(rows))
        return rows[0]

    def get_commit(self, repo_id: int, commit_hash: str) -> Commit:
        return row_to_commit(self._resolve(repo_id, commit_hash))

    def get_commit_id(self, repo_id: int, commit_hash: str) -> int:
        return int(self._resolve(repo_id, commit_hash)["id"])

    def list_commits(
        self,
        repo_id: int,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        """Commits joined with triage and status, newest first."""
        clauses = ["c.repository_id = ?"]
        params: list[Any] = [repo_id]
        if status is not None:
            if status == CommitState.PENDING.value:
                clauses.append("(s.status IS NULL OR s.status = 'pending')")
            else:
                clauses.append("s.status = ?")
                params.append(status)
        if priority is not None:
            clauses.append("t.priority = ?")
            params.append(priority)
        sql = f"SELECT {_COMMIT_COLUMNS} {_COMMIT_JOINS} WHERE {' AND '.join(clauses)}"
        sql += " ORDER BY c.commit_date DESC, c.id DESC"
        if limit is not None:
            sql += " LIMIT ?"
            params.append(limit)
        return [_commit_row_dict(r) for r in self.conn.execute(sql, params).fetchall()]

    def recent_commits(
        self, repo_id: int, limit: int, exclude: Optional[str] = None
    ) -> list[Commit]:
        """The *limit* newest commits, optionally leaving out one full hash."""
        rows = self.conn.execute(
            """
            SELECT * FROM commits
            WHERE repository_id = ? AND hash != ?
            ORDER BY commit_date DESC, id DESC
            LIMIT ?
            """,
            (repo_id, exclude or "", limit),
        ).fetchall()
        return [row_to_commit(r) for r in rows]

    def get_commits_by_status(self, repo_id: int, status: str) -> list[dict[str, Any]]:
        return self.list_commits(repo_id, status=status)

    # ── triage ────────────────────────────────────────────────────

    def put_triage_result(self, commit_id: int, triage: TriageResult) -> None:
        with self.conn:
            self._write_triage(commit_id, triage)

    def _write_triage(self, commit_id: int, triage: TriageResult) -> None:
        self.conn.execute(
            """
            INSERT INTO triage_results (commit_id, priority, category, impact_areas,
                                        conflict_risk, effort_estimate, reasoning, confidence)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(commit_id) DO UPDATE SET
                priority = excluded.priority,
                category = excluded.category,
                impact_areas = excluded.impact_areas,
                conflict_risk = excluded.conflict_risk,
                effort_estimate = excluded.effort_estimate,
                reasoning = excluded.reasoning,
                confidence = excluded.confidence
            """,
            (
                commit_id,
                triage.priority.value,
                triage.category.value,
                json.dumps(triage.impact_areas),
                triage.conflict_risk,
                triage.effort_estimate.value,
                triage.reasoning,
                triage.confidence,
            ),
        )

    def get_triage_result(self, commit_id: int) -> Optional[TriageResult]:
        row = self.conn.execute(
            "SELECT * FROM triage_results t WHERE t.commit_id = ?", (commit_id,)
        ).fetchone()
        return row_to_triage(row) if row is not None else None

    def save_triaged(self, repo_id: int, items: Iterable[TriagedCommit]) -> int:
        """Upsert commits with their triage results in one transaction."""
        count = 0
        with self.conn:
            for item in items:
                self._write_commit(repo_id, item.commit)
                row = self.conn.execute(
                    "SELECT id FROM commits WHERE repository_id = ? AND hash = ?",
                    (repo_id, item.commit.hash),
                ).fetchone()
                self._write_triage(int(row["id"]), item.triage)
                count += 1
        return count

    def get_triaged_commits(
        self, repo_id: int, pending_only: bool = False
    ) -> list[TriagedCommit]:
        """Triaged commits, highest priority first, then lowest conflict risk."""
        pending = "AND (s.status IS NULL OR s.status = 'pending')" if pending_only else ""
        rows = self.conn.execute(
            f"""
            SELECT {_COMMIT_COLUMNS} {_COMMIT_JOINS}
            WHERE c.repository_id = ? AND t.id IS NOT NULL {pending}
            ORDER BY {_PRIORITY_ORDER_SQL}, t.conflict_risk ASC, c.id ASC
            """,
            (repo_id,),
        ).fetchall()
        return [TriagedCommit(commit=row_to_commit(r), triage=row_to_triage(r)) for r in rows]

    # ── review status ─────────────────────────────────────────────

    def put_status(self, commit_id: int, status: CommitStatus) -> None:
        with self.conn:
            self._write_status(commit_id, status)

    def _write_status(self, commit_id: int, status: CommitStatus) -> None:
        try:
            self.conn.execute(
                """
                INSERT INTO commit_status (commit_id, status, decision_reasoning, reviewer,
                                           review_date, adaptation_notes,
                                           integration_effort_actual, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
                ON CONFLICT(commit_id) DO UPDATE SET
                    status = excluded.status,
                    decision_reasoning = excluded.decision_reasoning,
                    reviewer = excluded.reviewer,
                    review_date = excluded.review_date,
                    adaptation_notes = excluded.adaptation_notes,
                    integration_effort_actual = excluded.integration_effort_actual,
                    updated_at = CURRENT_TIMESTAMP
                """,
                (
                    commit_id,
                    status.status.value,
                    status.decision_reasoning,
                    status.reviewer,
                    status.review_date or _now(),
                    status.adaptation_notes,
                    status.integration_effort_actual,
                ),
            )
        except sqlite3.IntegrityError as e:
            raise PersistenceError(
                f"Cannot record status for commit id {commit_id}", details={"reason": str(e)}
            ) from e

    def get_status(self, commit_id: int) -> CommitStatus:
        """Review status of a commit; PENDING when no decision was recorded."""
        row = self.conn.execute(
            "SELECT * FROM commit_status WHERE commit_id = ?", (commit_id,)
        ).fetchone()
        if row is None:
            return CommitStatus(status=CommitState.PENDING)
        return CommitStatus(
            status=CommitState(row["status"]),
            decision_reasoning=row["decision_reasoning"],
            reviewer=row["reviewer"],
            review_date=row["review_date"],
            adaptation_notes=row["adaptation_notes"],
            integration_effort_actual=row["integration_effort_actual"],
        )

    def batch_update_status(
        self,
        repo_id: int,
        hashes: Iterable[str],
        status: CommitState,
        reasoning: Optional[str] = None,
        reviewer: Optional[str] = None,
    ) -> int:
        """Set the same status on many commits atomically.

        Raises:
            CommitNotFoundError: If any hash is unknown; nothing is written.
        """
        count = 0
        with self.conn:
            for commit_hash in hashes:
                commit_id = int(self._resolve(repo_id, commit_hash)["id"])
                self._write_status(
                    commit_id,
                    CommitStatus(status=status, decision_reasoning=reasoning, reviewer=reviewer),
                )
                count += 1
        logger.info("Updated %d commit(s) to %s", count, status.value)
        return count

    # ── dashboard ─────────────────────────────────────────────────

    def get_dashboard(self, repo_id: int, limit: int = 20) -> dict[str, Any]:
        """Summary counts, actionable commits and recent review activity."""
        summary_row = self.conn.execute(
            f"""
            SELECT
                COUNT(*) AS total_commits,
                SUM(CASE WHEN s.status IS NULL OR s.status = 'pending' THEN 1 ELSE 0 END)
                    AS pending,
                SUM(CASE WHEN s.status = 'reviewed' THEN 1 ELSE 0 END) AS reviewed,
                SUM(CASE WHEN s.status = 'integrated' THEN 1 ELSE 0 END) AS integrated,
                SUM(CASE WHEN s.status = 'skipped' THEN 1 ELSE 0 END) AS skipped,
                SUM(CASE WHEN s.status = 'conflict' THEN 1 ELSE 0 END) AS conflict,
                SUM(CASE WHEN s.status = 'deferred' THEN 1 ELSE 0 END) AS deferred,
                SUM(CASE WHEN t.priority = 'critical' THEN 1 ELSE 0 END) AS critical,
                SUM(CASE WHEN t.priority = 'high' THEN 1 ELSE 0 END) AS high,
                SUM(CASE WHEN t.priority = 'medium' THEN 1 ELSE 0 END) AS medium,
                SUM(CASE WHEN t.priority = 'low' THEN 1 ELSE 0 END) AS low,
                AVG(t.conflict_risk) AS avg_conflict_risk
            {_COMMIT_JOINS}
            WHERE c.repository_id = ?
            """,
            (repo_id,),
        ).fetchone()
        summary = {key: (summary_row[key] or 0) for key in summary_row.keys()}
        summary["avg_conflict_risk"] = round(float(summary["avg_conflict_risk"]), 4)

        actionable_rows = self.conn.execute(
            f"""
            SELECT {_COMMIT_COLUMNS} {_COMMIT_JOINS}
            WHERE c.repository_id = ?
              AND t.priority IN ('critical', 'high')
              AND (s.status IS NULL OR s.status = 'pending')
            ORDER BY {_PRIORITY_ORDER_SQL}, t.conflict_risk ASC, c.id ASC
            LIMIT ?
            """,
            (repo_id, limit),
        ).fetchall()

        recent_rows = self.conn.execute(
            """
            SELECT c.hash, c.message, s.status, s.reviewer, s.updated_at
            FROM commit_status s
            JOIN commits c ON c.id = s.commit_id
            WHERE c.repository_id = ?
            ORDER BY s.updated_at DESC, s.id DESC
            LIMIT 10
            """,
            (repo_id,),
        ).fetchall()

        return {
            "summary": summary,
            "actionable": [_commit_row_dict(r) for r in actionable_rows],
            "recent_changes": [dict(r) for r in recent_rows],
        }

    # ── integrations & metrics ────────────────────────────────────

    def record_integration(
        self,
        commit_id: int,
        integration_type: str,
        integration_hash: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> int:
        with self.conn:
            cur = self.conn.execute(
                """
                INSERT INTO integrations (commit_id, integration_type, integration_hash, notes)
                VALUES (?, ?, ?, ?)
                """,
                (commit_id, integration_type, integration_hash, notes),
            )
        return int(cur.lastrowid)

    def record_metric(self, repo_id: int, name: str, value: float) -> None:
        with self.conn:
            self.conn.execute(
                "INSERT INTO metrics (repository_id, metric_name, value) VALUES (?, ?, ?)",
                (repo_id, name, float(value)),
            )

    def get_trends(self, repo_id: int, days: int = 7) -> dict[str, list[tuple[str, float]]]:
        """Daily average of each recorded metric over the last *days* days.

        Returns ``{metric_name: [(YYYY-MM-DD, value), ...]}`` in date order.
        """
        rows = self.conn.execute(
            """
            SELECT metric_name, date(recorded_at) AS day, AVG(value) AS value
            FROM metrics
            WHERE repository_id = ? AND recorded_at >= datetime('now', ?)
            GROUP BY metric_name, day
            ORDER BY metric_name, day
            """,
            (repo_id, f"-{int(days)} days"),
        ).fetchall()
        trends: dict[str, list[tuple[str, float]]] = {}
        for r in rows:
            trends.setdefault(r["metric_name"], []).append((r["day"], r["value"]))
        return trends

    # ── maintenance ───────────────────────────────────────────────

    def vacuum(self) -> None:
        """Reclaim free pages after large deletions."""
        self.conn.commit()
        self.conn.execute("VACUUM")
        logger.info("Database vacuumed")
