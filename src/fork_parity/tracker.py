"""High-level operations tying git, storage, triage and analysis together.

The CLI and any programmatic caller go through ``ParityTracker``; it owns the
database connection and the analyzers for one fork checkout.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional, Union

from .config import ParityConfig
from .conflicts import ConflictAnalysis, ConflictAnalyzer, SimilarityAnalysis, analyze_similarity
from .conflicts.similarity import HISTORY_LIMIT
from .exceptions import RepositoryNotInitializedError
from .git import GitRepository
from .impact import ANALYSIS_KINDS, AnalysisResults, ImpactAnalyzer
from .logging_config import get_logger
from .models import AdaptationPattern, CommitState, CommitStatus, Priority
from .persistence import ParityDB, ParityStore, SQLitePatternStore
from .planning import MigrationPlan, MigrationPlanner, learn_adaptation_pattern
from .triage import IntegrationPlan, TriagedCommit, TriageEngine
from .workspace import SourceTree

logger = get_logger(__name__)


@dataclass
class SyncResult:
    total: int
    new: int
    updated: int

    def to_dict(self) -> dict[str, int]:
        return {"total": self.total, "new": self.new, "updated": self.updated}


class ParityTracker:
    """Track upstream commits for the fork checked out at *root*.

    Usage::

        with ParityTracker("/path/to/fork") as tracker:
            tracker.sync()
            print(tracker.dashboard()["summary"])
    """

    def __init__(
        self,
        root: Union[str, Path],
        config: Optional[ParityConfig] = None,
        git: Optional[GitRepository] = None,
        store: Optional[ParityStore] = None,
        pattern_store=None,
    ) -> None:
        self.root = Path(root).resolve()
        self.config = config or ParityConfig()
        self.git = git or GitRepository(str(self.root), self.config.git_timeout_seconds)
        self._db: Optional[ParityDB] = None
        self._store = store
        self._pattern_store = pattern_store

        self.engine = TriageEngine(thresholds=self.config.triage)
        self.impact = ImpactAnalyzer(thresholds=self.config.impact)
        self.planner = MigrationPlanner(self.config.planning)
        self._conflicts: Optional[ConflictAnalyzer] = None

    # ── lifecycle ─────────────────────────────────────────────────

    @property
    def store(self) -> ParityStore:
        if self._store is None:
            self._db = ParityDB(str(self.root), self.config.db_dir)
            self._store = ParityStore(self._db.connect())
        return self._store

    @property
    def pattern_store(self):
        if self._pattern_store is None:
            self._pattern_store = SQLitePatternStore(self.store.conn)
        return self._pattern_store

    @property
    def conflict_analyzer(self) -> ConflictAnalyzer:
        if self._conflicts is None:
            self._conflicts = ConflictAnalyzer(self.pattern_store, self.config.conflicts)
        return self._conflicts

    def tree(self) -> SourceTree:
        return SourceTree(self.root, self.config.max_file_size_bytes)

    def close(self) -> None:
        if self._db is not None:
            self._db.close()
            self._db = None
            self._store = None

    def __enter__(self) -> "ParityTracker":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # ── repository ────────────────────────────────────────────────

    def repository(self) -> dict[str, Any]:
        """The registered repository row.

        Raises:
            RepositoryNotInitializedError: If ``init`` has not been run here.
        """
        repo = self.store.get_repository(str(self.root))
        if repo is None:
            raise RepositoryNotInitializedError(str(self.root))
        return repo

    def _repo_id(self) -> int:
        return int(self.repository()["id"])

    def init(
        self,
        upstream_url: Optional[str] = None,
        upstream_branch: str = "main",
        fork_branch: str = "main",
    ) -> int:
        """Register this checkout and point the upstream remote at *upstream_url*."""
        if upstream_url:
            if self.git.is_repo():
                self.git.add_remote(self.config.upstream_remote, upstream_url)
            else:
                logger.warning("%s is not a git repository; remote not configured", self.root)
        repo_id = self.store.add_repository(
            str(self.root), upstream_url, upstream_branch, fork_branch
        )
        logger.info("Initialized fork tracking for %s", self.root)
        return repo_id

    def sync(self, limit: Optional[int] = None) -> SyncResult:
        """Fetch upstream, then store and triage every commit missing from the fork."""
        repo = self.repository()
        repo_id = int(repo["id"])
        remote = self.config.upstream_remote

        self.git.fetch(remote)
        target = f"{remote}/{repo['upstream_branch']}"
        commits = self.git.log_range(repo["fork_branch"], target, limit)

        known = {c["hash"] for c in self.store.list_commits(repo_id)}
        new = sum(1 for c in commits if c.hash not in known)
        # Oldest first, so row order follows upstream history.
        self.store.save_triaged(repo_id, self.engine.batch_classify(reversed(commits)))

        self.store.update_repository(repo_id, last_sync=datetime.now(timezone.utc).isoformat())
        summary = self.store.get_dashboard(repo_id)["summary"]
        self.store.record_metric(repo_id, "pending_commits", summary["pending"])
        self.store.record_metric(repo_id, "integrated_commits", summary["integrated"])

        result = SyncResult(total=len(commits), new=new, updated=len(commits) - new)
        logger.info("Synced %d upstream commit(s), %d new", result.total, result.new)
        return result

    # ── triage & status ───────────────────────────────────────────

    def triage(self, commit_hash: str) -> TriagedCommit:
        """Stored triage for a commit, classifying it first if needed."""
        repo_id = self._repo_id()
        commit_id = self.store.get_commit_id(repo_id, commit_hash)
        commit = self.store.get_commit(repo_id, commit_hash)
        result = self.store.get_triage_result(commit_id)
        if result is None:
            result = self.engine.classify(commit)
            self.store.put_triage_result(commit_id, result)
        return TriagedCommit(commit=commit, triage=result)

    def set_status(
        self,
        commit_hash: str,
        status: CommitState,
        reasoning: Optional[str] = None,
        reviewer: Optional[str] = None,
        notes: Optional[str] = None,
        effort: Optional[str] = None,
    ) -> CommitStatus:
        repo_id = self._repo_id()
        commit_id = self.store.get_commit_id(repo_id, commit_hash)
        record = CommitStatus(
            status=status,
            decision_reasoning=reasoning,
            reviewer=reviewer,
            adaptation_notes=notes,
            integration_effort_actual=effort,
        )
        self.store.put_status(commit_id, record)
        if status is CommitState.INTEGRATED:
            self.store.record_integration(commit_id, "manual", notes=notes)
        logger.info("Commit %s marked %s", commit_hash[:8], status.value)
        return self.store.get_status(commit_id)

    def status(self, commit_hash: str) -> CommitStatus:
        commit_id = self.store.get_commit_id(self._repo_id(), commit_hash)
        return self.store.get_status(commit_id)

    def batch_status(
        self,
        hashes: Iterable[str],
        status: CommitState,
        reasoning: Optional[str] = None,
        reviewer: Optional[str] = None,
    ) -> int:
        return self.store.batch_update_status(
            self._repo_id(), list(hashes), status, reasoning, reviewer
        )

    def list_commits(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict[str, Any]]:
        return self.store.list_commits(self._repo_id(), status, priority, limit)

    # ── analysis ──────────────────────────────────────────────────

    def analyze(self, commit_hash: str, kinds: Iterable[str] = ANALYSIS_KINDS) -> AnalysisResults:
        commit = self.store.get_commit(self._repo_id(), commit_hash)
        return self.impact.analyze(commit, self.tree(), kinds)

    def conflicts(self, commit_hash: str, simulate: bool = False) -> ConflictAnalysis:
        """Conflict analysis of a commit's files.

        With *simulate*, the commit is trial-merged first and the conflicted
        paths of that merge are analyzed instead.
        """
        commit = self.store.get_commit(self._repo_id(), commit_hash)
        if not simulate:
            return self.conflict_analyzer.analyze_conflicts(commit, self.tree())
        with self.git.simulate_merge(commit.hash) as conflicted:
            return self.conflict_analyzer.analyze_files(conflicted, self.tree())

    def similar_changes(self, commit_hash: str) -> SimilarityAnalysis:
        """Earlier tracked commits that touched the same file names or directories."""
        repo_id = self._repo_id()
        commit = self.store.get_commit(repo_id, commit_hash)
        history = self.store.recent_commits(repo_id, HISTORY_LIMIT, exclude=commit.hash)
        return analyze_similarity(commit, history)

    def migration_plan(self, commit_hash: str) -> MigrationPlan:
        triaged = self.triage(commit_hash)
        results = self.impact.analyze(triaged.commit, self.tree())
        results.conflicts = self.conflict_analyzer.analyze_conflicts(triaged.commit, self.tree())
        return self.planner.create_migration_plan(
            triaged.commit,
            results,
            patterns=self.pattern_store.load_all(),
            impact_areas=triaged.triage.impact_areas,
        )

    def learn_adaptation(
        self,
        commit_hash: str,
        pattern_type: str,
        source_pattern: str,
        target_pattern: str,
        context: Optional[dict[str, Any]] = None,
        success: bool = True,
        effort_level: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> AdaptationPattern:
        commit = self.store.get_commit(self._repo_id(), commit_hash)
        return learn_adaptation_pattern(
            self.pattern_store,
            commit.hash,
            pattern_type,
            source_pattern,
            target_pattern,
            context=context,
            success=success,
            effort_level=effort_level,
            notes=notes,
        )

    # ── planning & reporting ──────────────────────────────────────

    def integration_plan(self) -> IntegrationPlan:
        pending = self.store.get_triaged_commits(self._repo_id(), pending_only=True)
        return self.engine.generate_integration_plan(pending)

    def actionable(
        self, min_priority: Priority = Priority.MEDIUM, limit: int = 20
    ) -> list[TriagedCommit]:
        pending = self.store.get_triaged_commits(self._repo_id(), pending_only=True)
        return self.engine.get_actionable_items(pending, min_priority, limit)

    def dashboard(self) -> dict[str, Any]:
        repo = self.repository()
        data = self.store.get_dashboard(int(repo["id"]), self.config.dashboard_limit)
        data["repository"] = {
            "path": repo["path"],
            "upstream_url": repo["upstream_url"],
            "upstream_branch": repo["upstream_branch"],
            "fork_branch": repo["fork_branch"],
            "last_sync": repo["last_sync"],
        }
        data["trends"] = self.store.get_trends(int(repo["id"]))
        data["generated_at"] = datetime.now(timezone.utc).isoformat()
        return data

    def export_commits(self) -> list[dict[str, Any]]:
        return self.store.list_commits(self._repo_id())

    def cleanup(self) -> None:
        self.store.vacuum()
