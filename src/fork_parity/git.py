"""Thin wrapper over the git CLI via subprocess."""

import re
import subprocess
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from .exceptions import GitCommandError, GitNotAvailableError
from .logging_config import get_logger
from .models import Commit

logger = get_logger(__name__)

FIELD_SEP = "\x1f"
RECORD_SEP = "\x1e"
LOG_FORMAT = f"{RECORD_SEP}%H{FIELD_SEP}%an{FIELD_SEP}%ae{FIELD_SEP}%aI{FIELD_SEP}%s"

# Porcelain XY codes for unmerged paths.
UNMERGED_CODES = frozenset({"UU", "AA", "DD", "AU", "UA", "DU", "UD"})

_BRACE_RENAME_RE = re.compile(r"\{[^{}]* => ([^{}]*)\}")


def _renamed_path(path: str) -> str:
    """Destination path of a numstat rename entry (``a/{b => c}/d`` or ``a => b``)."""
    if "{" in path and " => " in path:
        return re.sub(r"//+", "/", _BRACE_RENAME_RE.sub(r"\1", path))
    if " => " in path:
        return path.split(" => ", 1)[1]
    return path


def parse_log(raw: str) -> list[Commit]:
    """Parse ``git log --numstat`` output produced with ``LOG_FORMAT``."""
    commits = []
    for record in raw.split(RECORD_SEP):
        if not record.strip():
            continue
        header, _, body = record.partition("\n")
        fields = header.split(FIELD_SEP)
        if len(fields) < 5:
            logger.debug("Skipping malformed log record: %r", header[:80])
            continue
        commit_hash, author, email, date = fields[:4]
        subject = FIELD_SEP.join(fields[4:])
        files: list[str] = []
        insertions = deletions = 0
        for line in body.splitlines():
            parts = line.split("\t")
            if len(parts) != 3:
                continue
            added, removed, path = parts
            # Binary files report "-" for both counts.
            if added.isdigit():
                insertions += int(added)
            if removed.isdigit():
                deletions += int(removed)
            files.append(_renamed_path(path))
        commits.append(
            Commit(
                hash=commit_hash,
                message=subject,
                author=author,
                author_email=email,
                commit_date=date,
                files_changed=files,
                insertions=insertions,
                deletions=deletions,
            )
        )
    return commits


class GitRepository:
    """Run git commands against one working tree.

    Every command is bounded by *timeout* seconds. A non-zero exit raises
    ``GitCommandError`` unless the caller passes ``check=False``.
    """

    def __init__(self, path: str, timeout: int = 120):
        self.path = str(Path(path).resolve())
        self.timeout = timeout

    def _run(self, *args: str, check: bool = True) -> subprocess.CompletedProcess:
        cmd = ["git", "-C", self.path, *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise GitNotAvailableError() from e
        except subprocess.TimeoutExpired as e:
            raise GitCommandError(cmd[3:], None) from e
        if check and result.returncode != 0:
            raise GitCommandError(cmd[3:], result.returncode, result.stderr)
        return result

    # ── repository state ──────────────────────────────────────────

    def is_repo(self) -> bool:
        try:
            return self._run("rev-parse", "--git-dir", check=False).returncode == 0
        except GitNotAvailableError:
            return False

    def git_dir(self) -> Path:
        git_dir = Path(self._run("rev-parse", "--git-dir").stdout.strip())
        return git_dir if git_dir.is_absolute() else Path(self.path) / git_dir

    def current_branch(self) -> str:
        """Branch name, or the commit hash when HEAD is detached."""
        branch = self._run("rev-parse", "--abbrev-ref", "HEAD").stdout.strip()
        if branch == "HEAD":
            return self._run("rev-parse", "HEAD").stdout.strip()
        return branch

    # ── remotes ───────────────────────────────────────────────────

    def remote_url(self, name: str) -> Optional[str]:
        result = self._run("remote", "get-url", name, check=False)
        if result.returncode != 0:
            return None
        return result.stdout.strip() or None

    def add_remote(self, name: str, url: str) -> None:
        """Add *name* pointing at *url*, or repoint it if it already exists."""
        if self.remote_url(name) is None:
            self._run("remote", "add", name, url)
        else:
            self._run("remote", "set-url", name, url)
        logger.info("Remote %s -> %s", name, url)

    def fetch(self, remote: str) -> None:
        logger.info("Fetching %s", remote)
        self._run("fetch", remote)

    # ── history ───────────────────────────────────────────────────

    def log_range(self, base: str, target: str, limit: Optional[int] = None) -> list[Commit]:
        """Commits reachable from *target* but not from *base*, newest first."""
        args = ["log", f"{base}..{target}", "--no-merges", f"--format={LOG_FORMAT}", "--numstat"]
        if limit:
            args.append(f"-n{int(limit)}")
        return parse_log(self._run(*args).stdout)

    def get_commit(self, commit_hash: str) -> Commit:
        raw = self._run("show", "--numstat", f"--format={LOG_FORMAT}", commit_hash).stdout
        commits = parse_log(raw)
        if not commits:
            raise GitCommandError(["show", commit_hash], 0, "no commit in output")
        return commits[0]

    # ── merges ────────────────────────────────────────────────────

    def conflicted_files(self) -> list[str]:
        out = self._run("status", "--porcelain").stdout
        return [line[3:] for line in out.splitlines() if line[:2] in UNMERGED_CODES]

    @contextmanager
    def simulate_merge(self, ref: str) -> Iterator[list[str]]:
        """Trial-merge *ref* on a throwaway branch and yield the conflicted paths.

        The working tree holds the merge result (markers included) while the
        context is open. On exit the merge is aborted, the original branch is
        checked out again and the temporary branch is deleted.
        """
        original = self.current_branch()
        temp_branch = f"fork-parity-sim-{uuid.uuid4().hex[:8]}"
        self._run("checkout", "-b", temp_branch)
        try:
            result = self._run("merge", "--no-commit", "--no-ff", ref, check=False)
            conflicted = self.conflicted_files()
            if result.returncode != 0 and not conflicted:
                raise GitCommandError(
                    ["merge", "--no-commit", "--no-ff", ref], result.returncode, result.stderr
                )
            logger.debug("Simulated merge of %s: %d conflicted file(s)", ref, len(conflicted))
            yield conflicted
        finally:
            if (self.git_dir() / "MERGE_HEAD").exists():
                self._run("merge", "--abort", check=False)
            self._run("checkout", "--force", original, check=False)
            self._run("branch", "-D", temp_branch, check=False)
