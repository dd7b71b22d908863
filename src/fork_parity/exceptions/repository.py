"""Repository, git and persistence exceptions."""

from typing import Optional, Sequence

from .base import ForkParityError
from .taxonomy import ErrorCode


class RepositoryError(ForkParityError):
    """Base class for tracked-repository state errors."""

    pass


class RepositoryNotInitializedError(RepositoryError):
    """Raised when the working repository has not been registered with ``init``."""

    code = ErrorCode.FP200

    def __init__(self, path: str):
        super().__init__(
            "Repository not initialized. Run 'fork-parity init' first.",
            details={"path": path},
        )
        self.path = path


class CommitNotFoundError(RepositoryError):
    """Raised when a commit hash (or prefix) is unknown to the store."""

    code = ErrorCode.FP201

    def __init__(self, commit_hash: str, matches: int = 0):
        message = f"Commit {commit_hash} not found"
        details = {}
        if matches > 1:
            self.code = ErrorCode.FP202
            message = f"Commit prefix {commit_hash} is ambiguous"
            details["matches"] = str(matches)
        super().__init__(message, details=details)
        self.commit_hash = commit_hash
        self.matches = matches


class GitError(ForkParityError):
    """Base class for git subprocess errors."""

    code = ErrorCode.FP301


class GitNotAvailableError(GitError):
    """Raised when the git executable cannot be found."""

    code = ErrorCode.FP300

    def __init__(self) -> None:
        super().__init__("git executable not found on PATH")


class GitCommandError(GitError):
    """Raised when a git command exits non-zero or times out."""

    def __init__(self, command: Sequence[str], returncode: Optional[int], stderr: str = ""):
        cmd = " ".join(command)
        details = {"command": cmd}
        if returncode is None:
            self.code = ErrorCode.FP302
            details["reason"] = "timed out"
        else:
            details["returncode"] = str(returncode)
        if stderr:
            details["stderr"] = stderr.strip()
        super().__init__(f"git command failed: {cmd}", details=details)
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr


class PersistenceError(ForkParityError):
    """Raised when a store write cannot be completed."""

    code = ErrorCode.FP900


class NotificationError(ForkParityError):
    """Base class for notification dispatch errors."""

    code = ErrorCode.FP501


class ChannelError(NotificationError):
    """Raised when a single channel fails to deliver a message."""

    code = ErrorCode.FP500

    def __init__(self, channel: str, reason: str):
        super().__init__(f"Channel {channel} failed", details={"channel": channel, "reason": reason})
        self.channel = channel
        self.reason = reason
