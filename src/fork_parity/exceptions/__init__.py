"""Exception hierarchy for Fork Parity."""

from .analysis import AnalysisError, FileAccessError, ManifestParseError
from .base import ForkParityError
from .config import ConfigurationError, InvalidConfigError, InvalidPathError
from .repository import (
    ChannelError,
    CommitNotFoundError,
    GitCommandError,
    GitError,
    GitNotAvailableError,
    NotificationError,
    PersistenceError,
    RepositoryError,
    RepositoryNotInitializedError,
)
from .taxonomy import ErrorCode

__all__ = [
    "ForkParityError",
    "ErrorCode",
    "AnalysisError",
    "FileAccessError",
    "ManifestParseError",
    "RepositoryError",
    "RepositoryNotInitializedError",
    "CommitNotFoundError",
    "GitError",
    "GitCommandError",
    "GitNotAvailableError",
    "PersistenceError",
    "NotificationError",
    "ChannelError",
    "ConfigurationError",
    "InvalidConfigError",
    "InvalidPathError",
]
