"""Tests for the exception hierarchy and error codes."""

from fork_parity.exceptions import (
    ChannelError,
    CommitNotFoundError,
    ConfigurationError,
    ErrorCode,
    FileAccessError,
    ForkParityError,
    GitCommandError,
    GitError,
    GitNotAvailableError,
    InvalidConfigError,
    PersistenceError,
    RepositoryNotInitializedError,
)


class TestHierarchy:
    def test_everything_is_a_fork_parity_error(self):
        errors = [
            FileAccessError("a.py", "denied"),
            RepositoryNotInitializedError("/repo"),
            CommitNotFoundError("abc1234"),
            GitNotAvailableError(),
            GitCommandError(["fetch", "upstream"], 128),
            PersistenceError("write failed"),
            ChannelError("slack", "timeout"),
            InvalidConfigError("dashboard_limit", 0, "must be at least 1"),
        ]
        for error in errors:
            assert isinstance(error, ForkParityError)

    def test_git_errors_share_base(self):
        assert issubclass(GitCommandError, GitError)
        assert issubclass(GitNotAvailableError, GitError)

    def test_invalid_config_is_configuration_error(self):
        assert issubclass(InvalidConfigError, ConfigurationError)


class TestCodes:
    def test_static_codes(self):
        assert RepositoryNotInitializedError("/r").code is ErrorCode.FP200
        assert FileAccessError("a", "b").code is ErrorCode.FP100
        assert ChannelError("x", "y").code is ErrorCode.FP500
        assert PersistenceError("x").code is ErrorCode.FP900

    def test_commit_not_found_vs_ambiguous(self):
        missing = CommitNotFoundError("abc1234")
        ambiguous = CommitNotFoundError("abc1234", matches=3)
        assert missing.code is ErrorCode.FP201
        assert missing.message == "Commit abc1234 not found"
        assert ambiguous.code is ErrorCode.FP202
        assert ambiguous.message == "Commit prefix abc1234 is ambiguous"
        assert ambiguous.details == {"matches": "3"}

    def test_git_timeout_code(self):
        timed_out = GitCommandError(["fetch", "upstream"], None)
        failed = GitCommandError(["fetch", "upstream"], 1, "fatal: no remote\n")
        assert timed_out.code is ErrorCode.FP302
        assert timed_out.details["reason"] == "timed out"
        assert failed.code is ErrorCode.FP301
        assert failed.details["stderr"] == "fatal: no remote"


class TestFormatting:
    def test_str_includes_details(self):
        error = FileAccessError("src/a.py", "permission denied")
        assert str(error) == (
            "Cannot access file: src/a.py (filepath=src/a.py, reason=permission denied)"
        )

    def test_str_without_details(self):
        assert str(PersistenceError("disk full")) == "disk full"

    def test_to_json(self):
        payload = RepositoryNotInitializedError("/repo").to_json()
        assert payload == {
            "error_code": "FP200",
            "message": "Repository not initialized. Run 'fork-parity init' first.",
            "details": {"path": "/repo"},
        }

    def test_base_error_without_code(self):
        assert ForkParityError("plain").to_json()["error_code"] is None
