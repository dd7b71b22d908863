"""Shared fixtures for Fork Parity tests."""

import shutil
import subprocess
from pathlib import Path

import pytest

from fork_parity.models import Commit
from fork_parity.workspace import SourceTree


def write_files(root: Path, files: dict) -> None:
    """Create *files* (relative path -> text) under *root*."""
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def make_tree(tmp_path):
    """Factory building a SourceTree over a temp dir populated with files."""

    def _make(files: dict) -> SourceTree:
        write_files(tmp_path, files)
        return SourceTree(tmp_path)

    return _make


@pytest.fixture
def security_commit():
    return Commit(
        hash="a1b2c3d4e5f6a7b8c9d0a1b2c3d4e5f6a7b8c9d0",
        message="Fix security vulnerability in auth",
        author="Dana",
        author_email="dana@example.com",
        commit_date="2024-03-01T10:00:00+00:00",
        files_changed=["src/auth/login.js"],
        insertions=20,
        deletions=5,
    )


@pytest.fixture
def docs_commit():
    return Commit(
        hash="b2c3d4e5f6a7b8c9d0a1b2c3d4e5f6a7b8c9d0a1",
        message="Update README documentation",
        author="Lee",
        commit_date="2024-03-02T10:00:00+00:00",
        files_changed=["README.md"],
        insertions=3,
        deletions=1,
    )


def _git_available() -> bool:
    return shutil.which("git") is not None


requires_git = pytest.mark.skipif(not _git_available(), reason="git executable not available")


def git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=str(cwd), capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


def init_git_repo(path: Path) -> None:
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "-q")
    git(path, "checkout", "-q", "-b", "main")
    git(path, "config", "user.email", "test@example.com")
    git(path, "config", "user.name", "Test User")
    git(path, "config", "commit.gpgsign", "false")


def commit_all(path: Path, message: str) -> str:
    git(path, "add", "-A")
    git(path, "commit", "-q", "-m", message)
    return git(path, "rev-parse", "HEAD")
