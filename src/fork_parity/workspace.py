"""
Read-only access to the fork's working tree.

Analyzers never touch the filesystem directly; they go through ``SourceTree``,
which keeps reads inside the project root and under a size limit.
"""

import os
from pathlib import Path
from typing import Iterator, Optional, Union

from .exceptions import FileAccessError
from .logging_config import get_logger

logger = get_logger(__name__)

SOURCE_EXTENSIONS = frozenset(
    {".js", ".ts", ".jsx", ".tsx", ".mjs", ".cjs", ".py", ".java", ".cpp", ".c", ".h"}
)

SKIP_DIRECTORIES = frozenset(
    {
        "node_modules",
        "__pycache__",
        "venv",
        "dist",
        "build",
        "coverage",
        "htmlcov",
        "site-packages",
    }
)


class SourceTree:
    """Working-tree handle rooted at a project directory.

    Paths passed in and yielded out are POSIX-style and relative to the root.
    """

    def __init__(self, root: Union[str, Path], max_file_size: int = 2 * 1024 * 1024) -> None:
        self.root = Path(root).resolve()
        self.max_file_size = max_file_size

    def _resolve(self, relpath: str) -> Path:
        candidate = (self.root / relpath).resolve()
        try:
            candidate.relative_to(self.root)
        except ValueError:
            raise FileAccessError(relpath, "path is outside the working tree")
        return candidate

    def exists(self, relpath: str) -> bool:
        try:
            return self._resolve(relpath).is_file()
        except FileAccessError:
            return False

    def read_file(self, relpath: str) -> str:
        """Read a file as UTF-8 text.

        Raises:
            FileAccessError: If the file is missing, outside the root, too
                large, binary or otherwise unreadable.
        """
        path = self._resolve(relpath)
        try:
            size = path.stat().st_size
        except OSError as e:
            raise FileAccessError(relpath, f"OS error: {e}")
        if size > self.max_file_size:
            raise FileAccessError(relpath, f"file exceeds {self.max_file_size} bytes")
        try:
            with open(path, encoding="utf-8") as f:
                return f.read()
        except UnicodeDecodeError as e:
            raise FileAccessError(relpath, f"Encoding error: {e}")
        except OSError as e:
            raise FileAccessError(relpath, f"OS error: {e}")

    def read_text(self, relpath: str) -> Optional[str]:
        """Like ``read_file`` but returns None instead of raising."""
        try:
            return self.read_file(relpath)
        except FileAccessError as e:
            logger.debug("Skipping %s: %s", relpath, e.reason)
            return None

    def source_files(self, limit: int = 1000) -> Iterator[str]:
        """Yield source files in deterministic order, at most *limit* of them."""
        count = 0
        for dirpath, dirnames, filenames in os.walk(self.root):
            dirnames[:] = sorted(
                d for d in dirnames if not d.startswith(".") and d not in SKIP_DIRECTORIES
            )
            for name in sorted(filenames):
                if Path(name).suffix not in SOURCE_EXTENSIONS:
                    continue
                rel = Path(dirpath, name).relative_to(self.root).as_posix()
                yield rel
                count += 1
                if count >= limit:
                    return
