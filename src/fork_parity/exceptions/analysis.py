"""Analysis-related exceptions: file access and structured-file parsing."""

from pathlib import Path
from typing import Union

from .base import ForkParityError
from .taxonomy import ErrorCode


class AnalysisError(ForkParityError):
    """Base class for analysis-related errors."""

    code = ErrorCode.FP102


class FileAccessError(AnalysisError):
    """Raised when a file cannot be accessed or read."""

    code = ErrorCode.FP100

    def __init__(self, filepath: Union[str, Path], reason: str):
        super().__init__(
            f"Cannot access file: {filepath}",
            details={"filepath": str(filepath), "reason": reason},
        )
        self.filepath = filepath
        self.reason = reason


class ManifestParseError(AnalysisError):
    """Raised when a dependency manifest fragment cannot be parsed."""

    code = ErrorCode.FP101

    def __init__(self, source: str, reason: str):
        super().__init__(
            f"Cannot parse manifest content from {source}",
            details={"source": source, "reason": reason},
        )
        self.source = source
        self.reason = reason
