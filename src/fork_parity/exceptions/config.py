"""Configuration exceptions: paths and settings."""

from pathlib import Path
from typing import Any, Union

from .base import ForkParityError
from .taxonomy import ErrorCode


class ConfigurationError(ForkParityError):
    """Base class for configuration-related errors."""

    code = ErrorCode.FP401


class InvalidPathError(ConfigurationError):
    """Raised when a provided path is invalid."""

    code = ErrorCode.FP402

    def __init__(self, path: Union[str, Path], reason: str):
        super().__init__(f"Invalid path: {path}", details={"path": str(path), "reason": reason})
        self.path = path
        self.reason = reason


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    code = ErrorCode.FP400

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason
