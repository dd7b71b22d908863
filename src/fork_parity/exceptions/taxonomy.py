"""Error codes for Fork Parity.

Error Code Convention:
    FP1xx - Analysis errors
    FP2xx - Repository/state errors
    FP3xx - Git errors
    FP4xx - Configuration errors
    FP5xx - Notification errors
    FP9xx - Persistence errors
"""

from enum import Enum


class ErrorCode(Enum):
    """Structured error codes for observability and debugging."""

    # Analysis errors (FP1xx)
    FP100 = "FP100"  # File read error
    FP101 = "FP101"  # Structured file (manifest) parse failed
    FP102 = "FP102"  # Analysis pass failed

    # Repository errors (FP2xx)
    FP200 = "FP200"  # Repository not initialized
    FP201 = "FP201"  # Commit not found
    FP202 = "FP202"  # Ambiguous commit prefix

    # Git errors (FP3xx)
    FP300 = "FP300"  # Git executable not found
    FP301 = "FP301"  # Git command failed
    FP302 = "FP302"  # Git command timed out

    # Configuration errors (FP4xx)
    FP400 = "FP400"  # Invalid config value
    FP401 = "FP401"  # Config file unreadable
    FP402 = "FP402"  # Invalid path

    # Notification errors (FP5xx)
    FP500 = "FP500"  # Channel delivery failed
    FP501 = "FP501"  # Unknown notification type

    # Persistence errors (FP9xx)
    FP900 = "FP900"  # SQLite write failed
