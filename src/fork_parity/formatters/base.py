"""Base formatter interface for dashboard rendering."""

from abc import ABC, abstractmethod
from typing import Any


class BaseFormatter(ABC):
    """Abstract base class for dashboard formatters.

    ``dashboard`` is the dict returned by ``ParityTracker.dashboard()``.
    """

    @abstractmethod
    def render(self, dashboard: dict[str, Any]) -> None:
        """Write the dashboard to stdout."""

    @abstractmethod
    def format(self, dashboard: dict[str, Any]) -> str:
        """Return the dashboard as a string."""
