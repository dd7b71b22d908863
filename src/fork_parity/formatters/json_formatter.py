"""JSON formatter for dashboards and commit exports."""

import json
from typing import Any

from .base import BaseFormatter


class JsonFormatter(BaseFormatter):
    """Render the dashboard as JSON."""

    def render(self, dashboard: dict[str, Any]) -> None:
        print(self.format(dashboard))

    def format(self, dashboard: dict[str, Any]) -> str:
        return json.dumps(dashboard, indent=2, default=str)
