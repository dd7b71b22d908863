"""Deliver notifications to the configured chat and webhook channels."""

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import requests
from rich.console import Console
from rich.panel import Panel

from ..exceptions import ChannelError, ConfigurationError
from ..logging_config import get_logger
from .templates import (
    Message,
    build_message,
    discord_payload,
    slack_payload,
    teams_payload,
    webhook_payload,
)

logger = get_logger(__name__)

DEFAULT_TIMEOUT = 10

_PAYLOAD_BUILDERS = {
    "slack": slack_payload,
    "discord": discord_payload,
    "teams": teams_payload,
    "webhook": webhook_payload,
}


@dataclass
class ChannelResult:
    channel: str
    success: bool
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return {"channel": self.channel, "success": self.success, "error": self.error}


class NotificationDispatcher:
    """Send templated notifications to every enabled channel.

    Args:
        config: Parsed notification config; channels live under the
            ``notifications`` key (slack, discord, teams, console and a
            ``webhooks`` table of named generic endpoints).
        session: HTTP session to post with. A new ``requests.Session`` by default.
        console: Console used by the console channel.
        timeout: Per-request timeout in seconds.
    """

    def __init__(
        self,
        config: dict[str, Any],
        session: Optional[requests.Session] = None,
        console: Optional[Console] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.config = config
        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": "fork-parity"})
        self.console = console or Console()
        self.timeout = timeout

    @classmethod
    def from_file(cls, path: Union[str, Path], **kwargs) -> "NotificationDispatcher":
        """Load the JSON channel config at *path*.

        Raises:
            ConfigurationError: If the file is missing or not valid JSON.
        """
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(
                f"Notification config not found: {path}",
                details={"hint": "run 'fork-parity setup-notifications'"},
            )
        try:
            config = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Invalid notification config '{path}': {e}")
        if not isinstance(config, dict):
            raise ConfigurationError(f"Invalid notification config '{path}': expected an object")
        return cls(config, **kwargs)

    # ── channels ──────────────────────────────────────────────────

    def channels(self) -> list[tuple[str, str, dict[str, Any]]]:
        """Enabled channels as ``(name, kind, settings)``.

        A channel without an ``enabled`` key is enabled.
        """
        section = self.config.get("notifications") or {}
        found = []
        for kind in ("slack", "discord", "teams", "console"):
            settings = section.get(kind)
            if isinstance(settings, dict) and settings.get("enabled", True):
                found.append((kind, kind, settings))
        for name, settings in (section.get("webhooks") or {}).items():
            if isinstance(settings, dict) and settings.get("enabled", True):
                found.append((f"webhook:{name}", "webhook", settings))
        return found

    def send(self, notification_type: str, data: dict[str, Any]) -> list[ChannelResult]:
        """Render *notification_type* and deliver it to every enabled channel.

        One failing channel is recorded in its result and never stops the others.

        Raises:
            ValueError: If *notification_type* has no template.
        """
        message = build_message(notification_type, data)
        results = []
        for name, kind, settings in self.channels():
            try:
                self._deliver(name, kind, settings, message)
            except ChannelError as e:
                logger.warning("Notification to %s failed: %s", name, e.reason)
                results.append(ChannelResult(name, False, e.reason))
            else:
                logger.debug("Sent %s notification to %s", notification_type, name)
                results.append(ChannelResult(name, True))
        return results

    def _deliver(self, name: str, kind: str, settings: dict[str, Any], message: Message) -> None:
        if kind == "console":
            self.console.print(
                Panel(message.text, title=f"[bold]{message.title}[/bold]", expand=False)
            )
            return

        url = settings.get("url") if kind == "webhook" else settings.get("webhook_url")
        if not url:
            raise ChannelError(name, "no webhook URL configured")
        payload = _PAYLOAD_BUILDERS[kind](message, settings)
        headers = settings.get("headers") if kind == "webhook" else None
        try:
            response = self.session.post(url, json=payload, headers=headers, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            raise ChannelError(name, str(e)) from e

    # ── alerts ────────────────────────────────────────────────────

    def check_thresholds(
        self,
        dashboard: dict[str, Any],
        critical_threshold: Optional[int] = None,
        high_threshold: Optional[int] = None,
    ) -> list[ChannelResult]:
        """Send a critical or high-priority alert when the dashboard crosses a threshold.

        Thresholds default to the config's ``monitoring`` section, then 1 and 5.
        Returns an empty list when nothing was sent.
        """
        monitoring = self.config.get("monitoring") or {}
        if critical_threshold is None:
            critical_threshold = int(monitoring.get("critical_threshold", 1))
        if high_threshold is None:
            high_threshold = int(monitoring.get("high_threshold", 5))

        summary = dashboard.get("summary", {})
        repo = dashboard.get("repository") or {}
        data = {
            "repository_path": repo.get("path", ""),
            "critical_count": summary.get("critical", 0),
            "high_count": summary.get("high", 0),
        }
        if data["critical_count"] >= critical_threshold:
            return self.send("critical", data)
        if data["high_count"] >= high_threshold:
            return self.send("high", data)
        return []


def config_template() -> dict[str, Any]:
    return {
        "notifications": {
            "slack": {
                "enabled": False,
                "webhook_url": "https://hooks.slack.com/services/YOUR/SLACK/WEBHOOK",
                "channel": "#fork-parity",
                "username": "Fork Parity Bot",
            },
            "discord": {
                "enabled": False,
                "webhook_url": "https://discord.com/api/webhooks/YOUR/DISCORD/WEBHOOK",
                "username": "Fork Parity Bot",
            },
            "teams": {
                "enabled": False,
                "webhook_url": "https://outlook.office.com/webhook/YOUR/TEAMS/WEBHOOK",
            },
            "webhooks": {
                "custom": {
                    "enabled": False,
                    "url": "https://your-custom-webhook.example.com/fork-parity",
                    "headers": {"Authorization": "Bearer YOUR_TOKEN"},
                }
            },
            "console": {"enabled": True},
        },
        "monitoring": {"critical_threshold": 1, "high_threshold": 5},
    }


def write_config_template(path: Union[str, Path]) -> dict[str, Any]:
    """Write a starter notification config to *path* and return it."""
    template = config_template()
    Path(path).write_text(json.dumps(template, indent=2) + "\n", encoding="utf-8")
    logger.info("Wrote notification config template to %s", path)
    return template
