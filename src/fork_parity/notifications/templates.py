"""Notification message templates and per-channel payload builders.

A template turns event data into a channel-neutral ``Message``; the
``*_payload`` functions shape that message for each webhook API.
"""

from dataclasses import dataclass, field
from typing import Any, Callable

COLORS = {
    "danger": "FF0000",
    "warning": "FFA500",
    "good": "2EB886",
    "info": "0076D7",
}


@dataclass
class Message:
    title: str
    text: str
    level: str = "info"
    fields: list[tuple[str, str]] = field(default_factory=list)
    details: dict[str, Any] = field(default_factory=dict)

    @property
    def color(self) -> str:
        return COLORS.get(self.level, COLORS["info"])

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "text": self.text,
            "level": self.level,
            "fields": {name: value for name, value in self.fields},
            "details": self.details,
        }


# ── templates ─────────────────────────────────────────────────────


def critical_template(data: dict[str, Any]) -> Message:
    path = data.get("repository_path", "")
    critical = int(data.get("critical_count", 0))
    high = int(data.get("high_count", 0))
    return Message(
        title="Fork Parity Critical Alert",
        text=(
            f"CRITICAL: {critical} critical upstream changes in {path} "
            "require immediate attention"
        ),
        level="danger",
        fields=[
            ("Critical Items", str(critical)),
            ("High Priority Items", str(high)),
            ("Repository", path),
        ],
        details={"critical_count": critical, "high_count": high, "repository": path},
    )


def high_template(data: dict[str, Any]) -> Message:
    path = data.get("repository_path", "")
    high = int(data.get("high_count", 0))
    return Message(
        title="Fork Parity High Priority Alert",
        text=f"{high} high priority upstream changes are waiting in {path}",
        level="warning",
        fields=[("High Priority Items", str(high)), ("Repository", path)],
        details={"high_count": high, "repository": path},
    )


def daily_template(data: dict[str, Any]) -> Message:
    path = data.get("repository_path", "")
    summary = data.get("summary", {})
    total = int(summary.get("total_commits", 0))
    integrated = int(summary.get("integrated", 0))
    rate = f"{integrated / total:.0%}" if total else "n/a"
    critical = int(summary.get("critical", 0))
    return Message(
        title="Daily Fork Parity Summary",
        text=(
            f"Daily summary for {path}: {total} total commits, "
            f"{summary.get('pending', 0)} pending, {critical} critical"
        ),
        level="danger" if critical > 0 else "good",
        fields=[
            ("Total Commits", str(total)),
            ("Integration Rate", rate),
            ("Pending Items", str(summary.get("pending", 0))),
            ("Critical Items", str(critical)),
        ],
        details={"summary": dict(summary), "repository": path},
    )


def integration_template(data: dict[str, Any]) -> Message:
    commit_hash = str(data.get("commit_hash", ""))
    status = str(data.get("status", ""))
    return Message(
        title="Integration Update",
        text=f"Integration: {commit_hash[:8]} - {status}",
        level="good" if status == "integrated" else "warning",
        fields=[
            ("Commit", commit_hash[:8]),
            ("Status", status),
            ("Author", str(data.get("author", "unknown"))),
        ],
        details={"commit_hash": commit_hash, "status": status},
    )


def security_template(data: dict[str, Any]) -> Message:
    findings = data.get("findings", [])
    risk = str(data.get("risk_level", "unknown"))
    return Message(
        title="Fork Parity Security Alert",
        text=f"Security alert: {len(findings)} security issues detected",
        level="danger" if risk in ("high", "critical") else "warning",
        fields=[("Security Issues", str(len(findings))), ("Risk Level", risk)],
        details={"findings": findings, "risk_level": risk},
    )


TEMPLATES: dict[str, Callable[[dict[str, Any]], Message]] = {
    "critical": critical_template,
    "high": high_template,
    "daily": daily_template,
    "integration": integration_template,
    "security": security_template,
}


def build_message(notification_type: str, data: dict[str, Any]) -> Message:
    template = TEMPLATES.get(notification_type)
    if template is None:
        raise ValueError(
            f"Unknown notification type: {notification_type!r}. "
            f"Choose from: {', '.join(sorted(TEMPLATES))}"
        )
    return template(data)


# ── channel payloads ──────────────────────────────────────────────


def slack_payload(message: Message, config: dict[str, Any]) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "text": message.text,
        "attachments": [
            {
                "color": f"#{message.color}",
                "title": message.title,
                "fields": [
                    {"title": name, "value": value, "short": True}
                    for name, value in message.fields
                ],
            }
        ],
    }
    for key in ("channel", "username"):
        if config.get(key):
            payload[key] = config[key]
    return payload


def discord_payload(message: Message, config: dict[str, Any]) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "content": message.text,
        "embeds": [
            {
                "title": message.title,
                "color": int(message.color, 16),
                "fields": [
                    {"name": name, "value": value, "inline": True}
                    for name, value in message.fields
                ],
            }
        ],
    }
    if config.get("username"):
        payload["username"] = config["username"]
    return payload


def teams_payload(message: Message, config: dict[str, Any]) -> dict[str, Any]:
    return {
        "@type": "MessageCard",
        "@context": "http://schema.org/extensions",
        "themeColor": message.color,
        "summary": message.text,
        "sections": [
            {
                "activityTitle": message.title,
                "text": message.text,
                "facts": [{"name": name, "value": value} for name, value in message.fields],
            }
        ],
    }


def webhook_payload(message: Message, config: dict[str, Any]) -> dict[str, Any]:
    return message.to_dict()
