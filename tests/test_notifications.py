"""Tests for notification templates and channel dispatch."""

import io
import json
from unittest.mock import MagicMock, patch

import pytest
import requests
from rich.console import Console

from fork_parity.exceptions import ConfigurationError
from fork_parity.notifications import (
    TEMPLATES,
    NotificationDispatcher,
    build_message,
    config_template,
    write_config_template,
)
from fork_parity.notifications.templates import (
    discord_payload,
    slack_payload,
    teams_payload,
    webhook_payload,
)


def _quiet_console() -> Console:
    return Console(file=io.StringIO(), width=100)


def _config(**channels) -> dict:
    return {"notifications": channels}


class TestTemplates:
    def test_known_types(self):
        assert set(TEMPLATES) == {"critical", "high", "daily", "integration", "security"}

    def test_unknown_type(self):
        with pytest.raises(ValueError, match="Unknown notification type"):
            build_message("weekly", {})

    def test_critical(self):
        message = build_message(
            "critical", {"repository_path": "/fork", "critical_count": 2, "high_count": 4}
        )
        assert message.level == "danger"
        assert message.text.startswith("CRITICAL: 2 critical upstream changes in /fork")
        assert ("High Priority Items", "4") in message.fields

    def test_daily_rate_and_level(self):
        quiet = build_message(
            "daily", {"summary": {"total_commits": 4, "integrated": 1, "critical": 0}}
        )
        assert ("Integration Rate", "25%") in quiet.fields
        assert quiet.level == "good"
        empty = build_message("daily", {"summary": {}})
        assert ("Integration Rate", "n/a") in empty.fields

    def test_integration_level(self):
        done = build_message("integration", {"commit_hash": "a" * 40, "status": "integrated"})
        assert done.text == "Integration: aaaaaaaa - integrated"
        assert done.level == "good"
        skipped = build_message("integration", {"commit_hash": "a" * 40, "status": "skipped"})
        assert skipped.level == "warning"

    def test_security(self):
        message = build_message("security", {"findings": [{}, {}], "risk_level": "high"})
        assert message.text == "Security alert: 2 security issues detected"
        assert message.level == "danger"


class TestPayloads:
    @pytest.fixture
    def message(self):
        return build_message("high", {"repository_path": "/fork", "high_count": 6})

    def test_slack(self, message):
        payload = slack_payload(message, {"channel": "#ops", "username": ""})
        assert payload["channel"] == "#ops"
        assert "username" not in payload
        attachment = payload["attachments"][0]
        assert attachment["color"] == "#FFA500"
        assert attachment["fields"][0] == {
            "title": "High Priority Items",
            "value": "6",
            "short": True,
        }

    def test_discord(self, message):
        payload = discord_payload(message, {"username": "bot"})
        assert payload["username"] == "bot"
        assert payload["embeds"][0]["color"] == 0xFFA500

    def test_teams(self, message):
        payload = teams_payload(message, {})
        assert payload["@type"] == "MessageCard"
        assert payload["themeColor"] == "FFA500"
        assert payload["sections"][0]["facts"][1] == {"name": "Repository", "value": "/fork"}

    def test_webhook(self, message):
        payload = webhook_payload(message, {})
        assert payload["title"] == "Fork Parity High Priority Alert"
        assert payload["fields"] == {"High Priority Items": "6", "Repository": "/fork"}


class TestDispatcher:
    def test_enabled_channels(self):
        dispatcher = NotificationDispatcher(
            _config(
                slack={"webhook_url": "https://slack.example"},
                discord={"enabled": False, "webhook_url": "https://discord.example"},
                console={"enabled": True},
                webhooks={"ci": {"url": "https://ci.example"}, "off": {"enabled": False}},
            ),
            console=_quiet_console(),
        )
        assert [name for name, _, _ in dispatcher.channels()] == [
            "slack",
            "console",
            "webhook:ci",
        ]

    @patch("requests.Session.post")
    def test_send_posts_payload(self, mock_post):
        mock_post.return_value = MagicMock(status_code=200)
        dispatcher = NotificationDispatcher(
            _config(slack={"webhook_url": "https://slack.example"}), timeout=3
        )
        results = dispatcher.send("critical", {"critical_count": 1})
        assert [r.to_dict() for r in results] == [
            {"channel": "slack", "success": True, "error": None}
        ]
        args, kwargs = mock_post.call_args
        assert args[0] == "https://slack.example"
        assert kwargs["timeout"] == 3
        assert kwargs["json"]["attachments"][0]["title"] == "Fork Parity Critical Alert"

    @patch("requests.Session.post")
    def test_webhook_headers_forwarded(self, mock_post):
        mock_post.return_value = MagicMock(status_code=200)
        dispatcher = NotificationDispatcher(
            _config(webhooks={"ci": {"url": "https://ci.example", "headers": {"X-Token": "t"}}})
        )
        dispatcher.send("daily", {"summary": {}})
        assert mock_post.call_args.kwargs["headers"] == {"X-Token": "t"}
        assert mock_post.call_args.kwargs["json"]["title"] == "Daily Fork Parity Summary"

    @patch("requests.Session.post")
    def test_one_failing_channel_does_not_stop_others(self, mock_post):
        ok = MagicMock(status_code=200)
        mock_post.side_effect = [requests.exceptions.ConnectionError("refused"), ok]
        dispatcher = NotificationDispatcher(
            _config(
                slack={"webhook_url": "https://slack.example"},
                teams={"webhook_url": "https://teams.example"},
            )
        )
        results = dispatcher.send("high", {"high_count": 9})
        assert [(r.channel, r.success) for r in results] == [("slack", False), ("teams", True)]
        assert "refused" in results[0].error

    @patch("requests.Session.post")
    def test_http_error_status(self, mock_post):
        response = MagicMock()
        response.raise_for_status.side_effect = requests.exceptions.HTTPError("500 Server Error")
        mock_post.return_value = response
        dispatcher = NotificationDispatcher(_config(discord={"webhook_url": "https://d.example"}))
        (result,) = dispatcher.send("high", {})
        assert not result.success
        assert "500" in result.error

    def test_missing_url(self):
        dispatcher = NotificationDispatcher(_config(slack={"enabled": True}))
        (result,) = dispatcher.send("high", {})
        assert result.error == "no webhook URL configured"

    def test_console_channel(self):
        buffer = io.StringIO()
        dispatcher = NotificationDispatcher(
            _config(console={}), console=Console(file=buffer, width=100)
        )
        (result,) = dispatcher.send("security", {"findings": [], "risk_level": "low"})
        assert result.success
        assert "Fork Parity Security Alert" in buffer.getvalue()


class TestThresholds:
    def _dispatcher(self, monitoring=None):
        config = _config(console={})
        if monitoring:
            config["monitoring"] = monitoring
        return NotificationDispatcher(config, console=_quiet_console())

    def _dashboard(self, critical, high):
        return {"summary": {"critical": critical, "high": high}, "repository": {"path": "/f"}}

    def test_critical_alert(self):
        dispatcher = self._dispatcher()
        with patch.object(dispatcher, "send", return_value=["sent"]) as send:
            assert dispatcher.check_thresholds(self._dashboard(1, 0)) == ["sent"]
        send.assert_called_once_with(
            "critical", {"repository_path": "/f", "critical_count": 1, "high_count": 0}
        )

    def test_high_alert(self):
        dispatcher = self._dispatcher()
        with patch.object(dispatcher, "send", return_value=[]) as send:
            dispatcher.check_thresholds(self._dashboard(0, 5))
        assert send.call_args.args[0] == "high"

    def test_below_thresholds(self):
        dispatcher = self._dispatcher({"critical_threshold": 3, "high_threshold": 10})
        assert dispatcher.check_thresholds(self._dashboard(2, 9)) == []

    def test_explicit_thresholds_override_config(self):
        dispatcher = self._dispatcher({"critical_threshold": 3})
        with patch.object(dispatcher, "send", return_value=[]) as send:
            dispatcher.check_thresholds(self._dashboard(1, 0), critical_threshold=1)
        assert send.call_args.args[0] == "critical"


class TestConfigFile:
    def test_template_round_trip(self, tmp_path):
        path = tmp_path / "notify.json"
        written = write_config_template(path)
        assert written == config_template()
        assert json.loads(path.read_text()) == written

    def test_template_only_enables_console(self, tmp_path):
        path = tmp_path / "notify.json"
        write_config_template(path)
        dispatcher = NotificationDispatcher.from_file(path, console=_quiet_console())
        assert [name for name, _, _ in dispatcher.channels()] == ["console"]

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            NotificationDispatcher.from_file(tmp_path / "absent.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{not json")
        with pytest.raises(ConfigurationError, match="Invalid notification config"):
            NotificationDispatcher.from_file(path)

    def test_non_object_json(self, tmp_path):
        path = tmp_path / "list.json"
        path.write_text("[]")
        with pytest.raises(ConfigurationError, match="expected an object"):
            NotificationDispatcher.from_file(path)
