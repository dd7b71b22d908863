"""Chat and webhook notifications."""

from .dispatcher import (
    ChannelResult,
    NotificationDispatcher,
    config_template,
    write_config_template,
)
from .templates import TEMPLATES, Message, build_message

__all__ = [
    "NotificationDispatcher",
    "ChannelResult",
    "config_template",
    "write_config_template",
    "Message",
    "TEMPLATES",
    "build_message",
]
