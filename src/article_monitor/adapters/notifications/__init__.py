"""Notification adapters."""

from article_monitor.adapters.notifications.slack_formatter import (
    Divider,
    Header,
    MessageBlock,
    Section,
    SlackFormatter,
    TextKind,
    blocks_to_payload,
    convert_markdown_to_mrkdwn,
    split_into_chunks,
)
from article_monitor.adapters.notifications.slack_notifier import SlackNotifier

__all__ = [
    "Divider",
    "Header",
    "MessageBlock",
    "Section",
    "SlackFormatter",
    "SlackNotifier",
    "TextKind",
    "blocks_to_payload",
    "convert_markdown_to_mrkdwn",
    "split_into_chunks",
]
