"""Slack Block Kit formatting for summaries, failures and cycle reports."""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Union

from article_monitor.core import ArticleSummary

MAX_SECTION_LENGTH = 3000
MAX_HEADER_LENGTH = 150
TRUNCATION_MARKER = "..."

_CODE_PATTERN = re.compile(r"```.*?```|`[^`\n]+`", re.DOTALL)
_PLACEHOLDER = "\x00{}\x00"
_PLACEHOLDER_PATTERN = re.compile("\x00(\\d+)\x00")


class TextKind(str, Enum):
    PLAIN = "plain_text"
    RICH = "mrkdwn"


@dataclass(frozen=True)
class Header:
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "header",
            "text": {"type": TextKind.PLAIN.value, "text": self.text, "emoji": True},
        }


@dataclass(frozen=True)
class Section:
    text: str
    kind: TextKind = TextKind.RICH

    def to_dict(self) -> dict[str, Any]:
        return {"type": "section", "text": {"type": self.kind.value, "text": self.text}}


@dataclass(frozen=True)
class Divider:
    def to_dict(self) -> dict[str, Any]:
        return {"type": "divider"}


MessageBlock = Union[Header, Section, Divider]


def convert_markdown_to_mrkdwn(text: str) -> str:
    """Convert markdown to Slack mrkdwn.

    Code spans and fenced blocks are kept verbatim.
    """
    code_spans: list[str] = []

    def stash(match: re.Match) -> str:
        code_spans.append(match.group(0))
        return _PLACEHOLDER.format(len(code_spans) - 1)

    text = _CODE_PATTERN.sub(stash, text)

    # # Title / ## Title -> *Title*
    text = re.sub(r"^#{1,2}[ \t]+(.+?)[ \t]*$", r"*\1*", text, flags=re.MULTILINE)
    # ### Title -> _Title_
    text = re.sub(r"^#{3,6}[ \t]+(.+?)[ \t]*$", r"_\1_", text, flags=re.MULTILINE)
    # **bold** -> *bold*, __bold__ -> _bold_
    text = re.sub(r"\*\*(.+?)\*\*", r"*\1*", text)
    text = re.sub(r"__(.+?)__", r"_\1_", text)
    # [text](url) -> <url|text>
    text = re.sub(r"\[([^\]]+)\]\(([^)\s]+)\)", r"<\2|\1>", text)
    # - item / * item / • item -> • item
    text = re.sub(r"^[ \t]*[-*•][ \t]+", "• ", text, flags=re.MULTILINE)
    text = re.sub(r"\n{3,}", "\n\n", text)

    text = _PLACEHOLDER_PATTERN.sub(lambda m: code_spans[int(m.group(1))], text)
    return text.strip()


def split_into_chunks(text: str, max_length: int = MAX_SECTION_LENGTH) -> list[str]:
    """Split text into chunks no longer than ``max_length``.

    Lines are packed greedily. A single line longer than ``max_length`` is
    cut and suffixed with the truncation marker, or hard-cut when
    ``max_length`` leaves no room for the marker.
    """
    if max_length < 1:
        raise ValueError("max_length must be positive")
    if len(text) <= max_length:
        return [text]

    chunks: list[str] = []
    current: list[str] = []
    current_length = 0

    for line in text.split("\n"):
        if len(line) > max_length:
            if current:
                chunks.append("\n".join(current))
                current, current_length = [], 0
            if max_length > len(TRUNCATION_MARKER):
                chunks.append(line[: max_length - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER)
            else:
                chunks.append(line[:max_length])
            continue

        added = len(line) + (1 if current else 0)
        if current and current_length + added > max_length:
            chunks.append("\n".join(current))
            current, current_length = [line], len(line)
        else:
            current.append(line)
            current_length += added

    if current:
        chunks.append("\n".join(current))

    return chunks


class SlackFormatter:
    """Build Block Kit messages for the notification channel."""

    def __init__(self, header_emoji: str = "📰", max_section_length: int = MAX_SECTION_LENGTH) -> None:
        self.header_emoji = header_emoji
        self.max_section_length = max_section_length

    def format_summary(self, summary: ArticleSummary) -> list[MessageBlock]:
        """Header, body sections, source link and a closing divider."""
        return self._article_blocks(
            title=summary.title,
            body=summary.to_markdown(),
            url=summary.url,
        )

    def format_failure(self, url: str, reason: str) -> list[MessageBlock]:
        """Same layout as a summary, carrying the failure reason."""
        return self._article_blocks(
            title="Article summary failed",
            body=f"❌ Could not summarize this article.\n{reason}",
            url=url,
            emoji="⚠️",
        )

    def format_cycle_report(self, message: str) -> list[MessageBlock]:
        blocks: list[MessageBlock] = [Section(chunk) for chunk in self._chunks(message)]
        blocks.append(Divider())
        return blocks

    def format_cycle_failure(self, reason: str) -> list[MessageBlock]:
        return self.format_cycle_report(f"❌ Article check failed.\n{reason}")

    def fallback_text(self, blocks: list[MessageBlock]) -> str:
        """Flat text for clients that cannot render blocks."""
        for block in blocks:
            if isinstance(block, (Header, Section)):
                return block.text
        return ""

    def _article_blocks(self, title: str, body: str, url: str, emoji: str = "") -> list[MessageBlock]:
        header = f"{emoji or self.header_emoji} {title}"
        if len(header) > MAX_HEADER_LENGTH:
            header = header[: MAX_HEADER_LENGTH - len(TRUNCATION_MARKER)] + TRUNCATION_MARKER

        blocks: list[MessageBlock] = [Header(header)]
        blocks.extend(Section(chunk) for chunk in self._chunks(body))
        blocks.append(Section(f"<{url}|🔗 Read the original>"))
        blocks.append(Divider())
        return blocks

    def _chunks(self, markdown: str) -> list[str]:
        text = convert_markdown_to_mrkdwn(markdown)
        return [chunk for chunk in split_into_chunks(text, self.max_section_length) if chunk.strip()]


def blocks_to_payload(blocks: list[MessageBlock]) -> list[dict[str, Any]]:
    return [block.to_dict() for block in blocks]
