"""Tests for Slack message formatting and chunking."""

import pytest

from article_monitor.adapters.notifications import (
    Divider,
    Header,
    Section,
    SlackFormatter,
    TextKind,
    blocks_to_payload,
    convert_markdown_to_mrkdwn,
    split_into_chunks,
)
from article_monitor.adapters.notifications.slack_formatter import TRUNCATION_MARKER
from article_monitor.core import ArticleSummary


def test_convert_markdown_to_mrkdwn_links() -> None:
    """Test markdown link conversion to Slack format."""
    assert convert_markdown_to_mrkdwn("Check out [this paper](https://arxiv.org/abs/123)") == (
        "Check out <https://arxiv.org/abs/123|this paper>"
    )
    assert convert_markdown_to_mrkdwn("[First](http://example.com) and [Second](http://test.com)") == (
        "<http://example.com|First> and <http://test.com|Second>"
    )


def test_convert_markdown_to_mrkdwn_bold() -> None:
    """Test markdown bold conversion to Slack format."""
    assert convert_markdown_to_mrkdwn("This is **bold text** here") == "This is *bold text* here"
    assert convert_markdown_to_mrkdwn("**First** and __Second__ bold") == "*First* and _Second_ bold"


def test_convert_markdown_to_mrkdwn_headings() -> None:
    """Test headings become bold lines and sub-headings italic lines."""
    text = "## Overview\nBody\n### Details\nMore"
    
    assert convert_markdown_to_mrkdwn(text) == "*Overview*\nBody\n_Details_\nMore"


def test_convert_markdown_to_mrkdwn_bullets() -> None:
    """Test list markers are normalized."""
    assert convert_markdown_to_mrkdwn("- item 1\n* item 2\n  • item 3") == "• item 1\n• item 2\n• item 3"


def test_convert_markdown_to_mrkdwn_keeps_code() -> None:
    """Test code spans and fenced blocks are left untouched."""
    assert convert_markdown_to_mrkdwn("`**not bold**`") == "`**not bold**`"
    
    fenced = "```swift\n// - not a bullet\nlet x = [a](b)\n```"
    assert convert_markdown_to_mrkdwn(f"Example:\n{fenced}") == f"Example:\n{fenced}"


def test_convert_markdown_to_mrkdwn_collapses_blank_lines() -> None:
    """Test runs of blank lines collapse and edges are trimmed."""
    assert convert_markdown_to_mrkdwn("\n\nOne\n\n\n\n\nTwo\n\n") == "One\n\nTwo"


def test_convert_markdown_to_mrkdwn_combined() -> None:
    """Test combined markdown to mrkdwn conversion."""
    markdown = "**Title**: Check [this link](http://example.com) with **bold text**"
    
    assert convert_markdown_to_mrkdwn(markdown) == (
        "*Title*: Check <http://example.com|this link> with *bold text*"
    )


def test_split_short_text_is_single_chunk() -> None:
    """Test text within the limit is returned as is."""
    assert split_into_chunks("short text", 100) == ["short text"]
    assert split_into_chunks("x" * 50, 50) == ["x" * 50]


def test_split_on_line_boundaries() -> None:
    """Test packing whole lines into chunks."""
    text = "first line here\n" * 10
    
    chunks = split_into_chunks(text, 50)
    
    assert len(chunks) > 1
    assert all(len(chunk) <= 50 for chunk in chunks)
    assert "\n".join(chunks) == text


def test_split_truncates_overlong_line() -> None:
    """Test a single line over the limit is cut with a marker."""
    chunks = split_into_chunks("A" * 100, 50)
    
    assert chunks == ["A" * (50 - len(TRUNCATION_MARKER)) + TRUNCATION_MARKER]


def test_split_overlong_line_between_short_lines() -> None:
    """Test neighbours of a truncated line are preserved."""
    text = "intro\n" + "B" * 80 + "\noutro"
    
    chunks = split_into_chunks(text, 40)
    
    assert chunks == ["intro", "B" * 37 + TRUNCATION_MARKER, "outro"]


@pytest.mark.parametrize("max_length", [1, 2, 3, 4, 10, 17, 64, 200])
def test_split_chunks_never_exceed_limit(max_length: int) -> None:
    """Test the length bound for mixed line lengths."""
    lines = ["", "a", "bb" * 5, "c" * 150, "", "dd dd dd", "e" * max_length, "f" * (max_length + 1)]
    text = "\n".join(lines * 3)
    
    for chunk in split_into_chunks(text, max_length):
        assert len(chunk) <= max_length


def test_split_chunks_hard_cut_without_room_for_marker() -> None:
    """Test short limits cut long lines without the marker."""
    assert split_into_chunks("abcdef\nghijkl", 2) == ["ab", "gh"]
    assert split_into_chunks("abcdef\nghijkl", 4) == ["a" + TRUNCATION_MARKER, "g" + TRUNCATION_MARKER]


def test_split_chunks_rejects_non_positive_limit() -> None:
    with pytest.raises(ValueError):
        split_into_chunks("abc", 0)


@pytest.fixture
def summary() -> ArticleSummary:
    return ArticleSummary(
        url="https://example.com/test",
        title="Test Article",
        summary_line="About **Swift** concurrency.",
        bullets=("async/await", "Actors"),
    )


def test_format_summary_layout(summary: ArticleSummary) -> None:
    """Test header, body, link and divider."""
    blocks = SlackFormatter().format_summary(summary)
    
    assert blocks[0] == Header("📰 Test Article")
    assert blocks[1] == Section("*Overview*\nAbout *Swift* concurrency.\n\n*Key Points*\n• async/await\n• Actors")
    assert blocks[-2] == Section("<https://example.com/test|🔗 Read the original>")
    assert blocks[-1] == Divider()


def test_format_summary_long_body_is_split(summary: ArticleSummary) -> None:
    """Test long bodies become several sections within the limit."""
    long_summary = ArticleSummary(
        url=summary.url,
        title=summary.title,
        summary_line="Long. " * 200,
        bullets=tuple("Point " * 60 for _ in range(5)),
    )
    formatter = SlackFormatter(max_section_length=500)
    
    blocks = formatter.format_summary(long_summary)
    
    sections = [b for b in blocks if isinstance(b, Section)]
    assert len(sections) > 2
    assert all(len(s.text) <= 500 for s in sections)


def test_format_summary_truncates_long_title(summary: ArticleSummary) -> None:
    """Test the header stays within Slack's header limit."""
    long_title = ArticleSummary(
        url=summary.url, title="T" * 300, summary_line="Line", bullets=("One",)
    )
    
    header = SlackFormatter().format_summary(long_title)[0]
    
    assert len(header.text) == 150
    assert header.text.endswith(TRUNCATION_MARKER)


def test_format_failure() -> None:
    """Test failure messages carry the reason and the link."""
    blocks = SlackFormatter().format_failure("https://example.com/x", "The article could not be opened or read.")
    
    assert blocks[0] == Header("⚠️ Article summary failed")
    assert "The article could not be opened or read." in blocks[1].text
    assert "https://example.com/x" in blocks[-2].text
    assert blocks[-1] == Divider()


def test_format_cycle_messages() -> None:
    """Test cycle report and failure blocks."""
    formatter = SlackFormatter()
    
    assert formatter.format_cycle_report("✅ No new articles in o/r.") == [
        Section("✅ No new articles in o/r."),
        Divider(),
    ]
    failure = formatter.format_cycle_failure("GitHub API error 502")
    assert "GitHub API error 502" in failure[0].text
    assert failure[-1] == Divider()


def test_fallback_text(summary: ArticleSummary) -> None:
    """Test flat fallback text uses the first text block."""
    formatter = SlackFormatter()
    
    assert formatter.fallback_text(formatter.format_summary(summary)) == "📰 Test Article"
    assert formatter.fallback_text([Divider()]) == ""


def test_blocks_to_payload() -> None:
    """Test Block Kit serialization."""
    payload = blocks_to_payload([Header("📰 T"), Section("hi"), Section("plain", TextKind.PLAIN), Divider()])
    
    assert payload == [
        {"type": "header", "text": {"type": "plain_text", "text": "📰 T", "emoji": True}},
        {"type": "section", "text": {"type": "mrkdwn", "text": "hi"}},
        {"type": "section", "text": {"type": "plain_text", "text": "plain"}},
        {"type": "divider"},
    ]
