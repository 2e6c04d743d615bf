"""Prompt contract and response parser for article summaries.

The generation call is asked to answer in this layout::

    ## Title
    <original article title>

    ## Summary
    <one or two lines>

    ## Key Points
    - point
    - point
    - point

or with the bare ``OFF_TOPIC`` sentinel when the article is outside the
accepted topic, or with nothing at all when the page cannot be read.
"""

import re

from article_monitor.core.entities import ArticleSummary
from article_monitor.core.errors import SummaryError, SummaryErrorKind

OFF_TOPIC_SENTINEL = "OFF_TOPIC"
TITLE_HEADER = "Title"
SUMMARY_HEADER = "Summary"
BULLETS_HEADER = "Key Points"
MAX_BULLETS = 5

BULLET_MARKERS = "-*•·+–"

_HEADER_PATTERN = re.compile(r"^#{1,6}[ \t]*(.+?)[ \t]*#*[ \t]*$", re.MULTILINE)
_BULLET_PATTERN = re.compile(
    rf"^\s*(?:[{re.escape(BULLET_MARKERS)}](?![{re.escape(BULLET_MARKERS)}])\s*|\d+[.)]\s+)"
)
_SENTENCE_PATTERN = re.compile(r"(?<=[.!?。])\s+")

PROMPT_TEMPLATE = """You are an expert technical editor for {topic} articles.
Read the web page at the URL below and summarize it in {language}.

Rules:
1. If the page cannot be opened or has no readable article content, reply with nothing at all.
2. If the article is not about {topic}, reply with exactly {sentinel} and nothing else.
3. Keep technical terms, API and framework names in their original form.
4. Do not add any text before or after the sections below.

URL:
{url}

Response format (follow it exactly):
## {title_header}
[the original article title]

## {summary_header}
[what the article is about, 1-2 lines]

## {bullets_header}
- [key point, 3-5 bullets in total]
"""


def build_prompt(url: str, topic: str, language: str = "English") -> str:
    """Build the fixed-format summarization prompt for one URL."""
    return PROMPT_TEMPLATE.format(
        url=url,
        topic=topic,
        language=language,
        sentinel=OFF_TOPIC_SENTINEL,
        title_header=TITLE_HEADER,
        summary_header=SUMMARY_HEADER,
        bullets_header=BULLETS_HEADER,
    )


def _split_sections(text: str) -> dict[str, str]:
    """Map lower-cased header name to the text below it."""
    sections: dict[str, str] = {}
    matches = list(_HEADER_PATTERN.finditer(text))
    for i, match in enumerate(matches):
        end = matches[i + 1].start() if i + 1 < len(matches) else len(text)
        name = match.group(1).strip().strip("*_").strip().rstrip(":").lower()
        sections.setdefault(name, text[match.end():end].strip())
    return sections


def normalize_bullets(text: str) -> list[str]:
    """Strip bullet markers and drop blank lines."""
    bullets = []
    for line in text.splitlines():
        cleaned = _BULLET_PATTERN.sub("", line, count=1).strip()
        if cleaned:
            bullets.append(cleaned)
    return bullets


def split_sentences(text: str) -> list[str]:
    """Split text on sentence boundaries."""
    flat = " ".join(line.strip() for line in text.splitlines() if line.strip())
    return [s.strip() for s in _SENTENCE_PATTERN.split(flat) if s.strip()]


def _first_line(text: str) -> str:
    for line in text.splitlines():
        line = line.strip().strip("*_").strip()
        if line:
            return line
    return ""


def parse_summary(url: str, response: str) -> ArticleSummary:
    """Parse a generation response into an ArticleSummary.
    
    Raises:
        SummaryError: UNEXPECTED_URL for an empty response, OFF_TOPIC for the
            sentinel, SUMMARY_FAILED when the title or summary section is missing
    """
    text = (response or "").strip()
    if not text:
        raise SummaryError(SummaryErrorKind.UNEXPECTED_URL, url)
    
    if text.strip("`*_ \n").upper() == OFF_TOPIC_SENTINEL:
        raise SummaryError(SummaryErrorKind.OFF_TOPIC, url)
    
    sections = _split_sections(text)
    
    title = _first_line(sections.get(TITLE_HEADER.lower(), ""))
    if not title:
        raise SummaryError(SummaryErrorKind.SUMMARY_FAILED, url, "Response has no title section.")
    
    summary_line = " ".join(
        line.strip() for line in sections.get(SUMMARY_HEADER.lower(), "").splitlines() if line.strip()
    )
    if not summary_line:
        raise SummaryError(SummaryErrorKind.SUMMARY_FAILED, url, "Response has no summary section.")
    
    bullets = normalize_bullets(sections.get(BULLETS_HEADER.lower(), ""))
    if not bullets:
        sentences = split_sentences(summary_line)
        bullets = sentences
        summary_line = sentences[0]
    
    return ArticleSummary(
        url=url,
        title=title,
        summary_line=summary_line,
        bullets=tuple(bullets[:MAX_BULLETS]),
    )
