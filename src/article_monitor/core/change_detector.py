"""Detect new article links between the cursor revision and head."""

import logging
import re
from datetime import datetime, timezone
from typing import Iterable, Optional
from urllib.parse import urlparse

from article_monitor.core.entities import (
    CursorDocument,
    DetectionResult,
    DiscoveredItem,
    SourceIdentity,
)
from article_monitor.core.interfaces import SourceClient

logger = logging.getLogger(__name__)

LINK_PATTERN = re.compile(r"\[(.+?)\]\((.+?)\)")
DEFAULT_VIDEO_HOSTS = ("youtube.com", "youtu.be")
_FILE_MARKER = re.compile(r"^\+\+\+ (?:[ab]/|/dev/null)")


def is_video_url(url: str, video_hosts: Iterable[str] = DEFAULT_VIDEO_HOSTS) -> bool:
    """Check if the URL host is a video hosting domain (or a subdomain of one)."""
    host = (urlparse(url.strip()).hostname or "").lower()
    if not host:
        return False
    return any(host == domain or host.endswith("." + domain) for domain in video_hosts)


def parse_items(
    diff: str,
    video_hosts: Iterable[str] = DEFAULT_VIDEO_HOSTS,
    now: Optional[datetime] = None,
) -> list[DiscoveredItem]:
    """Extract ``[title](url)`` links from the added lines of a unified diff.
    
    Items keep line order, then left-to-right order within a line. Links to
    video hosts are dropped.
    """
    video_hosts = tuple(video_hosts)
    discovered_at = now or datetime.now(timezone.utc)
    items: list[DiscoveredItem] = []
    
    for line in diff.splitlines():
        if not line.startswith("+") or _FILE_MARKER.match(line):
            continue
        for match in LINK_PATTERN.finditer(line):
            title, url = match.group(1).strip(), match.group(2).strip()
            if not title or not url:
                continue
            if is_video_url(url, video_hosts):
                continue
            items.append(DiscoveredItem(title=title, url=url, discovered_at=discovered_at))
    
    return items


class ChangeDetector:
    """Find links added to a source since its last processed revision.
    
    Does not touch the cursor store; the caller writes ``new_revision`` back.
    """
    
    def __init__(
        self,
        client: SourceClient,
        first_run_window: int = 2,
        video_hosts: Iterable[str] = DEFAULT_VIDEO_HOSTS,
    ) -> None:
        self.client = client
        self.first_run_window = max(2, first_run_window)
        self.video_hosts = tuple(video_hosts)
    
    async def detect(self, source: SourceIdentity, doc: CursorDocument) -> DetectionResult:
        """Return new items and the head revision for ``source``.
        
        Raises:
            SourceUnreachable: if any source API call fails
        """
        new_revision = await self.client.get_head_revision(source)
        state = doc.get(source)
        
        if state is None:
            revisions = await self.client.list_recent_revisions(source, self.first_run_window)
            if len(revisions) < 2:
                logger.info("First run for %s: not enough history to diff", source)
                return DetectionResult(items=[], new_revision=new_revision)
            base = revisions[-1]
            logger.info("First run for %s: diffing %s...%s", source, base[:7], new_revision[:7])
        elif state.last_processed_revision == new_revision:
            logger.info("No new revisions for %s", source)
            return DetectionResult(items=[], new_revision=new_revision)
        else:
            base = state.last_processed_revision
        
        diff = await self.client.get_diff(source, base, new_revision)
        items = parse_items(diff, self.video_hosts)
        logger.info("Parsed %d new item(s) from %s diff", len(items), source)
        return DetectionResult(items=items, new_revision=new_revision)
