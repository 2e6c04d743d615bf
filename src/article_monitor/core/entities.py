"""Core domain entities."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class SourceIdentity:
    """Trackable upstream repository."""
    
    owner: str
    name: str
    branch: str = "main"
    
    @property
    def key(self) -> str:
        """Cursor store key (``owner/name``)."""
        return f"{self.owner}/{self.name}"
    
    def __str__(self) -> str:
        return self.key


@dataclass
class SourceState:
    """Last processed position and counters for one source."""
    
    source: SourceIdentity
    last_processed_revision: str
    last_checked_at: datetime
    total_items_processed: int = 0


@dataclass
class CursorDocument:
    """Whole persisted cursor state, keyed by ``owner/name``."""
    
    sources: dict[str, SourceState] = field(default_factory=dict)
    
    def get(self, source: SourceIdentity) -> SourceState | None:
        return self.sources.get(source.key)
    
    def put(self, state: SourceState) -> None:
        self.sources[state.source.key] = state


@dataclass(frozen=True)
class DiscoveredItem:
    """New content link extracted from a diff."""
    
    title: str
    url: str
    discovered_at: datetime
    
    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Title cannot be empty")
        if not self.url:
            raise ValueError("URL cannot be empty")


@dataclass(frozen=True)
class ArticleSummary:
    """Structured enrichment result for one article."""
    
    url: str
    title: str
    summary_line: str
    bullets: tuple[str, ...]
    
    def __post_init__(self) -> None:
        if not self.title:
            raise ValueError("Title cannot be empty")
        if not self.summary_line:
            raise ValueError("Summary line cannot be empty")
        if not 1 <= len(self.bullets) <= 5:
            raise ValueError("Summary must have between 1 and 5 bullets")
    
    def to_markdown(self) -> str:
        """Render the summary body as markdown."""
        bullet_points = "\n".join(f"- {bullet}" for bullet in self.bullets)
        return f"## Overview\n{self.summary_line}\n\n## Key Points\n{bullet_points}"


@dataclass(frozen=True)
class DetectionResult:
    """Outcome of one change detection pass."""
    
    items: list[DiscoveredItem]
    new_revision: str


@dataclass(frozen=True)
class CycleResult:
    """Outcome of one fetch cycle."""
    
    source: SourceIdentity
    ok: bool
    item_count: int = 0
    new_revision: str = ""
    reason: str = ""
