"""Pipeline events.

Events are frozen dataclasses. The bus routes them by exact class, so
each class is one event kind::

    ItemDiscovered    → one per new link found in a cycle
    SummaryCompleted  → enrichment produced an ArticleSummary
    SummaryFailed     → enrichment failed for one URL
    CycleCompleted    → a fetch cycle finished (possibly with zero items)
    CycleFailed       → a fetch cycle aborted
"""

from dataclasses import dataclass

from article_monitor.core.entities import ArticleSummary


@dataclass(frozen=True)
class PipelineEvent:
    """Base class for all pipeline events."""


@dataclass(frozen=True)
class ItemDiscovered(PipelineEvent):
    title: str
    url: str


@dataclass(frozen=True)
class SummaryCompleted(PipelineEvent):
    summary: ArticleSummary


@dataclass(frozen=True)
class SummaryFailed(PipelineEvent):
    url: str
    reason: str


@dataclass(frozen=True)
class CycleCompleted(PipelineEvent):
    item_count: int
    message: str


@dataclass(frozen=True)
class CycleFailed(PipelineEvent):
    reason: str
