"""Core domain layer."""

from article_monitor.core.change_detector import ChangeDetector, parse_items
from article_monitor.core.cursor_store import CursorStore
from article_monitor.core.entities import (
    ArticleSummary,
    CursorDocument,
    CycleResult,
    DetectionResult,
    DiscoveredItem,
    SourceIdentity,
    SourceState,
)
from article_monitor.core.errors import (
    DeliveryFailed,
    MonitorError,
    SourceUnreachable,
    StateCorrupt,
    SummaryError,
    SummaryErrorKind,
)
from article_monitor.core.event_bus import EventBus
from article_monitor.core.events import (
    CycleCompleted,
    CycleFailed,
    ItemDiscovered,
    PipelineEvent,
    SummaryCompleted,
    SummaryFailed,
)
from article_monitor.core.interfaces import GenerationClient, NotificationService, SourceClient
from article_monitor.core.semaphore import Semaphore

__all__ = [
    "ArticleSummary",
    "ChangeDetector",
    "CursorDocument",
    "CursorStore",
    "CycleCompleted",
    "CycleFailed",
    "CycleResult",
    "DeliveryFailed",
    "DetectionResult",
    "DiscoveredItem",
    "EventBus",
    "GenerationClient",
    "ItemDiscovered",
    "MonitorError",
    "NotificationService",
    "PipelineEvent",
    "Semaphore",
    "SourceClient",
    "SourceIdentity",
    "SourceState",
    "SourceUnreachable",
    "StateCorrupt",
    "SummaryCompleted",
    "SummaryError",
    "SummaryErrorKind",
    "SummaryFailed",
    "parse_items",
]
