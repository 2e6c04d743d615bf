"""Error taxonomy.

    MonitorError
    ├── StateCorrupt        cursor file unreadable or malformed
    ├── SourceUnreachable   revision or diff fetch failed
    ├── DeliveryFailed      notification send failed
    └── SummaryError        per-item enrichment failure, tagged by kind
"""

from enum import Enum


class MonitorError(Exception):
    """Base class for all article monitor errors."""


class StateCorrupt(MonitorError):
    """Cursor file exists but cannot be parsed."""


class SourceUnreachable(MonitorError):
    """Source API call failed."""


class DeliveryFailed(MonitorError):
    """Chat delivery call failed."""


class SummaryErrorKind(str, Enum):
    """Kind of per-item enrichment failure."""
    
    UNEXPECTED_URL = "unexpected_url"
    OFF_TOPIC = "off_topic"
    SUMMARY_FAILED = "summary_failed"
    
    def user_message(self) -> str:
        """User-facing reason for this kind of failure."""
        if self is SummaryErrorKind.UNEXPECTED_URL:
            return "The article could not be opened or read."
        if self is SummaryErrorKind.OFF_TOPIC:
            return "The article is outside the tracked topic."
        if self is SummaryErrorKind.SUMMARY_FAILED:
            return "The summary could not be generated."
        raise AssertionError(f"Unhandled summary error kind: {self!r}")


class SummaryError(MonitorError):
    """Enrichment failure for a single URL."""
    
    def __init__(self, kind: SummaryErrorKind, url: str, message: str = "") -> None:
        self.kind = kind
        self.url = url
        self.message = message or kind.user_message()
        super().__init__(f"{kind.value}: {self.message} ({url})")
    
    @property
    def reason(self) -> str:
        """Reason carried on the SummaryFailed event."""
        if self.message == self.kind.user_message():
            return self.message
        return f"{self.kind.user_message()} {self.message}"
