"""Core interfaces for adapters."""

from abc import ABC, abstractmethod
from typing import Any

from article_monitor.core.entities import SourceIdentity


class SourceClient(ABC):
    """Interface for the source repository API."""
    
    @abstractmethod
    async def get_head_revision(self, source: SourceIdentity) -> str:
        """Return the current head revision of the source branch."""
        pass
    
    @abstractmethod
    async def list_recent_revisions(self, source: SourceIdentity, count: int) -> list[str]:
        """Return up to ``count`` recent revisions, most recent first."""
        pass
    
    @abstractmethod
    async def get_diff(self, source: SourceIdentity, base: str, head: str) -> str:
        """Return the unified diff between two revisions."""
        pass


class GenerationClient(ABC):
    """Interface for the generative enrichment call."""
    
    @abstractmethod
    async def generate(self, prompt: str) -> str:
        """Send one prompt and return the response text."""
        pass


class NotificationService(ABC):
    """Interface for chat delivery."""
    
    @abstractmethod
    async def post_message(self, blocks: list[dict[str, Any]], text: str) -> None:
        """Deliver one message built from formatted blocks."""
        pass
