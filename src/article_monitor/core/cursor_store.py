"""Durable per-source cursor state stored as one JSON document."""

import json
import logging
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from article_monitor.core.entities import CursorDocument, SourceIdentity, SourceState
from article_monitor.core.errors import StateCorrupt

logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 timestamp, accepting a trailing ``Z`` for UTC."""
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


class CursorStore:
    """Load and save the cursor document.
    
    A missing file means first run. Saves go through a temporary file in
    the same directory followed by ``os.replace``, so readers only ever
    see the previous or the new document.
    """
    
    def __init__(self, state_file: Path, default_branch: str = "main") -> None:
        self.state_file = state_file
        self.default_branch = default_branch
    
    def load(self) -> Optional[CursorDocument]:
        """Load the document, or ``None`` if the file does not exist."""
        try:
            raw = self.state_file.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No cursor state at %s, treating as first run", self.state_file)
            return None
        except OSError as e:
            raise StateCorrupt(f"Cannot read cursor state {self.state_file}: {e}") from e
        
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise StateCorrupt(f"Cursor state {self.state_file} is not valid JSON: {e}") from e
        
        doc = self._decode(data)
        logger.debug("Loaded cursor state for %d source(s)", len(doc.sources))
        return doc
    
    def save(self, doc: CursorDocument) -> None:
        """Replace the stored document with ``doc``."""
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(self._encode(doc), indent=2, ensure_ascii=False)
        
        fd, tmp_path = tempfile.mkstemp(
            dir=self.state_file.parent, prefix=f".{self.state_file.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.state_file)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        
        logger.debug("Saved cursor state for %d source(s)", len(doc.sources))
    
    def _encode(self, doc: CursorDocument) -> dict[str, Any]:
        return {
            "sources": {
                key: {
                    "owner": state.source.owner,
                    "repo": state.source.name,
                    "branch": state.source.branch,
                    "lastProcessedRevision": state.last_processed_revision,
                    "lastCheckedAt": state.last_checked_at.isoformat(),
                    "totalArticlesProcessed": state.total_items_processed,
                }
                for key, state in doc.sources.items()
            }
        }
    
    def _decode(self, data: Any) -> CursorDocument:
        if not isinstance(data, dict) or not isinstance(data.get("sources"), dict):
            raise StateCorrupt(f"Cursor state {self.state_file} has no 'sources' mapping")
        
        doc = CursorDocument()
        for key, entry in data["sources"].items():
            try:
                source = SourceIdentity(
                    owner=str(entry["owner"]),
                    name=str(entry["repo"]),
                    branch=str(entry.get("branch") or self.default_branch),
                )
                revision = entry["lastProcessedRevision"]
                if not isinstance(revision, str):
                    raise TypeError("lastProcessedRevision must be a string")
                total = entry["totalArticlesProcessed"]
                if isinstance(total, bool) or not isinstance(total, int):
                    raise TypeError("totalArticlesProcessed must be an integer")
                state = SourceState(
                    source=source,
                    last_processed_revision=revision,
                    last_checked_at=parse_timestamp(entry["lastCheckedAt"]),
                    total_items_processed=total,
                )
            except (KeyError, TypeError, ValueError, AttributeError) as e:
                raise StateCorrupt(f"Malformed cursor entry {key!r}: {e}") from e
            doc.sources[key] = state
        
        return doc
