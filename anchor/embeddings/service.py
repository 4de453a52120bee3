# FILE: anchor/embeddings/service.py
"""
Embedding maintenance: keeps every knowledge entry's cached embedding present
and current. Sole writer of KnowledgeEntry.embedding.

- ensure_all_embeddings(): batch pass over entries with no usable embedding.
  Entries are processed independently; one failure is logged and the pass
  moves on. Entries that already have an embedding are skipped, so a second
  pass right after a complete one makes zero provider calls.
- generate_and_store_embedding(): single-entry primitive.
- invalidate_embedding() + schedule_refresh(): edit path. The writer clears
  the stale vector synchronously, then dispatches the recompute as a
  background task it does not await. Until that task finishes the entry is
  absent from semantic search (eventual consistency window).

Each DB touch opens its own short session; nothing here holds a session
across an await on the provider.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional, Set

from sqlalchemy.orm import Session

from anchor.db import SessionFactory, session_scope
from anchor.knowledge import service as knowledge_service
from anchor.embeddings.provider import EmbeddingProvider, get_embedding_provider
from anchor.embeddings.similarity import parse_embedding, serialize_embedding

logger = logging.getLogger(__name__)


# ============ EMBEDDING TEXT ============

def embedding_fields(entry: Any) -> Dict[str, Any]:
    """Snapshot the fields that feed the embedding text."""
    return {
        "title": entry.title,
        "category": entry.category,
        "expert": entry.expert,
        "keywords": list(entry.keywords or []),
        "content": entry.content,
    }


def build_embedding_text(fields: Mapping[str, Any]) -> str:
    """title, category, expert, "Keywords: a, b", content; newline separated."""
    keywords = ", ".join(fields.get("keywords") or [])
    return (
        f"{fields['title']}\n"
        f"{fields['category']}\n"
        f"{fields['expert']}\n"
        f"Keywords: {keywords}\n"
        f"{fields['content']}"
    )


# ============ SERVICE ============

class EmbeddingMaintenanceService:
    """Computes and persists knowledge entry embeddings."""

    def __init__(
        self,
        provider: Optional[EmbeddingProvider] = None,
        session_factory: Optional[SessionFactory] = None,
    ):
        self._provider = provider
        self.session_factory = session_factory
        self._pending: Set[asyncio.Task] = set()

    @property
    def provider(self) -> EmbeddingProvider:
        if self._provider is None:
            self._provider = get_embedding_provider()
        return self._provider

    async def generate_and_store_embedding(self, entry_id: int, fields: Mapping[str, Any]) -> List[float]:
        """
        Embed one entry's fields and persist the vector.

        Raises whatever the provider raises; the caller decides whether a
        failure is fatal. The write is skipped when the entry no longer has
        these fields (a newer refresh owns it).
        """
        vector = await self.provider.embed(build_embedding_text(fields))
        with session_scope(self.session_factory) as db:
            entry = knowledge_service.get_entry(db, entry_id)
            if not entry:
                logger.info("[embeddings] Entry %s was deleted before its embedding was stored", entry_id)
                return vector
            # Edited while the provider call was in flight: never store superseded fields
            if embedding_fields(entry) != dict(fields):
                logger.info("[embeddings] Entry %s changed during embedding, discarding stale vector", entry_id)
                return vector
            knowledge_service.set_embedding(db, entry_id, serialize_embedding(vector))
        return vector

    async def ensure_all_embeddings(self) -> Dict[str, int]:
        """
        Embed every entry lacking a usable embedding.

        Returns counts: embedded, failed, skipped (already had one).
        """
        with session_scope(self.session_factory) as db:
            entries = knowledge_service.list_entries(db)
            todo = [
                (entry.id, entry.title, embedding_fields(entry))
                for entry in entries
                if parse_embedding(entry.embedding) is None
            ]
            total = len(entries)

        counts = {"embedded": 0, "failed": 0, "skipped": total - len(todo)}
        if not todo:
            return counts

        logger.info("[embeddings] Generating embeddings for %d entries...", len(todo))
        for entry_id, title, fields in todo:
            try:
                await self.generate_and_store_embedding(entry_id, fields)
                counts["embedded"] += 1
                logger.info("[embeddings] Generated embedding for: %s", title)
            except Exception as e:
                counts["failed"] += 1
                logger.error("[embeddings] Failed to generate embedding for %s: %s", title, e)

        logger.info(
            "[embeddings] Embedding generation complete (embedded=%d failed=%d)",
            counts["embedded"], counts["failed"],
        )
        return counts

    def invalidate_embedding(self, db: Session, entry_id: int) -> bool:
        """Drop a stale embedding so the entry leaves semantic search until recomputed."""
        return knowledge_service.set_embedding(db, entry_id, None)

    async def refresh_entry(self, entry_id: int) -> bool:
        """
        Recompute one entry's embedding from its current fields.

        Never raises; returns False when the entry is gone or embedding failed.
        """
        with session_scope(self.session_factory) as db:
            entry = knowledge_service.get_entry(db, entry_id)
            if not entry:
                return False
            fields = embedding_fields(entry)

        try:
            await self.generate_and_store_embedding(entry_id, fields)
            return True
        except Exception as e:
            logger.error("[embeddings] Failed to generate embedding for entry %s: %s", entry_id, e)
            return False

    def schedule_refresh(self, entry_id: int) -> asyncio.Task:
        """
        Fire-and-forget refresh_entry(). Must be called from a running loop.

        The task is tracked until it finishes so it is not garbage collected
        mid-flight and so wait_pending() can drain it.
        """
        task = asyncio.create_task(self.refresh_entry(entry_id))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def wait_pending(self) -> None:
        """Wait for every scheduled refresh to finish (shutdown, tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)


# Singleton instance
_maintenance_service: Optional[EmbeddingMaintenanceService] = None


def get_maintenance_service() -> EmbeddingMaintenanceService:
    """Get singleton EmbeddingMaintenanceService (also a FastAPI dependency)."""
    global _maintenance_service
    if _maintenance_service is None:
        _maintenance_service = EmbeddingMaintenanceService()
    return _maintenance_service
