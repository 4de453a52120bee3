# FILE: anchor/retrieval/lifecycle.py
"""
One-shot knowledge base initialization, run from the startup hook before
serving traffic: seed the starter corpus if the store is empty, then embed
whatever lacks an embedding.

Each step sets its flag only on success, so a failed step can be retried
by calling initialize() again (the admin reindex endpoint does the same
embedding pass on demand).
"""

import logging
from typing import Dict, Optional

from anchor.db import SessionFactory, session_scope
from anchor.embeddings.service import EmbeddingMaintenanceService, get_maintenance_service
from anchor.knowledge.seed import seed_knowledge_base

logger = logging.getLogger(__name__)


class KnowledgeBaseInitializer:
    def __init__(
        self,
        maintenance: Optional[EmbeddingMaintenanceService] = None,
        session_factory: Optional[SessionFactory] = None,
    ):
        self.maintenance = maintenance or get_maintenance_service()
        self.session_factory = session_factory
        self.seeded = False
        self.embedded = False

    async def initialize(self, embed: bool = True) -> Dict[str, int]:
        """
        Seed, then ensure embeddings (unless embed=False). Steps already
        done are skipped.

        Returns {"seeded": n, "embedded": n, "failed": n}.
        """
        result = {"seeded": 0, "embedded": 0, "failed": 0}

        if not self.seeded:
            try:
                with session_scope(self.session_factory) as db:
                    result["seeded"] = seed_knowledge_base(db)
                self.seeded = True
            except Exception as e:
                logger.error("[startup] Knowledge base seeding failed: %s", e, exc_info=True)
                return result

        if embed and not self.embedded:
            try:
                counts = await self.maintenance.ensure_all_embeddings()
            except Exception as e:
                logger.error("[startup] Embedding pass failed: %s", e, exc_info=True)
                return result
            result["embedded"] = counts["embedded"]
            result["failed"] = counts["failed"]
            # Per-entry failures leave the flag unset so a later call retries them
            if counts["failed"] == 0:
                self.embedded = True

        return result

    @property
    def ready(self) -> bool:
        return self.seeded and self.embedded


# Singleton instance
_initializer: Optional[KnowledgeBaseInitializer] = None


def get_initializer() -> KnowledgeBaseInitializer:
    global _initializer
    if _initializer is None:
        _initializer = KnowledgeBaseInitializer()
    return _initializer
