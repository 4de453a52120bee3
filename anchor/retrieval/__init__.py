"""
Retrieval routing for chat turns, plus the startup initializer that gets
the knowledge base ready for it.
"""

from .routing import (
    CONFIDENCE_THRESHOLD,
    SEARCH_LIMIT,
    KNOWLEDGE_BASE,
    GENERAL_AI,
    RetrievalDecision,
    RetrievalRouter,
    dedupe_sources,
    format_knowledge_for_prompt,
    get_retrieval_router,
)

from .lifecycle import KnowledgeBaseInitializer, get_initializer


__all__ = [
    "CONFIDENCE_THRESHOLD",
    "SEARCH_LIMIT",
    "KNOWLEDGE_BASE",
    "GENERAL_AI",
    "RetrievalDecision",
    "RetrievalRouter",
    "dedupe_sources",
    "format_knowledge_for_prompt",
    "get_retrieval_router",
    "KnowledgeBaseInitializer",
    "get_initializer",
]
