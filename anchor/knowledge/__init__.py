"""
Knowledge store for Anchor: curated, expert-attributed entries, their
seed corpus and the keyword relevance scorer.
"""

from .models import KnowledgeEntry

from .schemas import (
    KnowledgeEntryCreate,
    KnowledgeEntryUpdate,
    KnowledgeEntryOut,
    SourceCitation,
    KeywordSearchRequest,
    KeywordSearchResponse,
    EmbeddingStatus,
    ReindexResponse,
)

from .scorer import (
    CategoryBoostRule,
    load_boost_rules,
    score_entry,
    score_entries,
    score_entries_with_scores,
)

from .seed import seed_knowledge_base


__all__ = [
    # Model
    "KnowledgeEntry",
    # Schemas
    "KnowledgeEntryCreate",
    "KnowledgeEntryUpdate",
    "KnowledgeEntryOut",
    "SourceCitation",
    "KeywordSearchRequest",
    "KeywordSearchResponse",
    "EmbeddingStatus",
    "ReindexResponse",
    # Scorer
    "CategoryBoostRule",
    "load_boost_rules",
    "score_entry",
    "score_entries",
    "score_entries_with_scores",
    # Seeding
    "seed_knowledge_base",
]
