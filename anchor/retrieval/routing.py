# FILE: anchor/retrieval/routing.py
"""
Retrieval routing: knowledge_base vs general_ai, per chat turn.

Flow for one user message:
1. Embed the query (a placeholder query stands in for file-only turns)
2. Rank every entry that has a cached embedding, top SEARCH_LIMIT, floor
   MIN_SIMILARITY (applied inside similarity.search)
3. highest_similarity = top score, or 0.0 without results
4. used_expert_knowledge = highest_similarity >= CONFIDENCE_THRESHOLD (inclusive)
5. knowledge_base: keep the results that clear CONFIDENCE_THRESHOLD
   general_ai: no entries

Any failure in the embed/search pipeline (provider outage, dimension
mismatch, bad data) is logged and routed to general_ai for that turn.
No retry. Retrieval problems are never surfaced to the end user.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from anchor import config
from anchor.embeddings.provider import EmbeddingProvider, get_embedding_provider
from anchor.embeddings.similarity import collect_candidates, search
from anchor.knowledge.schemas import SourceCitation

logger = logging.getLogger(__name__)

# Minimum top similarity to answer from the knowledge base. Not the search
# floor, see similarity.MIN_SIMILARITY (0.3).
CONFIDENCE_THRESHOLD = 0.35

SEARCH_LIMIT = 3

KNOWLEDGE_BASE = "knowledge_base"
GENERAL_AI = "general_ai"


@dataclass
class RetrievalDecision:
    """Outcome of routing one chat turn. Transient, never persisted."""
    used_expert_knowledge: bool
    response_source: str
    selected_entries: List[Any] = field(default_factory=list)
    highest_similarity: float = 0.0
    matches: List[Tuple[Any, float]] = field(default_factory=list)

    @classmethod
    def general(cls, highest_similarity: float = 0.0, matches=None) -> "RetrievalDecision":
        return cls(
            used_expert_knowledge=False,
            response_source=GENERAL_AI,
            selected_entries=[],
            highest_similarity=highest_similarity,
            matches=list(matches or []),
        )

    @property
    def sources(self) -> List[SourceCitation]:
        return dedupe_sources(self.selected_entries)

    @property
    def grounding_context(self) -> str:
        return format_knowledge_for_prompt(self.selected_entries)


def dedupe_sources(entries: Iterable[Any]) -> List[SourceCitation]:
    """One citation per (expert, source) pair, first-seen order."""
    seen = set()
    citations = []
    for entry in entries:
        key = (entry.expert, entry.source)
        if key in seen:
            continue
        seen.add(key)
        citations.append(SourceCitation(
            expert=entry.expert,
            source=entry.source,
            source_url=getattr(entry, "source_url", None) or None,
        ))
    return citations


def format_knowledge_for_prompt(entries: Sequence[Any]) -> str:
    """Grounding block appended to the system prompt; empty string when no entries."""
    if not entries:
        return ""

    parts = [
        "\n\n=== EXPERT KNOWLEDGE BASE ===\n",
        "Use the following verified information from recognized experts to inform your response:\n\n",
    ]
    for entry in entries:
        parts.append(f"--- {entry.title} ---\n")
        parts.append(f"Expert: {entry.expert}\n")
        parts.append(f"Source: {entry.source}\n")
        parts.append(f"{entry.content}\n\n")
    parts.append("=== END EXPERT KNOWLEDGE ===\n")
    parts.append(
        "Prioritize information from the Expert Knowledge Base above. "
        "Cite the expert and source when using this information.\n"
    )
    return "".join(parts)


class RetrievalRouter:
    """Decides, per user question, whether to ground the answer in the knowledge base."""

    def __init__(self, provider: Optional[EmbeddingProvider] = None):
        self._provider = provider

    @property
    def provider(self) -> EmbeddingProvider:
        if self._provider is None:
            self._provider = get_embedding_provider()
        return self._provider

    async def route(self, user_query: Optional[str], available_entries: Iterable[Any]) -> RetrievalDecision:
        query = user_query if user_query and user_query.strip() else config.FILE_ONLY_SEARCH_QUERY

        try:
            entries = list(available_entries)
            candidates = collect_candidates(entries)
            logger.info(
                "[retrieval] Knowledge base has %d entries, %d with embeddings",
                len(entries), len(candidates),
            )
            if not candidates:
                return RetrievalDecision.general()

            query_vector = await self.provider.embed(query)
            results = search(query_vector, candidates, limit=SEARCH_LIMIT)
        except Exception as e:
            logger.error("[retrieval] Knowledge search error (continuing without): %s", e, exc_info=True)
            return RetrievalDecision.general()

        highest_similarity = results[0][1] if results else 0.0
        used_expert_knowledge = highest_similarity >= CONFIDENCE_THRESHOLD

        if results:
            logger.info(
                "[retrieval] Top matches for %r: %s",
                query[:50],
                ", ".join(f"{entry.title}: {sim:.3f}" for entry, sim in results),
            )
        logger.info(
            "[retrieval] Decision: similarity %.3f vs threshold %.2f => %s",
            highest_similarity, CONFIDENCE_THRESHOLD,
            KNOWLEDGE_BASE if used_expert_knowledge else GENERAL_AI,
        )

        if not used_expert_knowledge:
            return RetrievalDecision.general(highest_similarity, results)

        return RetrievalDecision(
            used_expert_knowledge=True,
            response_source=KNOWLEDGE_BASE,
            selected_entries=[entry for entry, sim in results if sim >= CONFIDENCE_THRESHOLD],
            highest_similarity=highest_similarity,
            matches=results,
        )


# Singleton instance
_router: Optional[RetrievalRouter] = None


def get_retrieval_router() -> RetrievalRouter:
    global _router
    if _router is None:
        _router = RetrievalRouter()
    return _router
