"""
Embedding module for Anchor.
Provides embedding generation, vector similarity search and maintenance of
the cached embedding on each knowledge entry.
"""

from .similarity import (
    MIN_SIMILARITY,
    DimensionMismatchError,
    cosine_similarity,
    serialize_embedding,
    parse_embedding,
    collect_candidates,
    search,
)

from .provider import (
    EmbeddingProvider,
    EmbeddingProviderError,
    OpenAIEmbeddingProvider,
    GoogleEmbeddingProvider,
    get_embedding_provider,
)

from .service import (
    EmbeddingMaintenanceService,
    build_embedding_text,
    embedding_fields,
    get_maintenance_service,
)


__all__ = [
    # Similarity
    "MIN_SIMILARITY",
    "DimensionMismatchError",
    "cosine_similarity",
    "serialize_embedding",
    "parse_embedding",
    "collect_candidates",
    "search",
    # Providers
    "EmbeddingProvider",
    "EmbeddingProviderError",
    "OpenAIEmbeddingProvider",
    "GoogleEmbeddingProvider",
    "get_embedding_provider",
    # Maintenance
    "EmbeddingMaintenanceService",
    "build_embedding_text",
    "embedding_fields",
    "get_maintenance_service",
]
