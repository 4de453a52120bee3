# FILE: anchor/embeddings/provider.py
"""
Embedding providers: text in, fixed-length float vector out.

Supported (if keys + SDKs installed):
- OpenAI (AsyncOpenAI, text-embedding-3-small, 1536 dims)
- Google Gemini (google.generativeai, text-embedding-004, 768 dims)

Every failure (missing key, network, quota, SDK error, empty input) is
raised as EmbeddingProviderError; callers decide how to degrade.

All entries in one knowledge base must be embedded by the same provider and
model. Switching ANCHOR_EMBEDDING_PROVIDER requires clearing the stored
embeddings, otherwise searches fail with a dimension mismatch.
"""

from __future__ import annotations

import asyncio
import logging
import os
from typing import List, Optional, Protocol

from anchor import config

logger = logging.getLogger(__name__)


class EmbeddingProviderError(RuntimeError):
    """Embedding could not be produced."""


class EmbeddingProvider(Protocol):
    name: str

    async def embed(self, text: str) -> List[float]:
        ...


def _prepare_text(text: str) -> str:
    if not text or not text.strip():
        raise EmbeddingProviderError("Cannot embed empty text")
    if len(text) > config.MAX_EMBEDDING_CHARS:
        logger.warning(
            "[embeddings] Text truncated from %d to %d chars for embedding",
            len(text), config.MAX_EMBEDDING_CHARS,
        )
        text = text[:config.MAX_EMBEDDING_CHARS]
    return text


class OpenAIEmbeddingProvider:
    """OpenAI embeddings via the async client."""

    name = "openai"

    def __init__(self, model: Optional[str] = None, api_key: Optional[str] = None):
        self.model = model or config.OPENAI_EMBEDDING_MODEL
        self._api_key = api_key
        self._client = None

    def _get_client(self):
        if self._client is None:
            from openai import AsyncOpenAI

            api_key = self._api_key or os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise EmbeddingProviderError("OPENAI_API_KEY is not set; cannot generate embeddings.")
            self._client = AsyncOpenAI(api_key=api_key)
        return self._client

    async def embed(self, text: str) -> List[float]:
        text = _prepare_text(text)
        try:
            client = self._get_client()
            response = await client.embeddings.create(model=self.model, input=text)
        except EmbeddingProviderError:
            raise
        except Exception as exc:
            raise EmbeddingProviderError(f"OpenAI embedding failed: {exc}") from exc
        return list(response.data[0].embedding)


class GoogleEmbeddingProvider:
    """Gemini embeddings. The SDK call blocks, so it runs in a worker thread."""

    name = "google"

    def __init__(self, model: Optional[str] = None, api_key: Optional[str] = None):
        self.model = model or config.GOOGLE_EMBEDDING_MODEL
        self._api_key = api_key
        self._configured = False

    def _configure(self):
        if self._configured:
            return
        import google.generativeai as genai

        api_key = self._api_key or os.getenv("GOOGLE_API_KEY")
        if not api_key:
            raise EmbeddingProviderError("GOOGLE_API_KEY is not set; cannot generate embeddings.")
        genai.configure(api_key=api_key)
        self._configured = True

    def _embed_sync(self, text: str) -> List[float]:
        import google.generativeai as genai

        result = genai.embed_content(model=self.model, content=text)
        return list(result["embedding"])

    async def embed(self, text: str) -> List[float]:
        text = _prepare_text(text)
        try:
            self._configure()
            return await asyncio.to_thread(self._embed_sync, text)
        except EmbeddingProviderError:
            raise
        except Exception as exc:
            raise EmbeddingProviderError(f"Gemini embedding failed: {exc}") from exc


PROVIDERS = {
    "openai": OpenAIEmbeddingProvider,
    "google": GoogleEmbeddingProvider,
}


# Singleton instance
_provider: Optional[EmbeddingProvider] = None


def get_embedding_provider() -> EmbeddingProvider:
    """Get the process-wide provider selected by ANCHOR_EMBEDDING_PROVIDER."""
    global _provider
    if _provider is None:
        provider_cls = PROVIDERS.get(config.EMBEDDING_PROVIDER)
        if provider_cls is None:
            raise ValueError(
                f"Unknown embedding provider: {config.EMBEDDING_PROVIDER}. Valid: {list(PROVIDERS)}"
            )
        _provider = provider_cls()
    return _provider
