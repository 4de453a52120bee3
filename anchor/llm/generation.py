# FILE: anchor/llm/generation.py
"""
Text generation adapter with provider failover.

generate(system_prompt, history, message) -> reply text

Providers are tried in ANCHOR_GENERATION_PROVIDERS order (default: Gemini,
then OpenAI). The first provider that returns wins; a provider that raises
is logged and the next one is tried. An empty reply is replaced by
FALLBACK_REPLY. When every provider fails, GenerationError is raised and
the HTTP layer turns it into a 502.

history is a list of {"role": "user" | "assistant", "content": str} dicts,
oldest first, not including the current message.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional, Protocol, Sequence

from anchor import config

logger = logging.getLogger(__name__)

FALLBACK_REPLY = "I apologize, but I was unable to generate a response. Please try again."

ChatHistory = List[Dict[str, str]]


class GenerationError(RuntimeError):
    """Every configured generation provider failed."""


class GenerationProvider(Protocol):
    name: str

    async def generate(self, system_prompt: str, history: ChatHistory, message: str) -> str:
        ...


# =============================================================================
# PROVIDERS
# =============================================================================


class GeminiChatProvider:
    name = "google"

    def __init__(self, model: Optional[str] = None, api_key: Optional[str] = None):
        self.model = model or config.GEMINI_CHAT_MODEL
        self._api_key = api_key

    async def generate(self, system_prompt: str, history: ChatHistory, message: str) -> str:
        import google.generativeai as genai

        api_key = self._api_key or os.getenv("GOOGLE_API_KEY")
        if not api_key:
            raise GenerationError("GOOGLE_API_KEY not set")
        genai.configure(api_key=api_key)

        gemini_model = genai.GenerativeModel(
            model_name=self.model,
            system_instruction=system_prompt,
        )

        gemini_history = []
        for msg in history:
            role = "user" if msg["role"] == "user" else "model"
            gemini_history.append({"role": role, "parts": [msg["content"]]})

        chat = gemini_model.start_chat(history=gemini_history)
        response = await chat.send_message_async(message)
        return getattr(response, "text", "") or ""


class OpenAIChatProvider:
    name = "openai"

    def __init__(self, model: Optional[str] = None, api_key: Optional[str] = None):
        self.model = model or config.OPENAI_CHAT_MODEL
        self._api_key = api_key
        self._client = None

    def _get_client(self):
        if self._client is None:
            from openai import AsyncOpenAI

            api_key = self._api_key or os.getenv("OPENAI_API_KEY")
            if not api_key:
                raise GenerationError("OPENAI_API_KEY not set")
            self._client = AsyncOpenAI(api_key=api_key)
        return self._client

    async def generate(self, system_prompt: str, history: ChatHistory, message: str) -> str:
        client = self._get_client()

        messages = [{"role": "system", "content": system_prompt}]
        for msg in history:
            role = "user" if msg["role"] == "user" else "assistant"
            messages.append({"role": role, "content": msg["content"]})
        messages.append({"role": "user", "content": message})

        response = await client.chat.completions.create(model=self.model, messages=messages)
        return response.choices[0].message.content or ""


PROVIDERS = {
    "google": GeminiChatProvider,
    "openai": OpenAIChatProvider,
}


# =============================================================================
# SERVICE
# =============================================================================


class GenerationService:
    def __init__(self, providers: Optional[Sequence[GenerationProvider]] = None):
        if providers is None:
            providers = []
            for name in config.GENERATION_PROVIDERS:
                provider_cls = PROVIDERS.get(name)
                if provider_cls is None:
                    logger.warning("[generation] Unknown generation provider %r ignored", name)
                    continue
                providers.append(provider_cls())
        self.providers = list(providers)

    async def generate(self, system_prompt: str, history: ChatHistory, message: str) -> str:
        if not self.providers:
            raise GenerationError("No generation providers configured")

        last_error: Optional[Exception] = None
        for provider in self.providers:
            try:
                reply = await provider.generate(system_prompt, history, message)
            except Exception as e:
                last_error = e
                logger.warning("[generation] %s failed, trying next provider: %s", provider.name, e)
                continue
            logger.info("[generation] Reply generated by %s", provider.name)
            return reply or FALLBACK_REPLY

        raise GenerationError(f"All generation providers failed: {last_error}") from last_error


# Singleton instance
_generation_service: Optional[GenerationService] = None


def get_generation_service() -> GenerationService:
    global _generation_service
    if _generation_service is None:
        _generation_service = GenerationService()
    return _generation_service
