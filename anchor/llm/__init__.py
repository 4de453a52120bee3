"""
LLM text generation for chat replies.
"""

from .generation import (
    FALLBACK_REPLY,
    GenerationError,
    GenerationService,
    GeminiChatProvider,
    OpenAIChatProvider,
    get_generation_service,
)

__all__ = [
    "FALLBACK_REPLY",
    "GenerationError",
    "GenerationService",
    "GeminiChatProvider",
    "OpenAIChatProvider",
    "get_generation_service",
]
