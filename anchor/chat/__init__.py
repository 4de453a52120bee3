"""
Chat turn handling: retrieval routing, prompt selection and generation.
"""

from .schemas import ChatTurn, ChatRequest, ChatResponse
from .service import ChatService, build_effective_message, get_chat_service

__all__ = [
    "ChatTurn",
    "ChatRequest",
    "ChatResponse",
    "ChatService",
    "build_effective_message",
    "get_chat_service",
]
