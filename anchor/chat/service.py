# FILE: anchor/chat/service.py
"""
Chat turn handler.

One turn:
1. Build the effective message (attached file text is truncated and wrapped
   around the user's question)
2. Route: knowledge_base or general_ai (never raises)
3. Pick the matching system prompt, add grounding context when routed to
   the knowledge base
4. Generate with the last CHAT_HISTORY_WINDOW history turns

Chat history persistence belongs to the client; history arrives with the
request.
"""

import logging
from typing import Iterable, List, Optional

from sqlalchemy.orm import Session

from anchor import config
from anchor.knowledge import service as knowledge_service
from anchor.llm.generation import GenerationService, get_generation_service
from anchor.retrieval.routing import RetrievalRouter, get_retrieval_router

from .prompts import GENERAL_SYSTEM_PROMPT, KNOWLEDGE_SYSTEM_PROMPT
from .schemas import ChatResponse, ChatTurn

logger = logging.getLogger(__name__)

TRUNCATION_NOTICE = "\n\n[Document truncated due to length...]"


def build_effective_message(
    message: str,
    file_content: Optional[str] = None,
    file_name: Optional[str] = None,
) -> str:
    """Fold an attached document into the message sent to the model."""
    message = message or ""
    if not file_content:
        return message

    if len(file_content) > config.MAX_FILE_CONTENT_CHARS:
        content = file_content[:config.MAX_FILE_CONTENT_CHARS] + TRUNCATION_NOTICE
    else:
        content = file_content

    named = f' named "{file_name}"' if file_name else ""
    if message:
        return (
            f"The user has attached a document{named} with the following content:\n\n"
            f"---\n{content}\n---\n\n"
            f"User's question: {message}"
        )
    return (
        f"The user has attached a document{named} for analysis. "
        f"Please review and provide a helpful summary or insights about this document:\n\n"
        f"---\n{content}\n---"
    )


def recent_history(history: Iterable[ChatTurn]) -> List[dict]:
    turns = list(history)[-config.CHAT_HISTORY_WINDOW:]
    return [{"role": turn.role, "content": turn.content} for turn in turns]


class ChatService:
    def __init__(
        self,
        router: Optional[RetrievalRouter] = None,
        generation: Optional[GenerationService] = None,
    ):
        self.router = router or get_retrieval_router()
        self.generation = generation or get_generation_service()

    async def respond(
        self,
        db: Session,
        message: str,
        history: Iterable[ChatTurn] = (),
        file_content: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> ChatResponse:
        """
        Answer one user turn.

        Raises GenerationError when no generation provider could answer.
        Retrieval failures never raise; they route to general_ai.
        """
        effective_message = build_effective_message(message, file_content, file_name)
        if file_content:
            logger.info("[chat] Processing attached file: %s (%d chars)", file_name or "unnamed", len(file_content))

        entries = knowledge_service.list_entries(db)
        # An empty query makes the router fall back to its file-only placeholder
        decision = await self.router.route(message, entries)

        if decision.used_expert_knowledge:
            system_prompt = KNOWLEDGE_SYSTEM_PROMPT + decision.grounding_context
        else:
            system_prompt = GENERAL_SYSTEM_PROMPT

        reply = await self.generation.generate(system_prompt, recent_history(history), effective_message)

        return ChatResponse(
            response=reply,
            used_expert_knowledge=decision.used_expert_knowledge,
            response_source=decision.response_source,
            sources=decision.sources,
        )


# Singleton instance
_chat_service: Optional[ChatService] = None


def get_chat_service() -> ChatService:
    """Get singleton ChatService (also a FastAPI dependency)."""
    global _chat_service
    if _chat_service is None:
        _chat_service = ChatService()
    return _chat_service
