# FILE: anchor/chat/router.py
"""
FastAPI route for chat turns.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from anchor.db import get_db
from anchor.llm.generation import GenerationError

from .schemas import ChatRequest, ChatResponse
from .service import ChatService, get_chat_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post("/ai-chat", response_model=ChatResponse)
async def ai_chat(
    req: ChatRequest,
    db: Session = Depends(get_db),
    chat: ChatService = Depends(get_chat_service),
):
    """Answer one chat turn, grounded in the knowledge base when it is relevant."""
    if not req.message and not req.file_content:
        raise HTTPException(status_code=400, detail="Message or file content is required")

    try:
        return await chat.respond(
            db,
            req.message,
            history=req.history,
            file_content=req.file_content,
            file_name=req.file_name,
        )
    except GenerationError as e:
        logger.error("[chat] Generation failed: %s", e)
        raise HTTPException(status_code=502, detail="Failed to get AI response")
