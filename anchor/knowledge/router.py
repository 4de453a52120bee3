# FILE: anchor/knowledge/router.py
"""
FastAPI routes for curating the knowledge base (admin only).

Writes that touch an embedding input schedule a background embedding
refresh and return immediately; the response reflects has_embedding at
write time, not after the refresh.
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from anchor.auth import require_admin
from anchor.db import get_db
from anchor.embeddings.service import EmbeddingMaintenanceService, get_maintenance_service

from . import scorer, service
from .schemas import (
    EmbeddingStatus,
    KeywordSearchRequest,
    KeywordSearchResponse,
    KnowledgeEntryCreate,
    KnowledgeEntryOut,
    KnowledgeEntryUpdate,
    ReindexResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin/knowledge",
    tags=["knowledge"],
    dependencies=[Depends(require_admin)],
)


@router.get("", response_model=List[KnowledgeEntryOut])
def list_knowledge_entries(db: Session = Depends(get_db)):
    return service.list_entries(db)


@router.post("", response_model=KnowledgeEntryOut, status_code=status.HTTP_201_CREATED)
async def create_knowledge_entry(
    data: KnowledgeEntryCreate,
    db: Session = Depends(get_db),
    maintenance: EmbeddingMaintenanceService = Depends(get_maintenance_service),
):
    entry = service.create_entry(db, data)
    logger.info("[knowledge] Created entry %s: %s", entry.id, entry.title)
    maintenance.schedule_refresh(entry.id)
    return entry


@router.post("/verify")
def verify_admin():
    """Lets the admin UI check the password before it shows the editor."""
    return {"ok": True}


@router.get("/status", response_model=EmbeddingStatus)
def get_embedding_status(db: Session = Depends(get_db)):
    """Embedding coverage across the knowledge base."""
    embedded, total = service.embedding_stats(db)
    return EmbeddingStatus(total=total, embedded=embedded, missing=total - embedded)


@router.post("/search", response_model=KeywordSearchResponse)
def keyword_search(req: KeywordSearchRequest, db: Session = Depends(get_db)):
    """Keyword relevance search. Works without any embedding provider."""
    entries = service.list_entries(db)
    results = scorer.score_entries(req.query, entries, limit=req.limit)
    return KeywordSearchResponse(
        query=req.query,
        results=[KnowledgeEntryOut.model_validate(entry) for entry in results],
    )


@router.post("/reindex", response_model=ReindexResponse)
async def reindex_knowledge(
    maintenance: EmbeddingMaintenanceService = Depends(get_maintenance_service),
):
    """Embed every entry that has no usable embedding. Existing ones are kept."""
    counts = await maintenance.ensure_all_embeddings()
    return ReindexResponse(**counts)


@router.get("/{entry_id}", response_model=KnowledgeEntryOut)
def get_knowledge_entry(entry_id: int, db: Session = Depends(get_db)):
    entry = service.get_entry(db, entry_id)
    if not entry:
        raise HTTPException(status_code=404, detail="Knowledge entry not found")
    return entry


@router.patch("/{entry_id}", response_model=KnowledgeEntryOut)
async def update_knowledge_entry(
    entry_id: int,
    data: KnowledgeEntryUpdate,
    db: Session = Depends(get_db),
    maintenance: EmbeddingMaintenanceService = Depends(get_maintenance_service),
):
    entry, inputs_changed = service.update_entry(db, entry_id, data.model_dump(exclude_unset=True))
    if not entry:
        raise HTTPException(status_code=404, detail="Knowledge entry not found")

    if inputs_changed:
        maintenance.invalidate_embedding(db, entry_id)
        maintenance.schedule_refresh(entry_id)
        logger.info("[knowledge] Entry %s edited, embedding refresh scheduled", entry_id)
    return entry


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_knowledge_entry(entry_id: int, db: Session = Depends(get_db)):
    if not service.delete_entry(db, entry_id):
        raise HTTPException(status_code=404, detail="Knowledge entry not found")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
