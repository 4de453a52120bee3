# FILE: anchor/knowledge/service.py
"""
Knowledge store service layer.

Durable mapping from entry id to entry fields. Plain functions over a
SQLAlchemy Session, like the rest of the service layer.

The embedding column is derived data: only anchor.embeddings.service writes
it (through set_embedding). update_entry() reports whether an edit touched
any embedding input so the caller can invalidate and refresh it.
"""
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from anchor.knowledge import models, schemas

# Fields concatenated into the embedding text; editing any of them stales the vector
EMBEDDING_INPUT_FIELDS = ("title", "content", "keywords", "expert", "category")

EDITABLE_FIELDS = frozenset({
    "expert", "source", "source_url", "category", "title", "content", "keywords",
})


# ============== READ ==============

def list_entries(db: Session) -> List[models.KnowledgeEntry]:
    return db.query(models.KnowledgeEntry).order_by(models.KnowledgeEntry.id.desc()).all()


def get_entry(db: Session, entry_id: int) -> Optional[models.KnowledgeEntry]:
    return db.query(models.KnowledgeEntry).filter(models.KnowledgeEntry.id == entry_id).first()


def count_entries(db: Session) -> int:
    return db.query(func.count(models.KnowledgeEntry.id)).scalar() or 0


def embedding_stats(db: Session) -> Tuple[int, int]:
    """
    Check how many entries have a usable cached embedding.

    Malformed stored vectors count as missing, the same way the embedding
    pass and search treat them.

    Returns: (embedded_count, total_count)
    """
    from anchor.embeddings.similarity import parse_embedding

    total = count_entries(db)
    stored = db.query(models.KnowledgeEntry.embedding).filter(
        models.KnowledgeEntry.embedding.isnot(None)
    ).all()
    embedded = sum(1 for (raw,) in stored if parse_embedding(raw) is not None)
    return embedded, total


# ============== WRITE ==============

def create_entry(db: Session, data: schemas.KnowledgeEntryCreate) -> models.KnowledgeEntry:
    entry = models.KnowledgeEntry(
        expert=data.expert,
        source=data.source,
        source_url=data.source_url or None,
        category=data.category,
        title=data.title,
        content=data.content,
        keywords=list(data.keywords),
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    return entry


def update_entry(
    db: Session,
    entry_id: int,
    updates: Dict[str, Any],
) -> Tuple[Optional[models.KnowledgeEntry], bool]:
    """
    Apply a partial update.

    Returns (entry, embedding_inputs_changed). entry is None when the id
    does not exist. Only fields whose value actually differs count as changed.
    """
    unknown = set(updates) - EDITABLE_FIELDS
    if unknown:
        raise ValueError(f"Cannot update fields: {sorted(unknown)}")

    entry = get_entry(db, entry_id)
    if not entry:
        return None, False

    inputs_changed = False
    for field, value in updates.items():
        if field == "keywords" and value is not None:
            value = list(value)
        if field == "source_url":
            value = value or None
        elif value is None:
            # Required columns: a null in a PATCH means "leave as is"
            continue
        if getattr(entry, field) == value:
            continue
        setattr(entry, field, value)
        if field in EMBEDDING_INPUT_FIELDS:
            inputs_changed = True

    db.commit()
    db.refresh(entry)
    return entry, inputs_changed


def set_embedding(db: Session, entry_id: int, serialized: Optional[str]) -> bool:
    """Persist (or clear, with None) the serialized embedding of one entry."""
    entry = get_entry(db, entry_id)
    if not entry:
        return False
    entry.embedding = serialized
    db.commit()
    return True


def delete_entry(db: Session, entry_id: int) -> bool:
    entry = get_entry(db, entry_id)
    if not entry:
        return False
    db.delete(entry)
    db.commit()
    return True
