# FILE: anchor/knowledge/seed.py
"""
Starter corpus for an empty knowledge base.

The curated entries live in seed_entries.json next to this module so
content editors can change them without touching code.
"""
import json
import logging
from pathlib import Path
from typing import List, Optional

from sqlalchemy.orm import Session

from anchor.knowledge import schemas, service

logger = logging.getLogger(__name__)

SEED_PATH = Path(__file__).with_name("seed_entries.json")


def load_seed_entries(path: Optional[Path] = None) -> List[schemas.KnowledgeEntryCreate]:
    raw = json.loads((path or SEED_PATH).read_text(encoding="utf-8"))
    return [schemas.KnowledgeEntryCreate(**item) for item in raw]


def seed_knowledge_base(db: Session, path: Optional[Path] = None) -> int:
    """
    Insert the starter corpus if the store is empty.

    Returns the number of entries inserted (0 when the store already had data).
    """
    if service.count_entries(db) > 0:
        return 0

    entries = load_seed_entries(path)
    logger.info("[knowledge] Seeding knowledge base with %d entries", len(entries))
    for data in entries:
        service.create_entry(db, data)
    return len(entries)
