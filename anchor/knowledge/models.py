# FILE: anchor/knowledge/models.py
"""
SQLAlchemy model for curated expert knowledge entries.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Text, DateTime, JSON
from anchor.db import Base


class KnowledgeEntry(Base):
    """
    One expert-attributed piece of guidance used to ground chat answers.

    category: free-text tag ("clozapine", "cannabis", ...), only used for soft scoring boosts
    keywords: ordered JSON list of strings
    embedding: JSON-encoded float array, derived from title/category/expert/keywords/content.
        NULL until computed; cleared when any of those inputs change.
    """
    __tablename__ = "knowledge_entries"

    id = Column(Integer, primary_key=True, index=True)
    expert = Column(String(255), nullable=False)
    source = Column(String(255), nullable=False)
    source_url = Column(String(1000), nullable=True)
    category = Column(String(100), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=False)
    keywords = Column(JSON, nullable=False, default=list)

    # Written only by anchor.embeddings.service
    embedding = Column(Text, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False)

    @property
    def has_embedding(self) -> bool:
        return bool(self.embedding)

    def __repr__(self) -> str:
        return f"<KnowledgeEntry id={self.id} title={self.title!r}>"
