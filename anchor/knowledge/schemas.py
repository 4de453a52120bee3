# FILE: anchor/knowledge/schemas.py
"""
Knowledge module Pydantic schemas.
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def split_keywords(value):
    """Admin forms post keywords as "a, b, c"; API clients post a list."""
    if value is None:
        return value
    if isinstance(value, str):
        return [k.strip() for k in value.split(",") if k.strip()]
    return [str(k).strip() for k in value if str(k).strip()]


# ============== ENTRY ==============

class KnowledgeEntryCreate(BaseModel):
    expert: str
    source: str
    source_url: Optional[str] = None
    category: str
    title: str
    content: str
    keywords: List[str] = Field(default_factory=list)

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords(cls, value):
        return split_keywords(value)


class KnowledgeEntryUpdate(BaseModel):
    expert: Optional[str] = None
    source: Optional[str] = None
    source_url: Optional[str] = None
    category: Optional[str] = None
    title: Optional[str] = None
    content: Optional[str] = None
    keywords: Optional[List[str]] = None

    @field_validator("keywords", mode="before")
    @classmethod
    def _keywords(cls, value):
        return split_keywords(value)


class KnowledgeEntryOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    expert: str
    source: str
    source_url: Optional[str]
    category: str
    title: str
    content: str
    keywords: List[str]
    has_embedding: bool
    created_at: datetime
    updated_at: datetime


# ============== CITATIONS ==============

class SourceCitation(BaseModel):
    """Attribution reported alongside a knowledge_base answer."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    expert: str
    source: str
    source_url: Optional[str] = None


# ============== SEARCH / STATUS ==============

class KeywordSearchRequest(BaseModel):
    query: str
    limit: int = Field(default=3, ge=1, le=50)


class KeywordSearchResponse(BaseModel):
    query: str
    results: List[KnowledgeEntryOut]


class EmbeddingStatus(BaseModel):
    total: int
    embedded: int
    missing: int


class ReindexResponse(BaseModel):
    embedded: int
    failed: int
    skipped: int
