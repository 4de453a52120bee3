# FILE: tests/conftest.py
"""
Pytest configuration for Anchor test suite.

Configures:
- pytest-asyncio for async test support
- in-memory SQLite (StaticPool, so every session sees the same database)
- FakeEmbeddingProvider: deterministic vectors, call counting, injectable failures
"""
import sys
from pathlib import Path
from types import SimpleNamespace

_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

pytest_plugins = ["pytest_asyncio"]


class FakeEmbeddingProvider:
    """
    Returns preset vectors.

    Lookup order: exact text, then the first key contained in the text,
    then `default`. Texts containing any `fail_on` marker raise.
    """

    name = "fake"

    def __init__(self, vectors=None, default=None, fail_on=()):
        self.vectors = dict(vectors or {})
        self.default = default if default is not None else [1.0, 0.0, 0.0]
        self.fail_on = tuple(fail_on)
        self.calls = []

    async def embed(self, text):
        from anchor.embeddings.provider import EmbeddingProviderError

        self.calls.append(text)
        for marker in self.fail_on:
            if marker in text:
                raise EmbeddingProviderError(f"provider unavailable for {marker!r}")
        if text in self.vectors:
            return list(self.vectors[text])
        for key, vector in self.vectors.items():
            if key in text:
                return list(vector)
        return list(self.default)


def make_entry(**overrides):
    """Plain stand-in for a KnowledgeEntry (router and scorer only read attributes)."""
    fields = {
        "id": 1,
        "expert": "Dr. Robert Laitman",
        "source": "Team Daniel / Doro Mind",
        "source_url": None,
        "category": "clozapine",
        "title": "Clozapine as Gold Standard Treatment",
        "content": "Clozapine is the most effective antipsychotic for treatment-resistant schizophrenia.",
        "keywords": ["clozapine", "treatment", "medication"],
        "embedding": None,
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


@pytest.fixture
def engine():
    from anchor.db import Base
    from anchor.knowledge import models  # noqa: F401

    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def fake_provider():
    return FakeEmbeddingProvider()


@pytest.fixture
def entry_data():
    from anchor.knowledge.schemas import KnowledgeEntryCreate

    def _make(**overrides):
        fields = {
            "expert": "Dr. Xavier Amador",
            "source": "I Am Not Sick, I Don't Need Help",
            "category": "communication",
            "title": "LEAP Method",
            "content": "Listen, Empathize, Agree, Partner.",
            "keywords": ["leap", "communication"],
        }
        fields.update(overrides)
        return KnowledgeEntryCreate(**fields)

    return _make
