# FILE: anchor/__init__.py
"""
Anchor backend: knowledge-grounded crisis support assistant.

Subpackages:
- knowledge: expert knowledge entries, seeding, keyword scoring, admin API
- embeddings: embedding providers, similarity search, embedding maintenance
- retrieval: knowledge_base / general_ai routing and process initialization
- llm: text generation with provider failover
- chat: AI chat turn handling
"""

__version__ = "0.4.0"
