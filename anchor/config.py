# FILE: anchor/config.py
"""
Anchor configuration.

All environment-driven tunables in one place. Values are read once at
import time; main.py loads .env before anything imports this module.

NOT configuration: the two retrieval thresholds. They are named constants
next to the code that applies them:
- anchor.embeddings.similarity.MIN_SIMILARITY (search floor, 0.3)
- anchor.retrieval.routing.CONFIDENCE_THRESHOLD (routing cut-off, 0.35)
"""

import os
from pathlib import Path
from typing import List, Optional


def _env_flag(name: str, default: str = "true") -> bool:
    return os.getenv(name, default).lower() in {"1", "true", "yes"}


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [item.strip().lower() for item in raw.split(",") if item.strip()]


# ============================================================================
# STORAGE
# ============================================================================

DATA_DIR = Path(os.getenv("ANCHOR_DATA_DIR", "data"))
DATABASE_URL: str = os.getenv("ANCHOR_DATABASE_URL", "sqlite:///./data/anchor.db")

# ============================================================================
# EMBEDDINGS
# ============================================================================

# "openai" (text-embedding-3-small) or "google" (text-embedding-004)
EMBEDDING_PROVIDER: str = os.getenv("ANCHOR_EMBEDDING_PROVIDER", "google").lower()
OPENAI_EMBEDDING_MODEL: str = os.getenv("ANCHOR_EMBEDDING_MODEL", "text-embedding-3-small")
GOOGLE_EMBEDDING_MODEL: str = os.getenv("ANCHOR_GOOGLE_EMBEDDING_MODEL", "models/text-embedding-004")

# Rough estimate: 1 token ~ 4 chars, model limit ~8191 tokens
MAX_EMBEDDING_CHARS: int = 30000

# Embed missing entries during the startup hook
EMBED_ON_STARTUP: bool = _env_flag("ANCHOR_EMBED_ON_STARTUP")

# ============================================================================
# KEYWORD SCORING
# ============================================================================

# Optional JSON rule table replacing the packaged category boosts
CATEGORY_BOOSTS_PATH: Optional[str] = os.getenv("ANCHOR_CATEGORY_BOOSTS_PATH") or None

# ============================================================================
# GENERATION
# ============================================================================

GENERATION_PROVIDERS: List[str] = _env_list("ANCHOR_GENERATION_PROVIDERS", "google,openai")
GEMINI_CHAT_MODEL: str = os.getenv("ANCHOR_GEMINI_MODEL", "gemini-2.5-flash")
OPENAI_CHAT_MODEL: str = os.getenv("ANCHOR_OPENAI_CHAT_MODEL", "gpt-4o")

# ============================================================================
# CHAT
# ============================================================================

MAX_FILE_CONTENT_CHARS: int = 15000
CHAT_HISTORY_WINDOW: int = 20

# Used as the search query when a turn carries only an attached file
FILE_ONLY_SEARCH_QUERY: str = "document analysis medical records"


def admin_password() -> Optional[str]:
    """Read at call time so tests and operators can rotate it without reload."""
    return os.getenv("ADMIN_PASSWORD") or None
