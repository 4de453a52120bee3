# FILE: main.py
"""
Anchor Backend - FastAPI Application
Version: 0.4.0

Knowledge-grounded chat for families navigating a mental health crisis.

Features:
- Curated expert knowledge base with admin CRUD (X-Admin-Password)
- Semantic retrieval routing: answers are grounded in the knowledge base
  when the best match clears the confidence threshold, otherwise they come
  from general model knowledge
- Cached embeddings per entry, refreshed in the background on edit
- Keyword relevance search that needs no embedding provider
- Gemini / OpenAI generation with failover
"""
import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load .env FIRST before any other imports that might need env vars
load_dotenv()

from anchor import __version__, config
from anchor.db import init_db
from anchor.auth import ADMIN_HEADER
from anchor.chat.router import router as chat_router
from anchor.knowledge.router import router as knowledge_router
from anchor.embeddings.service import get_maintenance_service
from anchor.retrieval.lifecycle import get_initializer

logging.basicConfig(
    level=os.getenv("ANCHOR_LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("anchor")

app = FastAPI(
    title="Anchor",
    version=__version__,
    description="Crisis navigation assistant with expert knowledge retrieval",
)

# ====== CORS ======

app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://localhost:8000",
        "http://127.0.0.1:5173",
        "http://127.0.0.1:8000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", ADMIN_HEADER],
)


# ====== STARTUP / SHUTDOWN ======

@app.on_event("startup")
async def on_startup():
    init_db()

    logger.info("[startup] Checking environment variables...")
    for key, purpose in (
        ("OPENAI_API_KEY", "OpenAI embeddings + chat"),
        ("GOOGLE_API_KEY", "Gemini embeddings + chat"),
    ):
        if os.getenv(key):
            logger.info("[startup] %s: [OK] set (%s)", key, purpose)
        else:
            logger.warning("[startup] %s: [X] NOT SET (%s unavailable)", key, purpose)

    if config.admin_password():
        logger.info("[startup] Admin password: [OK] configured")
    else:
        logger.warning("[startup] Admin password: [X] NOT CONFIGURED, admin endpoints return 503")

    result = await get_initializer().initialize(embed=config.EMBED_ON_STARTUP)
    logger.info(
        "[startup] Knowledge base ready (seeded=%d embedded=%d failed=%d)",
        result["seeded"], result["embedded"], result["failed"],
    )
    if not config.EMBED_ON_STARTUP:
        logger.info("[startup] ANCHOR_EMBED_ON_STARTUP disabled; run POST /admin/knowledge/reindex")


@app.on_event("shutdown")
async def on_shutdown():
    maintenance = get_maintenance_service()
    if maintenance.pending_count:
        logger.info("[startup] Waiting for %d embedding refreshes", maintenance.pending_count)
        await maintenance.wait_pending()


# ====== ROUTERS ======

# Chat router - public
app.include_router(chat_router)

# Knowledge admin router - protected
app.include_router(knowledge_router)


@app.get("/ping")
def ping():
    """Health check (public)."""
    return {"status": "ok", "version": __version__}
