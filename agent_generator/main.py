"""Agent Generator — Main FastAPI application."""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from .events import TOGGLE_SETTINGS, bus
from .key_store import default_key_store
from .routes_api import router as api_router
from .runtime_config import ensure_runtime_dirs, storage_path
from .template_catalog import TEMPLATES

# ── Logging ────────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)
logger = logging.getLogger("agent-generator")


# ── Lifespan ───────────────────────────────────────────────
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Agent Generator starting up...")
    ensure_runtime_dirs()
    logger.info("Storage at %s", storage_path())
    logger.info("%s templates loaded", len(TEMPLATES))
    if not default_key_store().has_entry():
        logger.warning("No API keys stored yet; clients will be asked to open Settings")
    yield
    logger.info("Agent Generator shutting down.")


# ── App ────────────────────────────────────────────────────
app = FastAPI(title="Agent Generator", version="0.1.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


# ── WebSocket endpoint ─────────────────────────────────────
@app.websocket("/ws/events")
async def events_endpoint(ws: WebSocket):
    await bus.connect(ws)
    # First visit: ask the UI to collect keys.
    if not default_key_store().has_entry():
        await bus.send_personal(ws, TOGGLE_SETTINGS)

    try:
        while True:
            await ws.receive_text()
    except WebSocketDisconnect:
        bus.disconnect(ws)
