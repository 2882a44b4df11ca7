"""FastAPI main application."""

import time
from typing import List, Optional

import structlog
from fastapi import FastAPI, Header, Query, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import BaseModel, Field

from ..config import settings
from ..db.connection import db
from ..db.queries import TileRepository
from ..db.world import FactionError, create_faction, initialize_world, reset_world
from .log_config import configure_logging
from .realtime import hub

# Configure logging
configure_logging(settings.log_level, settings.log_format)

logger = structlog.get_logger()

API_VERSION = "0.1.0"
PING_VERSION = "ping-v1"

# Initialize FastAPI app
app = FastAPI(
    title="Territory World API",
    description="Shared tile world with player factions and live ownership updates",
    version=API_VERSION,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Request/Response models
class FactionRequest(BaseModel):
    """Request to found a faction on a tile."""

    name: Optional[str] = Field(None, max_length=255, description="Unique faction name")
    color: Optional[str] = Field(None, max_length=7, description="Hex color, e.g. #ff8800")
    flag_url: Optional[str] = Field(None, description="Optional flag image URL")
    tile_id: Optional[int] = Field(None, description="Capital tile id")


class WorldMeta(BaseModel):
    w: int
    h: int
    n: int


class TileOut(BaseModel):
    id: int
    x: int
    y: int
    terrain: int
    resource: float
    owner_faction_id: Optional[int] = None
    population: int
    capture: int


class FactionOut(BaseModel):
    id: int
    name: str
    color: str
    flag_url: Optional[str] = None
    capital_tile_id: Optional[int] = None


class WorldState(BaseModel):
    tiles: List[TileOut]
    factions: List[FactionOut]
    meta: WorldMeta


def _error(status_code: int, code: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": code})


def _initialize_world_blocking():
    with db.get_session() as session:
        return initialize_world(session, settings.world_config(), batch_size=settings.batch_size)


def _reset_world_blocking():
    with db.get_session() as session:
        return reset_world(session, settings.world_config(), batch_size=settings.batch_size)


# Event handlers
@app.on_event("startup")
async def startup_event():
    """Initialize database (and the world, if configured) on startup."""
    logger.info("Starting Territory World API")
    db.initialize()

    if settings.init_on_boot:
        try:
            # Worker thread, not the event loop
            await run_in_threadpool(_initialize_world_blocking)
        except Exception as e:
            logger.error("World initialization failed", error=str(e))

    logger.info("API startup complete")


@app.on_event("shutdown")
async def shutdown_event():
    """Cleanup on shutdown."""
    logger.info("Shutting down Territory World API")


# API endpoints
@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "message": "Territory World API",
        "version": API_VERSION,
        "status": "running",
    }


@app.get("/healthz", response_class=PlainTextResponse)
async def health_check():
    """Health check endpoint."""
    return "ok"


@app.get("/debug/ping")
async def debug_ping():
    """Deployment liveness check."""
    return {"ok": True, "ts": int(time.time() * 1000), "version": PING_VERSION}


@app.get("/api/state", response_model=WorldState)
async def get_state():
    """Every tile and faction plus the stored world size."""
    try:
        with db.get_session() as session:
            repo = TileRepository(session)
            return {
                "tiles": [tile.to_dict() for tile in repo.list_tiles()],
                "factions": [faction.to_dict() for faction in repo.list_factions()],
                "meta": repo.world_meta(),
            }
    except Exception as e:
        logger.error("State query failed", error=str(e))
        return _error(500, "state_failed")


@app.get("/api/factions", response_model=List[FactionOut])
async def list_factions():
    """List all factions."""
    try:
        with db.get_session() as session:
            return [faction.to_dict() for faction in TileRepository(session).list_factions()]
    except Exception as e:
        logger.error("Faction query failed", error=str(e))
        return _error(500, "factions_failed")


@app.post("/api/faction")
async def post_faction(request: Optional[FactionRequest] = None):
    """
    Found a faction on an unowned land tile.

    The tile becomes the capital (capture 100, population 10) and the
    ownership change is pushed to every connected viewer.
    """
    request = request or FactionRequest()
    logger.info("Faction creation requested", name=request.name, tile_id=request.tile_id)

    try:
        with db.get_session() as session:
            faction, tile = create_faction(
                session, request.name, request.color, request.flag_url, request.tile_id
            )
            faction_out = faction.to_dict()
            updated = {"id": tile.id, "owner_faction_id": faction.id, "capture": tile.capture}
    except FactionError as e:
        logger.info("Faction rejected", code=e.code)
        return _error(e.status_code, e.code)
    except Exception as e:
        logger.error("Faction creation failed", error=str(e))
        return _error(500, "create_failed")

    await hub.broadcast(
        "world:update",
        [{"tile_id": updated["id"], "owner_faction_id": updated["owner_faction_id"], "capture": updated["capture"]}],
    )
    return {"ok": True, "faction": faction_out, "updated_tile": updated}


@app.api_route("/admin/reset-world", methods=["GET", "POST"])
async def handle_reset_world(
    key: Optional[str] = Query(None),
    x_admin_key: Optional[str] = Header(None),
):
    """Wipe tiles and factions and regenerate the world."""
    supplied = key or x_admin_key or ""
    if not settings.admin_reset_key or supplied != settings.admin_reset_key:
        return _error(401, "unauthorized")

    try:
        result = await run_in_threadpool(_reset_world_blocking)
    except Exception as e:
        logger.error("World reset failed", error=str(e))
        return JSONResponse(status_code=500, content={"ok": False, "error": str(e)})

    await hub.broadcast("world:reset", {"tiles": result.tiles_written})
    return {"ok": True, "msg": "World reset and re-initialized"}


@app.websocket("/ws")
async def world_socket(websocket: WebSocket):
    """Viewer socket; the server only pushes, client messages are ignored."""
    await hub.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        hub.disconnect(websocket)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
