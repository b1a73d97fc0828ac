import time
from datetime import datetime

from fastapi import APIRouter, Request
from fastapi.responses import PlainTextResponse

from constants import SERVER_NAME
from logging_config import get_logger
from schemas.status import HealthResponse, StatsResponse

logger = get_logger(__name__)

status_router = APIRouter(tags=["status"])


def _uptime(request: Request) -> float:
    return time.monotonic() - request.app.state.started_at


@status_router.get("/health", response_model=HealthResponse)
async def health(request: Request):
    registry = request.app.state.registry
    return HealthResponse(
        status="healthy",
        uptime=_uptime(request),
        timestamp=datetime.now().isoformat(),
        active_rooms=registry.room_count,
        active_players=registry.session_count,
        connected_clients=len(request.app.state.connections),
    )


@status_router.get("/stats", response_model=StatsResponse)
async def stats(request: Request):
    registry = request.app.state.registry
    logger.debug(f"Stats request from {request.client.host if request.client else 'unknown'}")
    return StatsResponse(
        rooms=registry.room_count,
        players=registry.session_count,
        connections=len(request.app.state.connections),
        uptime=int(_uptime(request)),
    )


@status_router.get("/", response_class=PlainTextResponse)
async def index():
    return (
        f"{SERVER_NAME}\n\n"
        "Endpoints:\n"
        "/health - Health check\n"
        "/stats - Server statistics\n\n"
        "WebSocket: /ws"
    )
