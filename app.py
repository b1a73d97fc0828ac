import asyncio
import time
from contextlib import asynccontextmanager
from typing import Set

from fastapi import FastAPI, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ValidationError

from connections import PeerConnection
from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL, STATS_LOG_INTERVAL_SEC, SWEEP_INTERVAL_SEC
from errors import MalformedMessage
from logging_config import get_logger, setup_logging
from registry import room_registry
from relay import RelayEngine
from routers.status import status_router
from schemas.messages import InboundMessage

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)

relay_engine = RelayEngine(room_registry)

# Every accepted WebSocket, joined to a room or not. Owned by this module;
# the relay engine only sees it during a sweep.
live_connections: Set[PeerConnection] = set()


async def sweep_stale_connections(interval: float = SWEEP_INTERVAL_SEC):
    """Periodically reconcile closed transports with registry sessions."""
    while True:
        await asyncio.sleep(interval)
        try:
            relay_engine.sweep(live_connections)
        except Exception as e:
            logger.error(f"Error during stale connection sweep: {e}", exc_info=True)


async def log_server_stats(interval: float = STATS_LOG_INTERVAL_SEC):
    while True:
        await asyncio.sleep(interval)
        logger.info(
            f"Server stats: {room_registry.room_count} rooms, "
            f"{room_registry.session_count} players, {len(live_connections)} connections"
        )


async def shutdown_connections():
    logger.info("Cleaning up server...")
    for connection in list(live_connections):
        await connection.close()
    live_connections.clear()
    room_registry.clear()
    logger.info("Cleanup complete")


@asynccontextmanager
async def lifespan(app: FastAPI):
    background_tasks = [
        asyncio.create_task(sweep_stale_connections()),
        asyncio.create_task(log_server_stats()),
    ]
    logger.info(f"Sweep every {SWEEP_INTERVAL_SEC}s, stats every {STATS_LOG_INTERVAL_SEC}s")
    try:
        yield
    finally:
        for task in background_tasks:
            task.cancel()
        await asyncio.gather(*background_tasks, return_exceptions=True)
        await shutdown_connections()


app = FastAPI(title="WeClash Signaling Server", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.state.registry = room_registry
app.state.connections = live_connections
app.state.started_at = time.monotonic()

app.include_router(status_router)

logger.info("FastAPI application initialized")


@app.websocket("/ws")
@app.websocket("/")
async def websocket_endpoint(websocket: WebSocket):
    """Signaling WebSocket. One JSON object per text frame, each with a `type`."""
    await websocket.accept()
    connection = PeerConnection(websocket)
    client_host = websocket.client.host if websocket.client else "unknown"
    logger.info(f"New connection {connection.connection_id} from {client_host}")

    live_connections.add(connection)
    writer_task = asyncio.create_task(connection.run_writer())
    relay_engine.on_connect(connection)

    try:
        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                logger.info(f"WebSocket disconnected for connection {connection.connection_id}")
                break

            data = frame.get("text")
            if data is None:
                logger.warning(f"Binary frame from connection {connection.connection_id}")
                relay_engine.send_error(connection, MalformedMessage.message)
                continue

            try:
                message = InboundMessage.model_validate_json(data)
            except ValidationError as e:
                logger.warning(f"Error parsing message from connection {connection.connection_id}: {e.error_count()} errors")
                relay_engine.send_error(connection, MalformedMessage.message)
                continue

            relay_engine.dispatch(connection, message.model_dump(), raw=data)
    except Exception as e:
        logger.error(f"WebSocket error for connection {connection.connection_id}: {e}", exc_info=True)
    finally:
        relay_engine.on_disconnect(connection)
        live_connections.discard(connection)
        connection.stop_writer()
        try:
            await writer_task
        except Exception as e:
            logger.debug(f"Writer for {connection.connection_id} ended with error: {e}")
        await connection.close()
        logger.info(f"Connection closed for {client_host}")
