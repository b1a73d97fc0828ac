import asyncio
import json
import uuid
from datetime import datetime
from typing import Optional

from fastapi import WebSocket
from starlette.websockets import WebSocketState

from logging_config import get_logger

logger = get_logger(__name__)

# Sentinel pushed onto the outbox to stop the writer
_STOP = object()


class PeerConnection:
    """A live WebSocket as seen by the relay engine.

    Sends never block: frames are queued and written in order by `run_writer`,
    which the endpoint runs as a task next to its receive loop.
    """

    def __init__(self, websocket: WebSocket, connection_id: Optional[str] = None):
        self.websocket = websocket
        self.connection_id = connection_id or uuid.uuid4().hex
        self.connected_at = datetime.now().isoformat()
        self.closing = False
        self._outbox: asyncio.Queue = asyncio.Queue()

    def __repr__(self):
        return f"<PeerConnection {self.connection_id[:8]}>"

    @property
    def is_open(self) -> bool:
        return (
            not self.closing
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def send(self, payload: dict) -> bool:
        return self.send_text(json.dumps(payload))

    def send_text(self, text: str) -> bool:
        if not self.is_open:
            logger.debug(f"Dropping frame for closed connection {self.connection_id}")
            return False
        self._outbox.put_nowait(text)
        return True

    async def run_writer(self):
        while True:
            text = await self._outbox.get()
            if text is _STOP:
                break
            try:
                await self.websocket.send_text(text)
            except Exception as e:
                logger.warning(f"Write failed for connection {self.connection_id}: {e}")
                self.closing = True
                break

    def stop_writer(self):
        self.closing = True
        self._outbox.put_nowait(_STOP)

    async def close(self):
        self.stop_writer()
        if (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        ):
            try:
                await self.websocket.close()
            except Exception as e:
                logger.debug(f"Error closing WebSocket {self.connection_id}: {e}")
