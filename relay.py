import json
from typing import Iterable, Optional

import message_types
from constants import SERVER_NAME
from errors import SignalingError, UnknownMessageType
from logging_config import get_logger
from registry import JoinResult, LeaveResult, RoomRegistry, Role
from schemas.messages import (
    ConnectedMessage,
    ErrorMessage,
    PeerJoinedMessage,
    PeerLeftMessage,
    RoomCreatedMessage,
    RoomJoinedMessage,
)

logger = get_logger(__name__)


class RelayEngine:
    """Routes inbound frames: joins go to the registry, everything else to the opponent.

    Connections only need `is_open`, `send(dict)` and `send_text(str)`. None of
    the methods await, so each call runs to completion on the event loop before
    any other connection's frame is looked at.
    """

    def __init__(self, registry: RoomRegistry):
        self.registry = registry

    def on_connect(self, connection):
        connection.send(ConnectedMessage(message=f"Welcome to {SERVER_NAME}").model_dump())

    def dispatch(self, connection, message: dict, raw: Optional[str] = None):
        message_type = message.get("type")
        logger.debug(f"Received message: {message_type}")

        try:
            if message_type == message_types.JOIN:
                self._handle_join(connection, message)
            elif message_type in message_types.RELAY_TYPES:
                self._relay_to_opponent(connection, message, raw)
            else:
                logger.warning(f"Unknown message type: {message_type}")
                raise UnknownMessageType(message_type)
        except SignalingError as e:
            self.send_error(connection, e.message)

    def on_disconnect(self, connection) -> LeaveResult:
        result = self.registry.leave(connection)
        self._notify_peer_left(result)
        return result

    def sweep(self, connections: Iterable) -> int:
        """Tear down sessions whose transport closed without us hearing about it."""
        removed = 0
        for connection in list(connections):
            if connection.is_open:
                continue
            if self.on_disconnect(connection).left:
                removed += 1
        if removed:
            logger.info(f"Cleaned up {removed} stale connections")
        return removed

    def send_error(self, connection, text: str):
        connection.send(ErrorMessage(message=text).model_dump())

    def _handle_join(self, connection, message: dict):
        result: JoinResult = self.registry.join(connection, message.get("code"))
        self._notify_peer_left(result.previous)

        if result.created:
            connection.send(RoomCreatedMessage(code=result.code).model_dump())
        else:
            connection.send(RoomJoinedMessage(code=result.code).model_dump())
            peer_joined = PeerJoinedMessage().model_dump()
            result.peer.send(peer_joined)
            connection.send(peer_joined)

        logger.info(f"Player joined room {result.code} as {result.role.value}")

    def _relay_to_opponent(self, connection, message: dict, raw: Optional[str]):
        opponent = self.registry.opponent_of(connection)

        if opponent is None:
            logger.debug(f"No opponent to relay {message['type']} to")
            return

        if not opponent.is_open:
            session = self.registry.session_of(connection)
            logger.info(f"Opponent disconnected in room {session.room_code if session else '?'}")
            # One bounded cleanup step; nothing is relayed for the removed opponent
            self.on_disconnect(opponent)
            return

        opponent.send_text(raw if raw is not None else json.dumps(message))
        self._log_relay(message)

    def _notify_peer_left(self, result: LeaveResult):
        if not result.left:
            return
        if result.notify is not None and result.notify.is_open:
            result.notify.send(PeerLeftMessage().model_dump())
            logger.info(f"Notified opponent that {result.role.value} left room {result.room_code}")
        if result.promoted is not None:
            logger.debug(f"Promoted occupant of room {result.room_code} is now {Role.PRIMARY.value}")

    def _log_relay(self, message: dict):
        message_type = message["type"]
        if message_type == message_types.HIT:
            hit = message.get("hit") or {}
            if isinstance(hit, dict):
                logger.debug(f"Hit relayed: {hit.get('part')} for {hit.get('damage')} damage")
        elif message_type == message_types.KEYPOINTS:
            keypoints = message.get("keypoints")
            count = len(keypoints) if isinstance(keypoints, (list, dict)) else None
            logger.debug(f"Keypoints relayed: {count} points")
        else:
            logger.debug(f"Relayed {message_type}")
