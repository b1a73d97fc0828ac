from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from constants import ROOM_CODE_LENGTH
from errors import InvalidRoomCode, NotInRoom, RoomFull, RoomNotFound
from logging_config import get_logger

logger = get_logger(__name__)


class Role(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


@dataclass
class Room:
    code: str
    first: Any
    second: Optional[Any] = None


@dataclass
class Session:
    room_code: str
    role: Role


@dataclass(frozen=True)
class LeaveResult:
    """Outcome of the leave protocol.

    `notify` is the remaining occupant that must receive `peer-left`,
    `promoted` the occupant that moved from the secondary to the primary slot.
    """
    room_code: Optional[str] = None
    role: Optional[Role] = None
    notify: Optional[Any] = None
    promoted: Optional[Any] = None
    room_deleted: bool = False

    @property
    def left(self) -> bool:
        return self.room_code is not None


NO_LEAVE = LeaveResult()


@dataclass(frozen=True)
class JoinResult:
    code: str
    role: Role
    created: bool
    # Existing primary to be told `peer-joined` when the room fills up
    peer: Optional[Any] = None
    # Leave protocol executed for the room the connection was in before
    previous: LeaveResult = NO_LEAVE


def validate_room_code(code) -> str:
    if not isinstance(code, str) or len(code) != ROOM_CODE_LENGTH:
        raise InvalidRoomCode()
    return code


class RoomRegistry:
    """Owns every Room and Session.

    Rooms are keyed by code, Sessions by connection identity. Both tables are
    only changed through join/leave so they never drift apart. Not thread-safe:
    callers must serialize access (the server runs it on a single event loop).
    """

    def __init__(self):
        self._rooms: Dict[str, Room] = {}
        self._sessions: Dict[Any, Session] = {}

    @property
    def room_count(self) -> int:
        return len(self._rooms)

    @property
    def session_count(self) -> int:
        return len(self._sessions)

    def join(self, connection, code) -> JoinResult:
        code = validate_room_code(code)

        room = self._rooms.get(code)
        if room is not None and room.second is not None and connection not in (room.first, room.second):
            logger.info(f"Join rejected: room {code} is full")
            raise RoomFull()

        previous = self.leave(connection)
        # The leave above may have changed or removed the room we are joining
        room = self._rooms.get(code)

        if room is None:
            self._rooms[code] = Room(code=code, first=connection)
            self._sessions[connection] = Session(room_code=code, role=Role.PRIMARY)
            logger.info(f"Room {code} created by primary")
            return JoinResult(code=code, role=Role.PRIMARY, created=True, previous=previous)

        # Either the room had a free slot or the leave above freed one
        room.second = connection
        self._sessions[connection] = Session(room_code=code, role=Role.SECONDARY)
        logger.info(f"Secondary joined room {code}")
        return JoinResult(code=code, role=Role.SECONDARY, created=False, peer=room.first, previous=previous)

    def leave(self, connection) -> LeaveResult:
        session = self._sessions.get(connection)
        if session is None:
            return NO_LEAVE

        code, role = session.room_code, session.role
        room = self._rooms.get(code)
        if room is None:
            logger.error(f"Inconsistent registry: session for room {code} ({role.value}) has no room")
            del self._sessions[connection]
            return LeaveResult(room_code=code, role=role)

        opponent = room.second if role is Role.PRIMARY else room.first
        promoted = None
        room_deleted = False

        if role is Role.PRIMARY:
            if room.second is not None:
                promoted = room.second
                room.first = promoted
                room.second = None
                self._sessions[promoted].role = Role.PRIMARY
                logger.info(f"Secondary promoted to primary in room {code}")
            else:
                del self._rooms[code]
                room_deleted = True
                logger.info(f"Room {code} deleted (empty)")
        else:
            room.second = None
            logger.info(f"Secondary left room {code}")

        del self._sessions[connection]
        logger.debug(f"Session {role.value} removed from room {code}")
        return LeaveResult(
            room_code=code,
            role=role,
            notify=opponent,
            promoted=promoted,
            room_deleted=room_deleted,
        )

    def opponent_of(self, connection) -> Optional[Any]:
        """Return the occupant of the other slot, or None when it is empty."""
        session = self._sessions.get(connection)
        if session is None:
            raise NotInRoom()

        room = self._rooms.get(session.room_code)
        if room is None:
            logger.error(f"Inconsistent registry: session references missing room {session.room_code}")
            raise RoomNotFound()

        return room.second if session.role is Role.PRIMARY else room.first

    def session_of(self, connection) -> Optional[Session]:
        session = self._sessions.get(connection)
        if session is None:
            return None
        return Session(room_code=session.room_code, role=session.role)

    def room_of(self, code: str) -> Optional[Room]:
        room = self._rooms.get(code)
        if room is None:
            return None
        return Room(code=room.code, first=room.first, second=room.second)

    def clear(self):
        logger.info(f"Clearing registry: {len(self._rooms)} rooms, {len(self._sessions)} sessions")
        self._rooms.clear()
        self._sessions.clear()


room_registry = RoomRegistry()
