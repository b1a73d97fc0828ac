class SignalingError(Exception):
    """Base for failures reported back to a single connection as an `error` frame."""

    message = "Signaling error"

    def __init__(self, message: str = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidRoomCode(SignalingError):
    message = "Invalid room code"


class RoomFull(SignalingError):
    message = "Room is full"


class NotInRoom(SignalingError):
    message = "Not in a room"


class RoomNotFound(SignalingError):
    """A Session points at a Room that no longer exists. Indicates a registry bug."""

    message = "Room not found"


class UnknownMessageType(SignalingError):
    def __init__(self, message_type):
        self.message_type = message_type
        super().__init__(f"Unknown message type: {message_type}")


class MalformedMessage(SignalingError):
    message = "Invalid message format"
