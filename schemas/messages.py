from pydantic import BaseModel, ConfigDict, StrictStr
from typing import Literal

import message_types


class InboundMessage(BaseModel):
    # Anything beyond `type` is opaque payload and relayed as received
    model_config = ConfigDict(extra="allow")

    type: StrictStr


class ConnectedMessage(BaseModel):
    type: Literal["connected"] = message_types.CONNECTED
    message: str


class RoomCreatedMessage(BaseModel):
    type: Literal["room-created"] = message_types.ROOM_CREATED
    code: str
    role: Literal["primary"] = "primary"


class RoomJoinedMessage(BaseModel):
    type: Literal["room-joined"] = message_types.ROOM_JOINED
    code: str
    role: Literal["secondary"] = "secondary"


class PeerJoinedMessage(BaseModel):
    type: Literal["peer-joined"] = message_types.PEER_JOINED


class PeerLeftMessage(BaseModel):
    type: Literal["peer-left"] = message_types.PEER_LEFT


class ErrorMessage(BaseModel):
    type: Literal["error"] = message_types.ERROR
    message: str
