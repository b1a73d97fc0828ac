from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    uptime: float
    timestamp: str
    active_rooms: int
    active_players: int
    connected_clients: int


class StatsResponse(BaseModel):
    rooms: int
    players: int
    connections: int
    uptime: int
