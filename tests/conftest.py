import json
import os
import sys
import pytest

# Ensure the project root (containing the server modules) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from registry import RoomRegistry
from relay import RelayEngine


class FakeConnection:
    """Stand-in for PeerConnection that records what the engine sends."""

    def __init__(self, name):
        self.name = name
        self.is_open = True
        self.sent = []
        self.closed = False

    def __repr__(self):
        return f"<FakeConnection {self.name}>"

    def send(self, payload):
        return self.send_text(json.dumps(payload))

    def send_text(self, text):
        if not self.is_open:
            return False
        self.sent.append(json.loads(text))
        return True

    async def close(self):
        self.is_open = False
        self.closed = True

    def types(self):
        return [m['type'] for m in self.sent]

    def flush(self):
        sent, self.sent = self.sent, []
        return sent


@pytest.fixture()
def registry():
    return RoomRegistry()


@pytest.fixture()
def engine(registry):
    return RelayEngine(registry)


@pytest.fixture()
def make_connection():
    def _make(name='conn'):
        return FakeConnection(name)
    return _make


@pytest.fixture()
def client():
    from fastapi.testclient import TestClient
    from app import app
    from registry import room_registry

    room_registry.clear()
    # Entering the client shares one event loop between all WebSocket sessions
    with TestClient(app) as test_client:
        yield test_client
