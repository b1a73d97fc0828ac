import asyncio

from starlette.websockets import WebSocketState

from connections import PeerConnection


class StubWebSocket:
    """Records written frames; optionally fails on the Nth write."""

    def __init__(self, fail_on=None):
        self.client_state = WebSocketState.CONNECTED
        self.application_state = WebSocketState.CONNECTED
        self.fail_on = fail_on
        self.written = []
        self.closed = False

    async def send_text(self, text):
        if self.fail_on is not None and len(self.written) + 1 == self.fail_on:
            raise RuntimeError('socket gone')
        self.written.append(text)

    async def close(self):
        self.closed = True
        self.application_state = WebSocketState.DISCONNECTED


def test_writer_drains_in_order():
    async def scenario():
        ws = StubWebSocket()
        connection = PeerConnection(ws)
        for text in ('a', 'b', 'c'):
            assert connection.send_text(text)
        connection.stop_writer()
        await connection.run_writer()
        return ws, connection

    ws, connection = asyncio.run(scenario())
    assert ws.written == ['a', 'b', 'c']
    assert not connection.is_open


def test_send_dict_is_json_encoded():
    async def scenario():
        ws = StubWebSocket()
        connection = PeerConnection(ws)
        connection.send({'type': 'peer-left'})
        connection.stop_writer()
        await connection.run_writer()
        return ws

    assert asyncio.run(scenario()).written == ['{"type": "peer-left"}']


def test_write_failure_marks_connection_closing():
    async def scenario():
        ws = StubWebSocket(fail_on=2)
        connection = PeerConnection(ws)
        for text in ('a', 'b', 'c'):
            connection.send_text(text)
        # Returns instead of raising
        await connection.run_writer()
        return ws, connection

    ws, connection = asyncio.run(scenario())
    assert ws.written == ['a']
    assert not connection.is_open
    assert connection.send_text('d') is False


def test_send_to_closed_socket_is_dropped():
    async def scenario():
        ws = StubWebSocket()
        ws.client_state = WebSocketState.DISCONNECTED
        connection = PeerConnection(ws)
        accepted = connection.send_text('late')
        connection.stop_writer()
        await connection.run_writer()
        return ws, accepted

    ws, accepted = asyncio.run(scenario())
    assert accepted is False
    assert ws.written == []


def test_close_closes_open_socket_once():
    async def scenario():
        ws = StubWebSocket()
        connection = PeerConnection(ws)
        await connection.close()
        await connection.close()
        return ws, connection

    ws, connection = asyncio.run(scenario())
    assert ws.closed
    assert not connection.is_open
