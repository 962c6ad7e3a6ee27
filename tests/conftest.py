import json

import pytest
from anyio import EndOfStream, WouldBlock, create_memory_object_stream, sleep
from websockets import serve  # type: ignore

from signal_relay import Connection, SignalingServer


class FakeWebsocket:
    """An in-memory transport: frames are fed by the test, sent frames are recorded."""

    def __init__(self):
        self.sent = []
        self._send_stream, self._receive_stream = create_memory_object_stream(max_buffer_size=100)

    def __aiter__(self):
        return self

    async def __anext__(self):
        try:
            frame = await self._receive_stream.receive()
        except EndOfStream:
            raise StopAsyncIteration()
        if isinstance(frame, Exception):
            raise frame
        return frame

    async def send(self, message: str) -> None:
        self.sent.append(message)

    def feed(self, frame) -> None:
        if not isinstance(frame, (str, bytes)):
            frame = json.dumps(frame)
        self._send_stream.send_nowait(frame)

    def disconnect(self) -> None:
        self._send_stream.close()

    def fail(self, exc: Exception) -> None:
        self._send_stream.send_nowait(exc)


def drain(connection: Connection) -> list:
    """Messages queued for a connection whose sender is not running."""
    messages = []
    while True:
        try:
            messages.append(connection._receive_stream.receive_nowait())
        except (WouldBlock, EndOfStream):
            return messages


async def wait_for(predicate, timeout: float = 1.0):
    tt, dt = 0.0, 0.01
    while not predicate():
        await sleep(dt)
        tt += dt
        if tt >= timeout:
            raise RuntimeError("Timeout waiting for condition")


@pytest.fixture
async def signaling_server(unused_tcp_port):
    server = SignalingServer()
    async with server, serve(server.serve, "127.0.0.1", unused_tcp_port):
        yield server


@pytest.fixture
def server_url(unused_tcp_port):
    return f"ws://127.0.0.1:{unused_tcp_port}"


@pytest.fixture
def fake_websocket():
    return FakeWebsocket()


@pytest.fixture
def anyio_backend():
    return "asyncio"
