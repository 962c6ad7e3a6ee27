from __future__ import annotations

from enum import Enum
from logging import Logger, getLogger
from uuid import uuid4

from anyio import (
    BrokenResourceError,
    ClosedResourceError,
    WouldBlock,
    create_memory_object_stream,
)
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream

from .websocket import Websocket


class ConnectionState(Enum):
    UNJOINED = "unjoined"
    JOINED = "joined"
    CLOSED = "closed"


class Connection:
    """One transport session and its signaling state.

    Outgoing messages are queued with `deliver()`, which never blocks, and are
    written to the websocket by `run_sender()`, which the server runs next to
    the receive loop:
    ```py
    async with create_task_group() as tg:
        tg.start_soon(connection.run_sender)
        ...
    ```
    """

    id: str
    websocket: Websocket
    state: ConnectionState
    room_id: str | None
    _send_stream: MemoryObjectSendStream
    _receive_stream: MemoryObjectReceiveStream

    def __init__(self, websocket: Websocket, max_buffer_size: int = 65536, log: Logger | None = None):
        """Initialize the object.

        Arguments:
            websocket: The transport to write outgoing messages to.
            max_buffer_size: How many outgoing messages can wait to be sent
                before new ones are dropped.
            log: An optional logger.
        """
        self.id = uuid4().hex[:8]
        self.websocket = websocket
        self.state = ConnectionState.UNJOINED
        self.room_id = None
        self.log = log or getLogger(__name__)
        self._send_stream, self._receive_stream = create_memory_object_stream(
            max_buffer_size=max_buffer_size
        )

    def __repr__(self) -> str:
        return f"<Connection {self.id} {self.state.value} room={self.room_id}>"

    @property
    def is_open(self) -> bool:
        return self.state is not ConnectionState.CLOSED

    @property
    def is_joined(self) -> bool:
        return self.state is ConnectionState.JOINED

    def joined(self) -> None:
        """Move the connection to the joined state."""
        if self.state is ConnectionState.CLOSED:
            raise RuntimeError(f"Connection {self.id} is closed")
        self.state = ConnectionState.JOINED

    def deliver(self, message: str) -> bool:
        """Queue a message for this connection without waiting.

        Arguments:
            message: The frame to send.

        Returns:
            True if the message was queued, False if it was dropped.
        """
        if not self.is_open:
            return False
        try:
            self._send_stream.send_nowait(message)
        except WouldBlock:
            self.log.debug("Outgoing buffer full, dropping message for connection %s", self.id)
            return False
        except (BrokenResourceError, ClosedResourceError):
            return False
        return True

    async def run_sender(self) -> None:
        async with self._receive_stream:
            async for message in self._receive_stream:
                try:
                    await self.websocket.send(message)
                except Exception as e:
                    self.log.debug("Could not send to connection %s: %s", self.id, e)

    def close(self) -> None:
        """Close the connection. Nothing can be queued for it afterwards."""
        self.state = ConnectionState.CLOSED
        self._send_stream.close()
