from __future__ import annotations

import logging
from contextlib import AsyncExitStack

from anyio import TASK_STATUS_IGNORED, Event, create_task_group
from anyio.abc import TaskGroup, TaskStatus

from .connection import Connection
from .messages import Malformed, decode_message
from .registry import RoomRegistry
from .relay import SignalRelay
from .websocket import Websocket


class SignalingServer:
    """A WebSocket signaling server.

    The server must be running before connections are served:
    ```py
    async with signaling_server, websockets.serve(signaling_server.serve, "0.0.0.0", 3000):
        ...
    ```
    """

    registry: RoomRegistry
    relay: SignalRelay
    _started: Event | None
    _task_group: TaskGroup | None

    def __init__(self, max_buffer_size: int = 65536, log=None):
        """Initialize the object.

        Arguments:
            max_buffer_size: How many outgoing messages each connection can have waiting.
            log: An optional logger.
        """
        self.max_buffer_size = max_buffer_size
        self.log = log or logging.getLogger(__name__)
        self.registry = RoomRegistry(log=self.log)
        self.relay = SignalRelay(self.registry, log=self.log)
        self._started = None
        self._task_group = None

    @property
    def started(self):
        if self._started is None:
            self._started = Event()
        return self._started

    async def serve(self, websocket: Websocket) -> None:
        """Handle a connection until its transport closes.

        Arguments:
            websocket: The WebSocket of the connection.
        """
        if self._task_group is None:
            raise RuntimeError(
                "The SignalingServer is not running: use `async with signaling_server:` or `await signaling_server.start()`"
            )

        await self._task_group.start(self._serve, websocket)

    async def _serve(self, websocket: Websocket, *, task_status: TaskStatus[None] = TASK_STATUS_IGNORED):
        connection = Connection(websocket, max_buffer_size=self.max_buffer_size, log=self.log)
        async with create_task_group() as tg:
            tg.start_soon(connection.run_sender)
            try:
                async for frame in websocket:
                    message = decode_message(frame)
                    if isinstance(message, Malformed):
                        self.log.debug(
                            "Dropping frame from connection %s: %s", connection.id, message.reason
                        )
                        continue
                    self.relay.handle_message(connection, message)
            except Exception as e:
                self.log.debug("Transport error on connection %s: %s", connection.id, e)
            finally:
                # remove the connection from its room
                self.registry.leave(connection)
                connection.close()
                tg.cancel_scope.cancel()
        task_status.started()

    async def __aenter__(self) -> SignalingServer:
        if self._task_group is not None:
            raise RuntimeError("SignalingServer already running")

        async with AsyncExitStack() as exit_stack:
            tg = create_task_group()
            self._task_group = await exit_stack.enter_async_context(tg)
            self._exit_stack = exit_stack.pop_all()
            self.started.set()

        return self

    async def __aexit__(self, exc_type, exc_value, exc_tb):
        if self._task_group is None:
            raise RuntimeError("SignalingServer not running")

        self._task_group.cancel_scope.cancel()
        self._task_group = None
        return await self._exit_stack.__aexit__(exc_type, exc_value, exc_tb)

    async def start(self):
        """Start the server and run until stopped."""
        if self._task_group is not None:
            raise RuntimeError("SignalingServer already running")

        # create the task group and wait forever
        async with create_task_group() as self._task_group:
            self._task_group.start_soon(Event().wait)
            self.started.set()

    def stop(self):
        """Stop the server."""
        if self._task_group is None:
            raise RuntimeError("SignalingServer not running")

        self._task_group.cancel_scope.cancel()
        self._task_group = None
