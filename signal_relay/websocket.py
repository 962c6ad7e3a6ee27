from __future__ import annotations

from typing import Protocol


class Websocket(Protocol):
    """WebSocket.

    The Websocket instance receives messages using an async iterator,
    until the connection is closed:
    ```py
    async for message in websocket:
        ...
    ```
    Sending messages is done with `send()`:
    ```py
    await websocket.send(message)
    ```
    Frames are JSON text, but binary frames are accepted when receiving.
    """

    def __aiter__(self):
        return self

    async def __anext__(self) -> str | bytes:
        ...

    async def send(self, message: str) -> None:
        """Send a message.

        Arguments:
            message: The message to send.
        """
        ...
