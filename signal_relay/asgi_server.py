from __future__ import annotations

import json
import os
from typing import Any, Awaitable, Callable

from .websocket_server import SignalingServer


class ASGIWebsocket:
    def __init__(
        self,
        receive: Callable[[], Awaitable[dict[str, Any]]],
        send: Callable[[dict[str, Any]], Awaitable[None]],
        on_disconnect: Callable[[dict[str, Any]], Awaitable[None]] | None = None,
    ):
        self._receive = receive
        self._send = send
        self._on_disconnect = on_disconnect

    def __aiter__(self):
        return self

    async def __anext__(self) -> str | bytes:
        message = await self._receive()
        if message["type"] == "websocket.disconnect":
            if self._on_disconnect is not None:
                await self._on_disconnect(message)
            raise StopAsyncIteration()
        if message.get("text") is not None:
            return message["text"]
        return message.get("bytes") or b""

    async def send(self, message: str) -> None:
        await self._send({"type": "websocket.send", "text": message})


class ASGIServer:
    """ASGI server."""

    def __init__(
        self,
        signaling_server: SignalingServer,
        on_connect: Callable[[dict[str, Any], dict[str, Any]], Awaitable[bool]] | None = None,
        on_disconnect: Callable[[dict[str, Any]], Awaitable[None]] | None = None,
    ):
        """Initialize the object.

        Arguments:
            signaling_server: An instance of SignalingServer, which must be running.
            on_connect: An optional callback to call when connecting the WebSocket.
                If the callback returns True, the WebSocket is not accepted.
            on_disconnect: An optional callback called when disconnecting the WebSocket.
        """
        self._signaling_server = signaling_server
        self._on_connect = on_connect
        self._on_disconnect = on_disconnect

    async def __call__(
        self,
        scope: dict[str, Any],
        receive: Callable[[], Awaitable[dict[str, Any]]],
        send: Callable[[dict[str, Any]], Awaitable[None]],
    ):
        if scope["type"] == "websocket":
            await self._websocket(scope, receive, send)
        elif scope["type"] == "http":
            await self._http(scope, send)
        elif scope["type"] == "lifespan":
            await self._lifespan(receive, send)

    async def _websocket(self, scope, receive, send):
        msg = await receive()
        if msg["type"] != "websocket.connect":
            return
        if self._on_connect is not None:
            close = await self._on_connect(msg, scope)
            if close:
                await send({"type": "websocket.close"})
                return

        await send({"type": "websocket.accept"})
        websocket = ASGIWebsocket(receive, send, self._on_disconnect)
        await self._signaling_server.serve(websocket)

    async def _http(self, scope, send):
        method, path = scope["method"], scope["path"]
        headers = [(b"access-control-allow-origin", b"*")]
        if method == "OPTIONS":
            headers.append((b"access-control-allow-methods", b"GET,HEAD,OPTIONS"))
            requested = dict(scope.get("headers", [])).get(b"access-control-request-headers")
            if requested:
                headers.append((b"access-control-allow-headers", requested))
            await send({"type": "http.response.start", "status": 204, "headers": headers})
            await send({"type": "http.response.body", "body": b""})
            return
        if method in ("GET", "HEAD") and path == "/health":
            status, body = 200, {"ok": True}
        elif method in ("GET", "HEAD") and path == "/api/config":
            status, body = 200, {"mode": os.environ.get("MODE") or "wasm"}
        else:
            status, body = 404, {"error": "not_found"}
        headers.append((b"content-type", b"application/json"))
        await send({"type": "http.response.start", "status": status, "headers": headers})
        payload = json.dumps(body).encode()
        await send({"type": "http.response.body", "body": b"" if method == "HEAD" else payload})

    async def _lifespan(self, receive, send):
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return
