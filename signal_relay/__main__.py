from __future__ import annotations

import argparse
import logging
import os

import anyio
import uvicorn

from .asgi_server import ASGIServer
from .websocket_server import SignalingServer

logger = logging.getLogger("signal_relay")


def make_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="signal-relay", description="Relay WebRTC signaling messages between room members."
    )
    parser.add_argument("--host", default="0.0.0.0", help="Interface to listen on.")
    parser.add_argument(
        "--port",
        type=int,
        default=int(os.environ.get("PORT", 3000)),
        help="Port to listen on (default: $PORT or 3000).",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=("critical", "error", "warning", "info", "debug"),
    )
    return parser


async def run(host: str, port: int, log_level: str) -> None:
    signaling_server = SignalingServer(log=logger)
    config = uvicorn.Config(ASGIServer(signaling_server), host=host, port=port, log_level=log_level)
    server = uvicorn.Server(config)
    async with signaling_server:
        logger.info("Signaling server listening on ws://%s:%d", host, port)
        await server.serve()


def main(argv: list[str] | None = None) -> None:
    args = make_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(), format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    anyio.run(run, args.host, args.port, args.log_level)


if __name__ == "__main__":
    main()
