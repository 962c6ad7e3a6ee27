from .asgi_server import ASGIServer  # noqa
from .connection import Connection, ConnectionState  # noqa
from .messages import Decoded, Malformed, MessageType, decode_message  # noqa
from .registry import RoomRegistry  # noqa
from .relay import SignalRelay  # noqa
from .websocket import Websocket  # noqa
from .websocket_server import SignalingServer  # noqa

__version__ = "0.1.0"
