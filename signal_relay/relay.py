from __future__ import annotations

from logging import Logger, getLogger

from .connection import Connection
from .messages import NEGOTIATION_TYPES, Decoded, MessageType, create_joined_message
from .registry import RoomRegistry


class SignalRelay:
    """Join handling and fan-out of signaling messages between room members.

    The relay never looks inside the messages it forwards: anything a joined
    connection sends, other than a join, reaches the other members of its room
    as-is.
    """

    registry: RoomRegistry

    def __init__(self, registry: RoomRegistry | None = None, log: Logger | None = None):
        """Initialize the object.

        Arguments:
            registry: The room registry to use, a new one if not given.
            log: An optional logger.
        """
        self.log = log or getLogger(__name__)
        self.registry = registry if registry is not None else RoomRegistry(log=self.log)

    def handle_join(self, connection: Connection, room_id: object) -> bool:
        """Put a connection in a room and acknowledge it to that connection only.

        Arguments:
            connection: The joining connection.
            room_id: The room identifier sent by the client.

        Returns:
            True if the connection joined, False if the join was ignored.
        """
        if not isinstance(room_id, str) or not room_id or not connection.is_open:
            return False
        connection.joined()
        self.registry.join(room_id, connection)
        self.log.info("join room=%s connection=%s", room_id, connection.id)
        connection.deliver(create_joined_message(room_id))
        return True

    def handle_signal(self, connection: Connection, message: Decoded) -> int:
        """Forward a message to the other members of the sender's room.

        Arguments:
            connection: The sending connection.
            message: The decoded message, forwarded as the text it was received as.

        Returns:
            The number of connections the message was queued for.
        """
        room_id = connection.room_id
        if not connection.is_joined or room_id is None:
            return 0
        if message.type in NEGOTIATION_TYPES:
            self.log.debug("relay %s room=%s", message.type, room_id)
        sent = 0
        for peer in self.registry.members_excluding(room_id, connection):
            if peer.is_open and peer.deliver(message.raw):
                sent += 1
        return sent

    def handle_message(self, connection: Connection, message: Decoded) -> None:
        if message.type == MessageType.JOIN:
            self.handle_join(connection, message.room_id)
        else:
            self.handle_signal(connection, message)
