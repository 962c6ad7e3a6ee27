from __future__ import annotations

import threading
from logging import Logger, getLogger

from .connection import Connection


class RoomRegistry:
    """The members of every room.

    A room exists only while it has at least one member: it is created by the
    first `join()` and deleted by the last `leave()`.
    """

    _rooms: dict[str, set[Connection]]
    _lock: threading.Lock

    def __init__(self, log: Logger | None = None):
        self.log = log or getLogger(__name__)
        self._rooms = {}
        # guards _rooms and the room_id of member connections
        self._lock = threading.Lock()

    def __contains__(self, room_id: object) -> bool:
        with self._lock:
            return room_id in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def join(self, room_id: str, connection: Connection) -> None:
        """Add a connection to a room, moving it out of its previous room if any.

        Arguments:
            room_id: The room to join.
            connection: The joining connection.
        """
        with self._lock:
            if connection.room_id is not None and connection.room_id != room_id:
                self._discard(connection.room_id, connection)
            self._rooms.setdefault(room_id, set()).add(connection)
            connection.room_id = room_id

    def leave(self, connection: Connection) -> None:
        """Remove a connection from its room. Does nothing if it is not in a room.

        Arguments:
            connection: The leaving connection.
        """
        with self._lock:
            if connection.room_id is None:
                return
            self._discard(connection.room_id, connection)
            connection.room_id = None

    def members(self, room_id: str) -> frozenset[Connection]:
        with self._lock:
            return frozenset(self._rooms.get(room_id, ()))

    def members_excluding(self, room_id: str, connection: Connection) -> frozenset[Connection]:
        """
        Returns:
            The other connections in the room, empty if the room does not exist.
        """
        with self._lock:
            return frozenset(c for c in self._rooms.get(room_id, ()) if c is not connection)

    def _discard(self, room_id: str, connection: Connection) -> None:
        members = self._rooms.get(room_id)
        if members is None:
            return
        members.discard(connection)
        if not members:
            del self._rooms[room_id]
            self.log.debug("Deleted empty room %s", room_id)
