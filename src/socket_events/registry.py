"""Connection registry.

Tracks live peer connections by a server-issued identifier. Mutations and
reads go through a single lock, so no caller ever observes a connection
that is half-way through being removed.
"""

from __future__ import annotations

import logging
import threading
import uuid
from dataclasses import dataclass, field
from enum import Enum

from .transport.base import PeerSocket

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    """Lifecycle state of a connection."""

    OPEN = "open"
    CLOSED = "closed"


def generate_connection_id() -> str:
    """Generate a connection identifier."""
    return f"conn_{uuid.uuid4().hex}"


@dataclass
class Connection:
    """One live peer session.

    The socket is owned by the transport; the registry only references it.
    """

    id: str
    socket: PeerSocket
    state: ConnectionState = field(default=ConnectionState.OPEN)

    @property
    def is_open(self) -> bool:
        return self.state == ConnectionState.OPEN and self.socket.is_open


class ConnectionRegistry:
    """Live mapping from connection id to connection.

    Insertion order is preserved, which is also the broadcast order.
    """

    def __init__(self) -> None:
        self._connections: dict[str, Connection] = {}
        self._lock = threading.Lock()

    def register(self, socket: PeerSocket) -> Connection:
        """Register a newly accepted socket under a fresh id."""
        with self._lock:
            connection_id = generate_connection_id()
            while connection_id in self._connections:
                connection_id = generate_connection_id()
            connection = Connection(id=connection_id, socket=socket)
            self._connections[connection_id] = connection

        logger.debug(f"Registered connection {connection_id}")
        return connection

    def unregister(self, connection_id: str) -> Connection | None:
        """Remove a connection. Unknown ids are ignored.

        Returns:
            The removed connection, or None if it was not registered
        """
        with self._lock:
            connection = self._connections.pop(connection_id, None)
            if connection is not None:
                connection.state = ConnectionState.CLOSED

        if connection is not None:
            logger.debug(f"Unregistered connection {connection_id}")
        return connection

    def lookup(self, connection_id: str) -> Connection | None:
        """Find a live connection by id."""
        with self._lock:
            return self._connections.get(connection_id)

    def all(self) -> list[Connection]:
        """Snapshot of all live connections, in registration order."""
        with self._lock:
            return list(self._connections.values())

    def ids(self) -> list[str]:
        """Snapshot of all live connection ids, in registration order."""
        with self._lock:
            return list(self._connections)

    def clear(self) -> list[Connection]:
        """Remove every connection and return what was removed."""
        with self._lock:
            removed = list(self._connections.values())
            self._connections = {}
            for connection in removed:
                connection.state = ConnectionState.CLOSED
        return removed

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, connection_id: object) -> bool:
        with self._lock:
            return connection_id in self._connections
