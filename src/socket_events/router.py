"""Emission routing.

Resolves which connections an emit call targets and writes the encoded
envelope to each of them. Every target is written independently: a failing
write is reported through the failure callback and never stops the others.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from .codec import encode
from .errors import InvalidArgument
from .registry import Connection, ConnectionRegistry

logger = logging.getLogger(__name__)

# Called with (connection_id, error) once a write to a connection finished
SendResultCallback = Callable[[str, BaseException | None], None]

# A single connection id or several
Targets = str | Iterable[str]


class EmissionRouter:
    """Sends envelopes to all or selected live connections."""

    def __init__(self, registry: ConnectionRegistry, on_send_result: SendResultCallback):
        self._registry = registry
        self._on_send_result = on_send_result

    def emit(self, event: str, data: Any, targets: Targets | None = None) -> None:
        """Send an envelope.

        Args:
            event: Event name
            data: Any JSON-serializable, non-callable value
            targets: Connection id or ids; None means every live connection.
                Ids without a live connection are skipped.

        Raises:
            InvalidArgument: If event, data or targets are of the wrong type
        """
        if not isinstance(event, str) or callable(data):
            raise InvalidArgument("Need a string as first argument and no function as second.")

        message = encode(event, data)
        connections = self._resolve(targets)

        sent = 0
        for connection in connections:
            if not connection.is_open:
                logger.debug(f"Skipping {connection.id}: not open")
                continue
            self._send(connection, message)
            sent += 1

        logger.debug(f"Emitted {event} to {sent} connection(s)")

    def _resolve(self, targets: Targets | None) -> list[Connection]:
        if targets is None:
            return self._registry.all()

        if isinstance(targets, str):
            ids: list[str] = [targets]
        elif isinstance(targets, Iterable) and not isinstance(targets, (bytes, dict)):
            ids = list(targets)
            if not all(isinstance(connection_id, str) for connection_id in ids):
                raise InvalidArgument("Target ids must be strings.")
        else:
            raise InvalidArgument("Targets must be a connection id or a list of ids.")

        resolved: list[Connection] = []
        seen: set[str] = set()
        for connection_id in ids:
            if connection_id in seen:
                continue
            seen.add(connection_id)

            connection = self._registry.lookup(connection_id)
            if connection is None:
                logger.debug(f"Skipping {connection_id}: no live connection")
                continue
            resolved.append(connection)
        return resolved

    def _send(self, connection: Connection, message: str) -> None:
        connection_id = connection.id

        def on_complete(error: BaseException | None) -> None:
            self._on_send_result(connection_id, error)

        try:
            connection.socket.send(message, on_complete)
        except Exception as e:
            # Write could not even be scheduled; report it like any other failure
            self._on_send_result(connection_id, e)
