"""Socket event server.

Ties the pieces together: the registry tracks peers, the dispatcher holds
handlers, the router performs emissions, and the lifecycle methods below
translate transport notifications into registry updates and event firings.

Flow for one peer:
1. Transport accepts the socket -> ``handle_connect`` registers it and fires
   ``$connection`` with the new id
2. Each inbound frame -> ``handle_message`` fires ``$message`` with the raw
   frame, then either the decoded event or ``$unknown``
3. Peer disconnects -> ``handle_disconnect`` unregisters it (no ``$close``;
   that event belongs to server shutdown)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from starlette.routing import WebSocketRoute
from starlette.websockets import WebSocket

from .codec import DecodeFailure, decode
from .dispatcher import EventDispatcher, EventHandler
from .errors import ServerClosedError
from .events import EVENTS, ReservedEvent
from .registry import ConnectionRegistry
from .router import EmissionRouter, Targets
from .transport.base import CLOSE_GOING_AWAY, PeerSocket
from .transport.websocket import StarletteSocket

logger = logging.getLogger(__name__)


class SocketEventServer:
    """Event-routing layer over WebSocket connections.

    Usage:
        server = SocketEventServer()
        server.on("chat", lambda data: server.emit("chat", data))
        app = Starlette(routes=server.routes("/ws"))
    """

    def __init__(self) -> None:
        self._registry = ConnectionRegistry()
        self._dispatcher = EventDispatcher()
        self._router = EmissionRouter(self._registry, self.handle_send_result)
        self._closed = False

    # =========================================================================
    # Public API
    # =========================================================================

    @property
    def available_events(self) -> Mapping[str, str]:
        """Reserved event names, e.g. ``available_events["close"]``."""
        return EVENTS

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def connection_ids(self) -> list[str]:
        """Ids of all live connections, oldest first."""
        return self._registry.ids()

    def on(self, event: str, handler: EventHandler) -> None:
        """Register a handler for a peer event or a reserved event.

        Raises:
            InvalidArgument: If event is not a string or handler not callable
            ServerClosedError: If the server was closed
        """
        self._ensure_open("register handlers")
        self._dispatcher.on(event, handler)

    def emit(self, event: str, data: Any, targets: Targets | None = None) -> None:
        """Send an event to every peer, or only to the given connection ids.

        Write failures are not raised; they fire ``$error``.

        Raises:
            InvalidArgument: If event is not a string or data is callable
            ServerClosedError: If the server was closed
        """
        self._ensure_open("emit")
        self._router.emit(event, data, targets)

    def close(self) -> None:
        """Shut the server down.

        Closes every connection, fires ``$close`` once, then drops all
        connections and handlers. Later ``on``/``emit`` calls raise
        ``ServerClosedError``; closing again does nothing.
        """
        if self._closed:
            logger.debug("Server already closed")
            return
        self._closed = True

        connections = self._registry.all()
        logger.info(f"Closing server with {len(connections)} connection(s)")
        for connection in connections:
            try:
                connection.socket.close(CLOSE_GOING_AWAY, "Server closed")
            except Exception:
                logger.exception(f"Failed to close connection {connection.id}")

        try:
            self._dispatcher.fire(ReservedEvent.CLOSE.value, None)
        finally:
            self._registry.clear()
            self._dispatcher.clear()

    # =========================================================================
    # Transport notifications
    # =========================================================================

    def handle_connect(self, socket: PeerSocket) -> str:
        """Register an accepted socket and announce it.

        Returns:
            The new connection id
        """
        connection_id = self._register(socket)
        self._dispatcher.fire(ReservedEvent.CONNECTION.value, connection_id)
        return connection_id

    def handle_message(self, connection_id: str, raw: str | bytes) -> None:
        """Route one inbound frame."""
        self._dispatcher.fire(ReservedEvent.MESSAGE.value, raw)

        decoded = decode(raw)
        if isinstance(decoded, DecodeFailure):
            logger.warning(f"Unknown message from {connection_id}: {decoded.reason}")
            self._dispatcher.fire(ReservedEvent.UNKNOWN.value, raw)
            return

        logger.debug(f"Event {decoded.event} from {connection_id}")
        self._dispatcher.fire(decoded.event, decoded.data)

    def handle_disconnect(self, connection_id: str) -> None:
        """Forget a connection once the peer is gone."""
        if self._registry.unregister(connection_id) is not None:
            logger.info(f"Connection {connection_id} closed ({len(self._registry)} live)")

    def handle_send_result(self, connection_id: str, error: BaseException | None) -> None:
        """Report a finished write; only failures fire ``$error``."""
        if error is None:
            return
        logger.warning(f"Send to {connection_id} failed: {error}")
        self._dispatcher.fire(ReservedEvent.ERROR.value, error)

    # =========================================================================
    # ASGI endpoint
    # =========================================================================

    async def endpoint(self, websocket: WebSocket) -> None:
        """WebSocket endpoint serving one peer for its whole lifetime."""
        if self._closed:
            await websocket.close(code=CLOSE_GOING_AWAY, reason="Server closed")
            return

        socket = StarletteSocket(websocket)
        await socket.accept()
        # Server may have closed while the handshake was in flight
        if self._closed:
            socket.close(CLOSE_GOING_AWAY, "Server closed")
            return
        connection_id = self._register(socket)

        try:
            self._run_handlers(
                connection_id, self._dispatcher.fire, ReservedEvent.CONNECTION.value, connection_id
            )

            while True:
                raw = await socket.receive()
                if raw is None:
                    break
                self._run_handlers(connection_id, self.handle_message, connection_id, raw)

        except Exception as e:
            logger.exception(f"WebSocket error for {connection_id}: {e}")
        finally:
            self.handle_disconnect(connection_id)

    def routes(self, path: str = "/") -> list[WebSocketRoute]:
        """Starlette routes exposing this server at path."""
        return [WebSocketRoute(path, self.endpoint)]

    def _register(self, socket: PeerSocket) -> str:
        connection = self._registry.register(socket)
        logger.info(f"Connection {connection.id} opened ({len(self._registry)} live)")
        return connection.id

    def _run_handlers(self, connection_id: str, fire: Callable[..., Any], *args: Any) -> None:
        """Run a firing on behalf of a peer.

        A failing handler is logged; it must not drop the peer's connection.
        """
        try:
            fire(*args)
        except Exception as e:
            logger.exception(f"Handler failed for {connection_id}: {e}")

    def _ensure_open(self, action: str) -> None:
        if self._closed:
            raise ServerClosedError(f"Cannot {action}: server is closed")
