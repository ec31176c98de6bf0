"""Socket Events - named-event routing over WebSocket connections.

Peers send ``{"event": ..., "data": ...}`` envelopes that invoke handlers
registered on the server; the server emits envelopes to one, some, or all
connected peers.
"""

from .app import create_app
from .client import SocketEventClient
from .codec import DecodeFailure, Envelope, decode, encode
from .config import ServerConfig
from .dispatcher import EventDispatcher, EventHandler
from .errors import InvalidArgument, ServerClosedError, SocketEventsError
from .events import EVENTS, ReservedEvent, is_reserved
from .registry import Connection, ConnectionRegistry, ConnectionState
from .router import EmissionRouter
from .server import SocketEventServer

__version__ = "0.1.0"

__all__ = [
    "EVENTS",
    "Connection",
    "ConnectionRegistry",
    "ConnectionState",
    "DecodeFailure",
    "EmissionRouter",
    "Envelope",
    "EventDispatcher",
    "EventHandler",
    "InvalidArgument",
    "ReservedEvent",
    "ServerClosedError",
    "ServerConfig",
    "SocketEventClient",
    "SocketEventServer",
    "SocketEventsError",
    "create_app",
    "decode",
    "encode",
    "is_reserved",
]
