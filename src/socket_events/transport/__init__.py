"""Transport layer.

The event layer talks to connections through ``PeerSocket``; the Starlette
adapter is the WebSocket implementation used by the server endpoint.
"""

from .base import CLOSE_GOING_AWAY, CLOSE_NORMAL, PeerSocket, SendCallback
from .websocket import StarletteSocket

__all__ = [
    "CLOSE_GOING_AWAY",
    "CLOSE_NORMAL",
    "PeerSocket",
    "SendCallback",
    "StarletteSocket",
]
