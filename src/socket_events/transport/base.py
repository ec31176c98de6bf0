"""Transport capability consumed by the event layer.

The event layer never touches a concrete socket library. It only needs a
handle it can write text to, with failures reported through a completion
callback, and that it can ask to close.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol, runtime_checkable

# Called once a write completes: None on success, the failure otherwise
SendCallback = Callable[[BaseException | None], None]

# Standard WebSocket close codes
CLOSE_NORMAL = 1000
CLOSE_GOING_AWAY = 1001


@runtime_checkable
class PeerSocket(Protocol):
    """A live connection handle owned by the transport."""

    @property
    def is_open(self) -> bool:
        """Whether the handle can still accept writes."""
        ...

    def send(self, text: str, on_complete: SendCallback | None = None) -> None:
        """Start writing text. Must not block; failures go to on_complete."""
        ...

    def close(self, code: int = CLOSE_NORMAL, reason: str | None = None) -> None:
        """Start closing the connection. Must not block."""
        ...
