"""Reserved event names.

Reserved events are synthesized by the server itself. Their names carry a
leading ``$`` so they never collide with an event a peer or the host
application chooses (a user event may be literally called ``"message"``).
"""

from __future__ import annotations

from enum import Enum
from types import MappingProxyType

RESERVED_MARKER = "$"


class ReservedEvent(str, Enum):
    """Server-internal event names."""

    MESSAGE = "$message"  # Every inbound raw message, before decoding
    ERROR = "$error"  # A write to a connection failed
    UNKNOWN = "$unknown"  # Inbound message is not a well-formed envelope
    CLOSE = "$close"  # Server shutdown
    CONNECTION = "$connection"  # New peer accepted, payload is its id


# Short name -> marked name, e.g. EVENTS["close"] == "$close"
EVENTS = MappingProxyType({member.name.lower(): member.value for member in ReservedEvent})


def is_reserved(event: str) -> bool:
    """Check whether an event name lives in the reserved namespace."""
    return event.startswith(RESERVED_MARKER)
