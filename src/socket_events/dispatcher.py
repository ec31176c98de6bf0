"""Named-event dispatcher.

Handlers are synchronous callables taking a single payload argument. Firing
an event calls its handlers in registration order on the caller's thread.
Handler exceptions are not caught: the first one raised aborts the rest of
that firing and propagates to whoever called ``fire``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .errors import InvalidArgument

logger = logging.getLogger(__name__)

# Type for event handlers
EventHandler = Callable[[Any], Any]


class EventDispatcher:
    """Maps event names to ordered handler lists. Names match exactly."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}

    def on(self, event: str, handler: EventHandler) -> None:
        """Register a handler for an event.

        The same handler may be registered more than once; it then runs once
        per registration.

        Raises:
            InvalidArgument: If event is not a non-empty string or handler
                is not callable
        """
        if not isinstance(event, str) or not event or not callable(handler):
            raise InvalidArgument("Need a string as first argument and a function as second.")

        if event not in self._handlers:
            self._handlers[event] = []
        self._handlers[event].append(handler)

    def fire(self, event: str, payload: Any = None) -> int:
        """Call every handler registered for this event with payload.

        Returns:
            Number of handlers that ran
        """
        # Copy so handlers registering more handlers don't extend this firing
        handlers = list(self._handlers.get(event, ()))
        if not handlers:
            logger.debug(f"No handlers for {event}")
            return 0

        for handler in handlers:
            handler(payload)
        return len(handlers)

    def handler_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))

    def events(self) -> list[str]:
        """Event names with at least one handler."""
        return list(self._handlers)

    def clear(self) -> None:
        """Drop all registrations."""
        self._handlers = {}
