"""Error types raised by the socket event layer."""

from __future__ import annotations


class SocketEventsError(Exception):
    """Base class for socket event errors."""

    pass


class InvalidArgument(SocketEventsError, TypeError):
    """An argument passed to ``on``/``emit`` violates the call contract."""

    pass


class ServerClosedError(SocketEventsError, RuntimeError):
    """The server was closed and can no longer register handlers or emit."""

    pass
