"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from socket_events import ConnectionRegistry, SocketEventServer


class FakeSocket:
    """In-memory PeerSocket recording what was written to it.

    Args:
        fail_with: Failure reported to the completion callback of every send
        raise_on_send: Exception raised synchronously by send
    """

    def __init__(
        self,
        fail_with: BaseException | None = None,
        raise_on_send: BaseException | None = None,
    ):
        self.fail_with = fail_with
        self.raise_on_send = raise_on_send
        self.is_open = True
        self.sent: list[str] = []
        self.closed_with: list[tuple[int, str | None]] = []

    def send(self, text, on_complete=None) -> None:
        if self.raise_on_send is not None:
            raise self.raise_on_send
        self.sent.append(text)
        if on_complete is not None:
            on_complete(self.fail_with)

    def close(self, code=1000, reason=None) -> None:
        self.closed_with.append((code, reason))
        self.is_open = False


@pytest.fixture
def make_socket() -> Callable[..., FakeSocket]:
    """Factory for fake peer sockets."""
    return FakeSocket


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def server() -> SocketEventServer:
    return SocketEventServer()
