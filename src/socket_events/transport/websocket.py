"""Starlette WebSocket adapter.

Wraps a server-side Starlette ``WebSocket`` in the ``PeerSocket`` interface.
Writes are scheduled on the event loop that accepted the connection and
serialized with a lock; callers never await them.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import logging
from collections.abc import Coroutine
from typing import Any

from starlette.websockets import WebSocket, WebSocketState

from .base import CLOSE_NORMAL, SendCallback

logger = logging.getLogger(__name__)

_Future = asyncio.Future | concurrent.futures.Future


def _failure_of(future: _Future) -> BaseException | None:
    """Extract the failure of a finished write, None if it succeeded."""
    if future.cancelled():
        return ConnectionError("Send was cancelled")
    return future.exception()


class StarletteSocket:
    """Server-side WebSocket connection handle."""

    def __init__(self, websocket: WebSocket, loop: asyncio.AbstractEventLoop | None = None):
        self._websocket = websocket
        self._loop = loop or asyncio.get_running_loop()
        self._send_lock = asyncio.Lock()
        self._closing = False
        self._tasks: set[asyncio.Task] = set()

    @property
    def websocket(self) -> WebSocket:
        return self._websocket

    @property
    def is_open(self) -> bool:
        """Check if the WebSocket can still be written to."""
        return (
            not self._closing
            and self._websocket.client_state == WebSocketState.CONNECTED
            and self._websocket.application_state == WebSocketState.CONNECTED
        )

    async def accept(self) -> None:
        """Complete the WebSocket handshake."""
        await self._websocket.accept()

    async def receive(self) -> str | bytes | None:
        """Wait for the next inbound frame.

        Returns:
            The frame's text or bytes, or None once the peer disconnected
        """
        message = await self._websocket.receive()
        if message["type"] == "websocket.disconnect":
            self._closing = True
            return None

        text = message.get("text")
        if text is not None:
            return text
        return message.get("bytes") or b""

    def send(self, text: str, on_complete: SendCallback | None = None) -> None:
        """Schedule a text frame write."""
        future = self._submit(self._send_text(text))
        if on_complete is not None:
            future.add_done_callback(lambda done: on_complete(_failure_of(done)))

    def close(self, code: int = CLOSE_NORMAL, reason: str | None = None) -> None:
        """Schedule closing the WebSocket. Repeated calls are ignored."""
        if self._closing:
            return
        self._closing = True
        self._submit(self._close(code, reason))

    async def _send_text(self, text: str) -> None:
        async with self._send_lock:
            if not self.is_open:
                raise ConnectionError("WebSocket is not connected")
            await self._websocket.send_text(text)

    async def _close(self, code: int, reason: str | None) -> None:
        async with self._send_lock:
            if self._websocket.application_state == WebSocketState.DISCONNECTED:
                return
            try:
                await self._websocket.close(code=code, reason=reason)
            except Exception as e:
                # Peer may already be gone; nothing left to release
                logger.debug(f"WebSocket close failed: {e}")

    def _submit(self, coro: Coroutine[Any, Any, None]) -> _Future:
        """Run a coroutine on the connection's loop from any thread."""
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None

        if running is self._loop:
            task = self._loop.create_task(coro)
            # Keep a reference until done so the task isn't garbage collected
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            return task

        try:
            return asyncio.run_coroutine_threadsafe(coro, self._loop)
        except RuntimeError:
            coro.close()
            raise
