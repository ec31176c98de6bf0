"""WebSocket client speaking the envelope protocol.

Connects to a socket event server so a peer (or a test) can send events
and read what the server emits without hand-writing JSON.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any

import websockets
from pydantic import ValidationError

from .codec import Envelope, encode

logger = logging.getLogger(__name__)


class SocketEventClient:
    """Client-side connection to a socket event server.

    Usage:
        async with SocketEventClient("ws://localhost:8888/") as client:
            await client.send("chat", {"text": "hi"})
            envelope = await client.receive(timeout=5)
    """

    def __init__(self, url: str, *, open_timeout: float = 10.0, ping_interval: float | None = 30):
        self.url = url
        self.open_timeout = open_timeout
        self.ping_interval = ping_interval
        self._websocket: Any = None  # websockets ClientConnection

    @property
    def is_connected(self) -> bool:
        return self._websocket is not None

    async def connect(self) -> None:
        """Open the WebSocket connection."""
        self._websocket = await websockets.connect(
            self.url,
            open_timeout=self.open_timeout,
            ping_interval=self.ping_interval,
        )
        logger.debug(f"Connected to {self.url}")

    async def close(self) -> None:
        """Close the connection if open."""
        if self._websocket is None:
            return
        websocket, self._websocket = self._websocket, None
        await websocket.close()

    async def send(self, event: str, data: Any = None) -> None:
        """Send an event envelope."""
        await self.send_raw(encode(event, data))

    async def send_raw(self, message: str | bytes) -> None:
        """Send a frame verbatim, envelope or not."""
        await self._require_connection().send(message)

    async def receive(self, timeout: float | None = None) -> Envelope:
        """Wait for the next envelope from the server.

        Raises:
            TimeoutError: If nothing arrived within timeout
            ValueError: If the server sent something that is not an envelope
            websockets.ConnectionClosed: If the connection closed
        """
        websocket = self._require_connection()
        data = await asyncio.wait_for(websocket.recv(), timeout=timeout)
        return Envelope.model_validate_json(data)

    async def __aenter__(self) -> SocketEventClient:
        await self.connect()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def __aiter__(self) -> AsyncIterator[Envelope]:
        """Yield envelopes until the connection closes. Malformed frames are skipped."""
        websocket = self._require_connection()
        try:
            async for data in websocket:
                try:
                    yield Envelope.model_validate_json(data)
                except ValidationError as e:
                    logger.warning(f"Invalid message from server: {e}")
        except websockets.ConnectionClosed:
            logger.debug(f"Connection to {self.url} closed")

    def _require_connection(self) -> Any:
        if self._websocket is None:
            raise ConnectionError("Not connected")
        return self._websocket
