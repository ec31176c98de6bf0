"""ASGI application.

Creates the Starlette application serving a ``SocketEventServer`` over
WebSocket. The server is closed when the application shuts down.
"""

from __future__ import annotations

import contextlib
import logging
from collections.abc import AsyncIterator

from starlette.applications import Starlette

from .config import ServerConfig
from .server import SocketEventServer

logger = logging.getLogger(__name__)


def create_app(
    server: SocketEventServer | None = None,
    config: ServerConfig | None = None,
) -> Starlette:
    """Create the application.

    Args:
        server: Server to expose; a new one is created if omitted
        config: Configuration; read from the environment if omitted

    Returns:
        Configured Starlette application, with the server at ``app.state.server``
    """
    config = config or ServerConfig.from_env()
    server = server or SocketEventServer()

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        logger.info(f"Serving socket events at {config.path}")
        yield
        if not server.closed:
            server.close()

    app = Starlette(routes=server.routes(config.path), lifespan=lifespan)
    app.state.server = server
    return app
