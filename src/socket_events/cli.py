"""socket-events CLI.

Usage:
    socket-events serve                          # Serve on ws://127.0.0.1:8888/
    socket-events serve --port 9000 --path /ws   # Custom port and route
    socket-events serve --echo chat              # Broadcast every "chat" event back
    socket-events send ws://localhost:8888/ chat '{"text": "hi"}' --wait 1
    socket-events send ws://localhost:8888/ - 'not json' --raw     # Frame sent as-is
"""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
import sys
from collections.abc import Callable
from typing import Any

import click
import websockets

from .app import create_app
from .client import SocketEventClient
from .codec import encode
from .config import LOG_LEVELS, ServerConfig
from .errors import InvalidArgument
from .events import EVENTS, is_reserved
from .server import SocketEventServer

logger = logging.getLogger(__name__)


def build_server(echo_events: tuple[str, ...] = ()) -> SocketEventServer:
    """Create a server that logs reserved events and echoes the given ones."""
    server = SocketEventServer()

    for event in echo_events:
        server.on(event, _broadcaster(server, event))

    server.on(EVENTS["connection"], lambda connection_id: logger.info(f"Peer {connection_id}"))
    server.on(EVENTS["unknown"], lambda raw: logger.info(f"Unknown message: {raw!r}"))
    server.on(EVENTS["error"], lambda error: logger.error(f"Send failed: {error}"))
    server.on(EVENTS["close"], lambda _: logger.info("Server closed"))
    return server


def _broadcaster(server: SocketEventServer, event: str) -> Callable[[Any], None]:
    def broadcast(data: Any) -> None:
        server.emit(event, data)

    return broadcast


def parse_data(text: str | None) -> Any:
    """Interpret a DATA argument as JSON, falling back to a plain string."""
    if text is None:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError:
        return text


@click.group()
def main() -> None:
    """socket-events - event routing over WebSocket connections."""
    pass


@main.command()
@click.option("--host", default=None, help="Host to bind to [env: SOCKET_EVENTS_HOST]")
@click.option("--port", type=int, default=None, help="Port to bind to [env: SOCKET_EVENTS_PORT]")
@click.option("--path", default=None, help="WebSocket route [env: SOCKET_EVENTS_PATH]")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Logging level [env: SOCKET_EVENTS_LOG_LEVEL]",
)
@click.option(
    "--echo",
    "echo_events",
    multiple=True,
    help="Broadcast this event back to every peer (repeatable)",
)
def serve(
    host: str | None,
    port: int | None,
    path: str | None,
    log_level: str | None,
    echo_events: tuple[str, ...],
) -> None:
    """Run the WebSocket server."""
    import uvicorn

    for event in echo_events:
        if is_reserved(event):
            raise click.BadParameter(f"{event!r} is a reserved event", param_hint="--echo")

    overrides = {"host": host, "port": port, "path": path, "log_level": log_level}
    try:
        config = ServerConfig.from_env()
        config = dataclasses.replace(
            config, **{key: value for key, value in overrides.items() if value is not None}
        )
    except ValueError as e:
        raise click.UsageError(str(e)) from e

    logging.basicConfig(
        level=config.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    app = create_app(build_server(echo_events), config)

    click.echo(f"Starting socket-events server on {config.url}", err=True)
    click.echo("Press Ctrl+C to stop", err=True)

    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


@main.command()
@click.argument("url")
@click.argument("event")
@click.argument("data", required=False)
@click.option("--raw", is_flag=True, help="Send DATA verbatim as the whole frame; EVENT is ignored")
@click.option("--wait", default=0, type=int, help="Number of server events to print before exiting")
@click.option("--timeout", default=5.0, type=float, help="Seconds to wait for each server event")
def send(url: str, event: str, data: str | None, raw: bool, wait: int, timeout: float) -> None:
    """Send one EVENT with DATA (JSON or plain text) to the server at URL."""
    if raw:
        message = data or ""
    else:
        try:
            message = encode(event, parse_data(data))
        except InvalidArgument as e:
            raise click.BadParameter(str(e), param_hint="EVENT") from e

    async def run() -> None:
        try:
            async with SocketEventClient(url) as client:
                await client.send_raw(message)
                for _ in range(wait):
                    envelope = await client.receive(timeout=timeout)
                    click.echo(json.dumps(envelope.model_dump()))
        except TimeoutError:
            click.echo(f"No event received within {timeout}s", err=True)
            sys.exit(1)
        except (OSError, websockets.InvalidURI, websockets.InvalidHandshake) as e:
            click.echo(f"Cannot connect to {url}: {e}", err=True)
            sys.exit(1)

    asyncio.run(run())


if __name__ == "__main__":
    main()
