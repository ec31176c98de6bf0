"""Server configuration.

Values come from keyword arguments, or from ``SOCKET_EVENTS_*`` environment
variables via ``ServerConfig.from_env()``. The host, port and path are handed
to uvicorn and the Starlette route as-is.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

ENV_PREFIX = "SOCKET_EVENTS_"

LOG_LEVELS = ("critical", "error", "warning", "info", "debug")


@dataclass(frozen=True)
class ServerConfig:
    """Server configuration."""

    # Network settings
    host: str = "127.0.0.1"
    port: int = 8888

    # WebSocket route
    path: str = "/"

    log_level: str = "info"

    def __post_init__(self) -> None:
        if not 0 <= self.port <= 65535:
            raise ValueError(f"Port out of range: {self.port}")
        if not self.path.startswith("/"):
            raise ValueError(f"Path must start with '/': {self.path}")
        if self.log_level.lower() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

    @property
    def url(self) -> str:
        return f"ws://{self.host}:{self.port}{self.path}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ServerConfig:
        """Build a config from SOCKET_EVENTS_HOST, _PORT, _PATH and _LOG_LEVEL."""
        env = os.environ if environ is None else environ
        values: dict[str, str | int] = {}

        if host := env.get(f"{ENV_PREFIX}HOST"):
            values["host"] = host
        if port := env.get(f"{ENV_PREFIX}PORT"):
            try:
                values["port"] = int(port)
            except ValueError as e:
                raise ValueError(f"Invalid {ENV_PREFIX}PORT: {port}") from e
        if path := env.get(f"{ENV_PREFIX}PATH"):
            values["path"] = path
        if log_level := env.get(f"{ENV_PREFIX}LOG_LEVEL"):
            values["log_level"] = log_level.lower()

        return cls(**values)  # type: ignore[arg-type]
