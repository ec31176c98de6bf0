"""Run the CLI with ``python -m socket_events``."""

from .cli import main

main()
