"""Configuración de logging.

Todo va a STDERR: en modo stdio, STDOUT es el canal del protocolo MCP y
cualquier línea de log ahí rompería los mensajes JSON.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

_stderr_console = Console(stderr=True)


def get_stderr_console() -> Console:
    return _stderr_console


def configure_logging(level: str | int = "INFO") -> None:
    if isinstance(level, str):
        level = level.upper()

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="%H:%M:%S",
        handlers=[RichHandler(console=_stderr_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )
    # httpx loguea cada request en INFO; con nuestro DEBUG es suficiente.
    logging.getLogger("httpx").setLevel(logging.WARNING)
