"""CLI principal (Typer).

Comandos:
- `serve`: arranca el servidor MCP (stdio o HTTP streamable).
- `doctor ...`: diagnósticos de configuración y conectividad.
"""

from __future__ import annotations

import logging

import typer

from cli import doctor
from cli.ui_components import print_banner, print_config_warning
from core.config import AppSettings
from core.log_config import configure_logging, get_stderr_console

app = typer.Typer(
    no_args_is_help=True,
    help="MCP server exposing a Paperless NGX document archive to AI agents.",
)
app.add_typer(doctor.app, name="doctor")

logger = logging.getLogger(__name__)

MCP_PATH = "/mcp"


@app.command()
def serve(
    transport: str | None = typer.Option(
        None, "--transport", "-t", help="Override transport: 'http' or 'stdio'."
    ),
    host: str | None = typer.Option(None, "--host", help="Bind address for the HTTP transport."),
    port: int | None = typer.Option(None, "--port", "-p", help="Port for the HTTP transport."),
    log_level: str | None = typer.Option(None, "--log-level", help="DEBUG, INFO, WARNING, ..."),
) -> None:
    """Start the MCP server."""

    # Import diferido: fastmcp tarda en cargar y `doctor` no lo necesita.
    from adapters.mcp_server import create_server  # noqa: PLC0415

    settings = AppSettings()
    configure_logging(log_level or settings.log_level)

    selected = (transport or settings.transport).strip().lower()
    if selected not in ("http", "stdio"):
        raise typer.BadParameter("transport must be 'http' or 'stdio'", param_hint="--transport")

    console = get_stderr_console()
    if selected == "http":
        print_banner(console)
    if not settings.is_configured:
        # El servidor arranca igual: cada tool devuelve el error de config.
        print_config_warning(console, settings.missing_settings())

    server = create_server()
    if selected == "stdio":
        logger.info("Paperless NGX MCP server running on stdio")
        server.run(transport="stdio", show_banner=False)
        return

    bind_host = host or settings.host
    bind_port = port or settings.port
    logger.info("Paperless NGX MCP server on http://%s:%s%s", bind_host, bind_port, MCP_PATH)
    logger.info("Health check: http://%s:%s/health", bind_host, bind_port)
    server.run(transport="http", host=bind_host, port=bind_port, path=MCP_PATH, show_banner=False)


def run() -> None:
    app()
