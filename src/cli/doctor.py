"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console

from adapters.paperless_api import PaperlessApiClient
from cli.ui_components import build_doctor_table
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.domain.errors import PaperlessError
from core.services.paperless_service import PaperlessService

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _mask(token: str) -> str:
    if len(token) <= 8:
        return "*" * len(token)
    return f"{token[:4]}…{token[-4:]}"


async def _check_api(settings: AppSettings) -> tuple[bool, str]:
    service = PaperlessService(PaperlessApiClient(settings))
    try:
        await service.check_connection()
    except PaperlessError as exc:
        return False, f"{exc.category.value}: {exc.message}"
    return True, "API reachable, token accepted"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()
    table = build_doctor_table("Paperless MCP Doctor")

    # Config
    if settings.url:
        table.add_row("PAPERLESS_URL", "OK", settings.url)
    else:
        table.add_row("PAPERLESS_URL", "MISSING", "Set it or run `doctor setup`")
    if settings.token:
        table.add_row("PAPERLESS_TOKEN", "OK", _mask(settings.token))
    else:
        table.add_row("PAPERLESS_TOKEN", "MISSING", "Create one in Settings → API Tokens")
    table.add_row("Transport", "OK", f"{settings.transport} ({settings.host}:{settings.port})")
    table.add_row("User config", "OK" if get_user_env_file().exists() else "NONE", str(get_user_env_file()))

    # Connectivity
    if settings.is_configured:
        ok_api, detail_api = asyncio.run(_check_api(settings))
        table.add_row("Paperless API", "OK" if ok_api else "FAIL", detail_api)
    else:
        ok_api = False
        table.add_row("Paperless API", "SKIPPED", "Configuration incomplete")

    _console.print(table)

    if not ok_api:
        raise typer.Exit(code=1)


@app.command(name="setup")
def setup() -> None:
    """Interactive setup (stores URL and token in the user config .env).

    Useful for MCP clients that launch the server as a subprocess: no
    manual .env editing.
    """

    current = AppSettings()
    url = typer.prompt("Paperless URL", default=current.url or "", show_default=bool(current.url)).strip()
    token = typer.prompt("Paperless API token", hide_input=True, confirmation_prompt=False).strip()

    if not url or not token:
        raise typer.BadParameter("URL and token are required")
    if not url.startswith(("http://", "https://")):
        raise typer.BadParameter("URL must start with http:// or https://")

    env_path = write_user_env_vars({"PAPERLESS_URL": url.rstrip("/"), "PAPERLESS_TOKEN": token})

    _console.print(f"[green]Saved Paperless config to:[/green] {env_path}")
