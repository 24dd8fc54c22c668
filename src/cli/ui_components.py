"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida.

    Por qué aquí:
    - Evita dependencias circulares (main <-> doctor).
    - En modo stdio no se imprime: el banner iría por un canal compartido.
    """

    title = Text("Paperless NGX MCP", style="bold cyan")
    subtitle = Text("Documentos • Tags • Saved views", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def print_config_warning(console: Console, missing: list[str]) -> None:
    body = Text()
    body.append("Missing: " + ", ".join(missing) + "\n\n", style="bold")
    body.append("The server will start, but every tool call returns a configuration error.\n")
    body.append("Run `paperless-mcp doctor setup` or set the environment variables.", style="dim")
    console.print(Panel(body, title=Text("Configuration", style="bold yellow"), border_style="yellow"))


def build_doctor_table(title: str) -> Table:
    table = Table(title=title)
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")
    return table
