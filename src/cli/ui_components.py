"""Componentes de UI para la CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en `up` y `doctor`.
"""

from __future__ import annotations

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from adapters.twisp_container import TwispInstance
from core.config import HarnessSettings


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("TWISP-HARNESS", style="bold cyan")
    subtitle = Text("Ledger local • Healthcheck • GraphQL resiliente", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def build_instance_table(instance: TwispInstance) -> Table:
    """Tabla con las URLs de un contenedor en ejecución."""

    table = Table(title="Twisp local")
    table.add_column("Item", style="cyan", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("GraphQL endpoint", instance.endpoint)
    table.add_row("Healthcheck", instance.health_url)
    table.add_row("Keep alive", "yes" if instance.keep_alive else "no")
    return table


def build_settings_table(settings: HarnessSettings) -> Table:
    table = Table(title="Settings")
    table.add_column("Setting", style="bright_green", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Image", settings.image)
    table.add_row("Exposed ports", ", ".join(str(p) for p in settings.exposed_ports))
    table.add_row("Health", f"{settings.health_port}{settings.health_path}")
    table.add_row("API path", settings.api_path)
    table.add_row("Startup timeout", f"{settings.startup_timeout_seconds:.0f}s")
    table.add_row(
        "Retries",
        f"{settings.max_retries} x {settings.retry_base_delay_seconds:.2f}s (exponential)",
    )
    return table
