"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import docker
import typer
from rich.console import Console
from rich.table import Table

from adapters.healthcheck import wait_for_healthy
from cli.ui_components import build_settings_table
from core.config import HarnessSettings
from core.errors import StartupError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


def _check_docker() -> tuple[bool, str]:
    try:
        client = docker.from_env()
        try:
            client.ping()
            version = client.version().get("Version", "unknown")
        finally:
            client.close()
        return True, f"Docker {version}"
    except Exception as exc:
        return False, str(exc)


def _check_endpoint(url: str) -> tuple[bool, str]:
    try:
        response = asyncio.run(wait_for_healthy(url, timeout=5.0))
        return True, f"HTTP {response.status_code}"
    except StartupError as exc:
        return False, str(exc)


@app.command()
def run(
    health_url: str | None = typer.Option(
        None,
        "--health-url",
        help="Healthcheck of an already running instance to probe.",
    ),
) -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = HarnessSettings()

    table = Table(title="Twisp Harness Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    ok_docker, detail_docker = _check_docker()
    table.add_row("Docker daemon", "OK" if ok_docker else "FAIL", detail_docker)

    if health_url:
        ok_health, detail_health = _check_endpoint(health_url)
        table.add_row("Healthcheck", "OK" if ok_health else "FAIL", detail_health)

    _console.print(table)
    _console.print(build_settings_table(settings))

    if not ok_docker:
        _console.print(
            "\n[yellow]Note:[/yellow] `up` and the integration tests need a reachable Docker daemon "
            "(check DOCKER_HOST or the socket permissions)."
        )
        raise typer.Exit(code=1)
