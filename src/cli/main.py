"""CLI del harness (Typer).

Comandos:
- `up`: arranca el contenedor y lo mantiene hasta Ctrl-C.
- `health`: sondea un healthcheck ya en marcha.
- `doctor run`: diagnóstico del entorno.
"""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler

from adapters.healthcheck import wait_for_healthy
from adapters.twisp_container import TwispOption, start_twisp, with_keep_alive, with_log_sink
from cli import doctor
from cli.ui_components import build_instance_table, print_banner
from core.config import HarnessSettings
from core.errors import StartupError
from core.interfaces.log_sink import LoggerSink

app = typer.Typer(no_args_is_help=True, help="Twisp local ledger harness.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=_console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log retries and health probes."),
) -> None:
    configure_logging(verbose)


async def _serve(settings: HarnessSettings, options: list[TwispOption]) -> None:
    instance = await start_twisp(*options, settings=settings)
    _console.print(build_instance_table(instance))
    _console.print("[dim]Ctrl-C to stop.[/dim]")
    try:
        await asyncio.Event().wait()
    finally:
        await instance.cleanup()


@app.command()
def up(
    keep_alive: bool = typer.Option(
        False,
        "--keep-alive/--no-keep-alive",
        help="Leave the container running after exit.",
    ),
    logs: bool = typer.Option(False, "--logs", help="Forward container logs."),
    image: str | None = typer.Option(None, "--image", help="Override the Twisp image."),
) -> None:
    """Start a Twisp container and wait until interrupted."""

    settings = HarnessSettings()
    if image:
        settings = settings.model_copy(update={"image": image})

    options: list[TwispOption] = [with_keep_alive(keep_alive)]
    if logs:
        options.append(with_log_sink(LoggerSink()))

    print_banner(_console)
    try:
        asyncio.run(_serve(settings, options))
    except StartupError as exc:
        _console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    except KeyboardInterrupt:
        _console.print("[green]Stopped.[/green]")


@app.command()
def health(
    url: str = typer.Argument(..., help="Healthcheck URL, e.g. http://localhost:8080/healthcheck"),
    timeout: float = typer.Option(5.0, "--timeout", min=0.1, help="Seconds to wait."),
) -> None:
    """Probe a healthcheck until it answers or the timeout expires."""

    try:
        response = asyncio.run(wait_for_healthy(url, timeout=timeout))
    except StartupError as exc:
        _console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc
    _console.print(f"[green]HTTP {response.status_code}[/green] {url}")


def run() -> None:
    app()
