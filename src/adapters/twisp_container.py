"""Ciclo de vida del contenedor Twisp local (testcontainers).

Responsabilidad:
- Arrancar la imagen de referencia, publicar sus puertos y esperar al
  healthcheck.
- Exponer el endpoint GraphQL y construir clientes con la cadena resiliente.
- Garantizar un único teardown (salvo keep-alive), sin romper el test si
  falla.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import httpx
from testcontainers.core.container import DockerContainer

from adapters.graphql_client import GraphQLClient
from adapters.healthcheck import wait_for_healthy
from adapters.http_client import build_async_client
from adapters.log_forwarding import ContainerLogForwarder
from adapters.transports import HeaderValues
from core.config import HarnessSettings
from core.errors import StartupError
from core.interfaces.log_sink import LogSink

logger = logging.getLogger(__name__)


@dataclass
class TwispOptions:
    log_sink: LogSink | None = None
    keep_alive: bool | None = None


TwispOption = Callable[[TwispOptions], None]
ContainerFactory = Callable[[HarnessSettings], Any]


def with_log_sink(sink: LogSink) -> TwispOption:
    """Reenvía los logs del contenedor a `sink`."""

    def _apply(options: TwispOptions) -> None:
        options.log_sink = sink

    return _apply


def with_keep_alive(keep_alive: bool = True) -> TwispOption:
    """Evita que `cleanup()` termine el contenedor."""

    def _apply(options: TwispOptions) -> None:
        options.keep_alive = keep_alive

    return _apply


def default_container(settings: HarnessSettings) -> DockerContainer:
    return DockerContainer(settings.image).with_exposed_ports(*settings.exposed_ports)


async def _stop_quietly(container: Any) -> None:
    try:
        await asyncio.to_thread(container.stop)
    except Exception as exc:
        logger.warning("terminate container: %s", exc)


class TwispInstance:
    """Contenedor Twisp en ejecución.

    Uso:
        async with await start_twisp() as twisp:
            async with twisp.new_client({"x-twisp-account-id": [...]}) as client:
                ...
    """

    def __init__(
        self,
        container: Any,
        *,
        base_url: str,
        settings: HarnessSettings,
        keep_alive: bool = False,
        forwarder: ContainerLogForwarder | None = None,
    ) -> None:
        self.container = container
        self.base_url = base_url
        self.keep_alive = keep_alive
        self._settings = settings
        self._forwarder = forwarder
        self._cleaned_up = False

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}{self._settings.api_path}"

    @property
    def health_url(self) -> str:
        return f"{self.base_url}{self._settings.health_path}"

    @property
    def cleaned_up(self) -> bool:
        return self._cleaned_up

    def new_client(
        self,
        headers: Mapping[str, HeaderValues] | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> GraphQLClient:
        """Cliente GraphQL contra este contenedor con headers en cada request.

        Los errores de conexión transitorios se reintentan automáticamente.
        """

        http = build_async_client(self._settings, headers=headers, transport=transport)
        return GraphQLClient(self.endpoint, http)

    async def cleanup(self) -> None:
        """Termina el contenedor salvo keep-alive; solo actúa la primera vez."""

        if self._cleaned_up:
            return
        self._cleaned_up = True

        if self.keep_alive:
            logger.info("keeping twisp container alive at %s", self.endpoint)
            return

        await _stop_quietly(self.container)
        if self._forwarder is not None:
            await asyncio.to_thread(self._forwarder.join, 1.0)

    async def __aenter__(self) -> "TwispInstance":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.cleanup()


def _start_log_forwarding(container: Any, sink: LogSink, prefix: str) -> ContainerLogForwarder:
    forwarder = ContainerLogForwarder(sink, prefix)
    stream = container.get_wrapped_container().logs(stream=True, follow=True)
    forwarder.start(stream)
    return forwarder


async def start_twisp(
    *options: TwispOption,
    settings: HarnessSettings | None = None,
    container_factory: ContainerFactory | None = None,
) -> TwispInstance:
    """Lanza el contenedor Twisp y espera a su healthcheck.

    Errores:
    - `StartupError` si el contenedor no arranca o no responde a tiempo (el
      contenedor se detiene antes de elevar).
    - Una cancelación exterior se propaga tal cual, también deteniéndolo.
    """

    cfg = TwispOptions()
    for option in options:
        option(cfg)

    settings = settings or HarnessSettings()
    keep_alive = settings.keep_alive if cfg.keep_alive is None else cfg.keep_alive
    container = (container_factory or default_container)(settings)

    logger.info("starting twisp container %s", settings.image)
    try:
        await asyncio.to_thread(container.start)
    except Exception as exc:
        raise StartupError(f"starting twisp container {settings.image}: {exc}") from exc

    try:
        try:
            host = await asyncio.to_thread(container.get_container_host_ip)
            port = await asyncio.to_thread(container.get_exposed_port, settings.health_port)
        except Exception as exc:
            raise StartupError(f"resolving twisp container address: {exc}") from exc

        base_url = f"http://{host}:{port}"
        forwarder = None
        if cfg.log_sink is not None:
            try:
                forwarder = _start_log_forwarding(container, cfg.log_sink, settings.log_prefix)
            except Exception as exc:
                raise StartupError(f"following twisp container logs: {exc}") from exc

        await wait_for_healthy(
            f"{base_url}{settings.health_path}",
            timeout=settings.startup_timeout_seconds,
            interval=settings.health_poll_interval_seconds,
        )
    except BaseException:
        await _stop_quietly(container)
        raise

    instance = TwispInstance(
        container,
        base_url=base_url,
        settings=settings,
        keep_alive=keep_alive,
        forwarder=forwarder,
    )
    logger.info("twisp ready at %s", instance.endpoint)
    return instance
