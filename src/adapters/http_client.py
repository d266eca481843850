"""Builder de clientes httpx para el ledger.

Por qué un builder:
- Centraliza timeouts y la cadena de transports (reintentos -> headers ->
  base) para que todos los clientes se comporten igual.
- Facilita testeo: la base se sustituye por `httpx.MockTransport`.
"""

from __future__ import annotations

from collections.abc import Mapping

import httpx

from adapters.transports import HeaderInjectingTransport, HeaderValues, RetryingTransport
from core.config import HarnessSettings


def build_transport_chain(
    headers: Mapping[str, HeaderValues] | None = None,
    settings: HarnessSettings | None = None,
    *,
    base: httpx.AsyncBaseTransport | None = None,
) -> RetryingTransport:
    """Compone `RetryingTransport(HeaderInjectingTransport(base))`."""

    settings = settings or HarnessSettings()
    return RetryingTransport(
        HeaderInjectingTransport(base or httpx.AsyncHTTPTransport(), headers),
        max_retries=settings.max_retries,
        base_delay=settings.retry_base_delay_seconds,
    )


def build_async_client(
    settings: HarnessSettings | None = None,
    *,
    headers: Mapping[str, HeaderValues] | None = None,
    base_url: str = "",
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con la cadena resiliente y defaults seguros.

    `transport` es la base de la cadena (por defecto `AsyncHTTPTransport`).
    """

    settings = settings or HarnessSettings()
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        headers={"Accept": "application/json"},
        transport=build_transport_chain(headers, settings, base=transport),
    )
