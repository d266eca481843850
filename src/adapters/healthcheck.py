"""Sondeo del healthcheck del contenedor.

Regla: solo una respuesta 2xx cuenta como sana. Otro status (p. ej. 503
mientras arranca) o un error de transporte se reintentan tras `interval`
hasta `timeout`.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from core.errors import StartupError

logger = logging.getLogger(__name__)


async def probe(url: str, client: httpx.AsyncClient) -> httpx.Response | None:
    """Un único GET; devuelve `None` si no hubo respuesta HTTP."""

    try:
        return await client.get(url)
    except httpx.TransportError as exc:
        logger.debug("healthcheck %s not ready: %s", url, exc)
        return None


async def wait_for_healthy(
    url: str,
    *,
    timeout: float,
    interval: float = 0.5,
    client: httpx.AsyncClient | None = None,
) -> httpx.Response:
    """Bloquea hasta que `url` responde 2xx o vence `timeout` (`StartupError`).

    Una cancelación o `asyncio.timeout` exterior se propaga sin convertirse.
    """

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=httpx.Timeout(max(interval, 1.0)))
    attempts = 0
    last_status: int | None = None
    try:
        async with asyncio.timeout(timeout) as deadline:
            while True:
                attempts += 1
                response = await probe(url, http)
                if response is not None:
                    if response.is_success:
                        logger.info("healthcheck %s answered HTTP %s", url, response.status_code)
                        return response
                    last_status = response.status_code
                    logger.debug("healthcheck %s not ready: HTTP %s", url, last_status)
                await asyncio.sleep(interval)
    except TimeoutError as exc:
        if not deadline.expired():
            raise
        detail = f", last HTTP {last_status}" if last_status is not None else ""
        raise StartupError(
            f"{url} not healthy after {timeout:.1f}s ({attempts} attempts{detail})"
        ) from exc
    finally:
        if owns_client:
            await http.aclose()
