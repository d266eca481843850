"""Transportes httpx componibles: headers fijos + reintentos transitorios.

Cadena típica:
    RetryingTransport(HeaderInjectingTransport(httpx.AsyncHTTPTransport()))

Por qué transports y no un wrapper del cliente:
- httpx ya separa `AsyncClient` (API) de `AsyncBaseTransport` (envío); cada
  capa envuelve a la siguiente sin herencia.
- Los tests sustituyen la base por `httpx.MockTransport`.
"""

from __future__ import annotations

import asyncio
import errno
import logging
import ssl
from collections.abc import Iterator, Mapping, Sequence

import httpx

from core.errors import BodyReplayError

logger = logging.getLogger(__name__)

HeaderValues = str | Sequence[str]

_TRANSIENT_ERRNOS = frozenset({errno.ECONNREFUSED, errno.ECONNRESET})
_FRAMING_HEADERS = ("transfer-encoding", "content-length")


def _iter_chain(exc: BaseException) -> Iterator[BaseException]:
    seen: set[int] = set()
    current: BaseException | None = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def is_transient(exc: BaseException) -> bool:
    """True para fallos de establecimiento de conexión (refused/reset/dial).

    Timeouts de lectura, TLS y errores de protocolo no son transitorios.
    httpx reporta un handshake TLS fallido como `ConnectError` sobre un
    `ssl.SSLError`, así que la cadena se revisa primero en busca de TLS.
    """

    chain = list(_iter_chain(exc))
    if any(isinstance(err, ssl.SSLError) for err in chain):
        return False
    for err in chain:
        if isinstance(err, (httpx.ConnectError, httpx.ConnectTimeout)):
            return True
        if isinstance(err, (ConnectionRefusedError, ConnectionResetError)):
            return True
        if isinstance(err, OSError) and err.errno in _TRANSIENT_ERRNOS:
            return True
    return False


def _normalize_headers(headers: Mapping[str, HeaderValues] | None) -> list[tuple[str, str]]:
    items: list[tuple[str, str]] = []
    for key, values in (headers or {}).items():
        if isinstance(values, str):
            items.append((key, values))
        else:
            items.extend((key, value) for value in values)
    return items


class HeaderInjectingTransport(httpx.AsyncBaseTransport):
    """Añade un conjunto fijo de headers a cada request.

    Los valores se suman a los existentes (no se reemplazan) y, para un mismo
    nombre, se envían en el orden configurado.
    """

    def __init__(
        self,
        base: httpx.AsyncBaseTransport,
        headers: Mapping[str, HeaderValues] | None = None,
    ) -> None:
        self._base = base
        self._headers = _normalize_headers(headers)

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if self._headers:
            request.headers = httpx.Headers([*request.headers.multi_items(), *self._headers])
        return await self._base.handle_async_request(request)

    async def aclose(self) -> None:
        await self._base.aclose()


class RetryingTransport(httpx.AsyncBaseTransport):
    """Reintenta requests ante errores de conexión transitorios.

    Reglas:
    - Cualquier respuesta HTTP (incluido 5xx) se devuelve tal cual.
    - Un error no transitorio se propaga en el primer intento.
    - Entre intentos espera `base_delay * 2**attempt` segundos, sin jitter ni
      tope. La espera es cancelable: `CancelledError` o el `TimeoutError` de
      un `asyncio.timeout` exterior se propagan sin reenviar.
    - Agotados los intentos se relanza el último error transitorio.
    """

    def __init__(
        self,
        base: httpx.AsyncBaseTransport,
        *,
        max_retries: int = 5,
        base_delay: float = 0.2,
    ) -> None:
        if max_retries < 1:
            raise ValueError("max_retries must be >= 1")
        if base_delay < 0:
            raise ValueError("base_delay must be >= 0")
        self._base = base
        self._max_retries = max_retries
        self._base_delay = base_delay

    @property
    def max_retries(self) -> int:
        return self._max_retries

    @property
    def base_delay(self) -> float:
        return self._base_delay

    def delay_for(self, attempt: int) -> float:
        return self._base_delay * (2**attempt)

    async def _replay_body(self, request: httpx.Request) -> bytes:
        try:
            return await request.aread()
        except httpx.StreamError as exc:
            raise BodyReplayError(f"cannot replay body of {request.method} {request.url}") from exc

    def _clone(self, request: httpx.Request, body: bytes) -> httpx.Request:
        # httpx recalcula el framing a partir del cuerpo ya leído
        headers = request.headers.copy()
        for name in _FRAMING_HEADERS:
            headers.pop(name, None)
        return httpx.Request(
            request.method,
            request.url,
            headers=headers,
            content=body or None,
            extensions=dict(request.extensions),
        )

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        attempt = 0
        while True:
            body = await self._replay_body(request)
            try:
                return await self._base.handle_async_request(self._clone(request, body))
            except Exception as exc:
                if not is_transient(exc):
                    raise
                if attempt + 1 >= self._max_retries:
                    logger.warning(
                        "giving up on %s %s after %d attempts: %s",
                        request.method,
                        request.url,
                        self._max_retries,
                        exc,
                    )
                    raise
                delay = self.delay_for(attempt)
                logger.debug(
                    "transient error on %s %s (attempt %d/%d): %s; retrying in %.3fs",
                    request.method,
                    request.url,
                    attempt + 1,
                    self._max_retries,
                    exc,
                    delay,
                )

            await asyncio.sleep(delay)
            attempt += 1

    async def aclose(self) -> None:
        await self._base.aclose()
