"""Reenvío de logs del contenedor a un `LogSink`.

Cada línea emitida por el contenedor se entrega sin el salto final y con el
prefijo de origen (`[twisp] ...`). Un hilo daemon sigue el stream hasta que
el contenedor se detiene.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterable

from core.interfaces.log_sink import LogSink

logger = logging.getLogger(__name__)


class ContainerLogForwarder:
    def __init__(self, sink: LogSink, prefix: str = "[twisp]") -> None:
        self._sink = sink
        self._prefix = prefix
        self._pending = ""
        self._thread: threading.Thread | None = None

    def accept(self, line: str) -> None:
        text = line.rstrip("\r\n")
        self._sink.log(f"{self._prefix} {text}")

    def feed(self, chunk: bytes | str) -> None:
        """Acumula un chunk del stream y entrega las líneas completas."""

        text = chunk.decode("utf-8", errors="replace") if isinstance(chunk, bytes) else chunk
        self._pending += text
        *lines, self._pending = self._pending.split("\n")
        for line in lines:
            self.accept(line)

    def flush(self) -> None:
        if self._pending:
            pending, self._pending = self._pending, ""
            self.accept(pending)

    def consume(self, stream: Iterable[bytes | str]) -> None:
        try:
            for chunk in stream:
                self.feed(chunk)
        except Exception as exc:
            logger.debug("container log stream ended with error: %s", exc)
        finally:
            self.flush()

    def start(self, stream: Iterable[bytes | str]) -> threading.Thread:
        thread = threading.Thread(
            target=self.consume,
            args=(stream,),
            name="twisp-log-forwarder",
            daemon=True,
        )
        thread.start()
        self._thread = thread
        return thread

    def join(self, timeout: float | None = None) -> None:
        if self._thread is not None:
            self._thread.join(timeout)
