"""Contrato del destino de logs del contenedor.

Por qué Protocol:
- Cualquier callable-objeto con `log(line)` sirve: un logger, una lista en
  tests o el reporter de pytest.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable


@runtime_checkable
class LogSink(Protocol):
    """Recibe líneas de log ya recortadas y con prefijo."""

    def log(self, line: str) -> None:
        ...


class LoggerSink:
    """`LogSink` que escribe en un `logging.Logger`."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO) -> None:
        self._logger = logger or logging.getLogger("twisp.container")
        self._level = level

    def log(self, line: str) -> None:
        self._logger.log(self._level, "%s", line)
