"""Errores del harness.

Por qué una jerarquía propia:
- Los tests distinguen fallos de formato, de arranque y de respuesta GraphQL
  sin depender de mensajes de texto.
- Los errores de transporte siguen siendo las excepciones de `httpx`; aquí
  solo viven los que produce el propio harness.
"""

from __future__ import annotations

from typing import Any


class HarnessError(Exception):
    """Base de todos los errores propios del harness."""


class FormatError(HarnessError, ValueError):
    """Texto de un scalar que no respeta su formato canónico."""

    def __init__(self, scalar: str, text: object, reason: str | None = None) -> None:
        self.scalar = scalar
        self.text = text
        self.reason = reason
        message = f"invalid {scalar} {text!r}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class StartupError(HarnessError):
    """El servicio no llegó a estar sano dentro del timeout de arranque."""


class BodyReplayError(HarnessError):
    """No se pudo recuperar el body de una request para reenviarla."""


class GraphQLResponseError(HarnessError):
    """Respuesta GraphQL con `errors` o sin `data`."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)

    @classmethod
    def from_errors(cls, errors: list[dict[str, Any]]) -> "GraphQLResponseError":
        messages = [str(err.get("message", err)) for err in errors if isinstance(err, dict)]
        return cls("; ".join(messages) or "graphql request failed", errors)
