"""Cliente GraphQL mínimo sobre httpx.

Responsabilidad:
- Serializar variables con los codecs de scalars (`to_wire`).
- POST `{"query", "variables", "operationName"}` al endpoint.
- Decodificar `data` sin perder precisión en números (Decimal) y elevar
  `GraphQLResponseError` si el servidor devuelve `errors`.
"""

from __future__ import annotations

import decimal
import json
import logging
from collections.abc import Mapping
from typing import Any, TypeVar

import httpx
from pydantic import BaseModel

from core.domain.scalars import to_wire
from core.errors import GraphQLResponseError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _build_payload(
    query: str,
    variables: Mapping[str, Any] | None,
    operation_name: str | None,
) -> dict[str, Any]:
    payload: dict[str, Any] = {"query": query}
    if variables:
        payload["variables"] = to_wire(variables)
    if operation_name:
        payload["operationName"] = operation_name
    return payload


class GraphQLClient:
    """Ejecuta operaciones GraphQL contra un endpoint.

    El cliente httpx (con su cadena de transports) pertenece a esta instancia:
    `aclose()` / `async with` lo cierran.
    """

    def __init__(self, endpoint: str, http_client: httpx.AsyncClient) -> None:
        self.endpoint = endpoint
        self._http = http_client

    async def __aenter__(self) -> "GraphQLClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    async def execute(
        self,
        query: str,
        variables: Mapping[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> dict[str, Any]:
        """Devuelve `data` como dict; los números JSON llegan como `decimal.Decimal`."""

        payload = _build_payload(query, variables, operation_name)
        response = await self._http.post(self.endpoint, json=payload)
        response.raise_for_status()

        try:
            body = json.loads(response.content, parse_float=decimal.Decimal)
        except json.JSONDecodeError as exc:
            raise GraphQLResponseError(f"invalid JSON from {self.endpoint}: {exc}") from exc

        if not isinstance(body, dict):
            raise GraphQLResponseError("graphql response is not an object")

        errors = body.get("errors")
        if errors:
            logger.debug("graphql %s returned errors: %s", operation_name or "operation", errors)
            raise GraphQLResponseError.from_errors(errors if isinstance(errors, list) else [errors])

        data = body.get("data")
        if not isinstance(data, dict):
            raise GraphQLResponseError("graphql response has no data")
        return data

    async def execute_model(
        self,
        model: type[ModelT],
        query: str,
        variables: Mapping[str, Any] | None = None,
        operation_name: str | None = None,
    ) -> ModelT:
        data = await self.execute(query, variables, operation_name)
        return model.model_validate(data)
