"""Modelos de respuesta del escenario del ledger (Pydantic v2).

Por qué Pydantic en el dominio:
- Las respuestas GraphQL se validan con los mismos codecs que los scalars
  (`DateScalar`, `DecimalScalar`, `TimestampScalar`).
- Un `model_dump(mode="json", by_alias=True)` reproduce el JSON de cable,
  así que los tests comparan documentos completos.

Nota:
- Estos modelos describen *qué* devuelve el ledger, no cómo se calcula.
"""

from __future__ import annotations

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

from core.domain.scalars import UUID, DecimalScalar, TimestampScalar

NodeT = TypeVar("NodeT")


class GraphQLModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class Connection(GraphQLModel, Generic[NodeT]):
    nodes: list[NodeT] = Field(default_factory=list)


class Money(GraphQLModel):
    units: DecimalScalar = Field(
        ...,
        description="Importe exacto en unidades de la moneda.",
    )


class CreatedIndex(GraphQLModel):
    name: str | None = None
    on: str


class SchemaMutations(GraphQLModel):
    create_index: CreatedIndex


class CreateActivityIndexResponse(GraphQLModel):
    schema_: SchemaMutations = Field(..., alias="schema")


class JournalRef(GraphQLModel):
    journal_id: UUID


class TranCodeRef(GraphQLModel):
    tran_code_id: UUID


class AccountRef(GraphQLModel):
    account_id: UUID


class SetupResponse(GraphQLModel):
    create_journal: JournalRef
    create_tran_code: TranCodeRef
    ernie_checking: AccountRef = Field(..., alias="ernie_checking")
    bert_checking: AccountRef = Field(..., alias="bert_checking")


class PostedTransaction(GraphQLModel):
    transaction_id: UUID
    created: TimestampScalar


class PostTransactionResponse(GraphQLModel):
    post_transaction: PostedTransaction


class BalanceAmount(GraphQLModel):
    normal_balance: Money


class Balance(GraphQLModel):
    available: BalanceAmount


class StatementBalanceResponse(GraphQLModel):
    """Saldo al abrir y al cerrar un periodo de extracto."""

    open: Balance
    closed: Balance


class AccountCode(GraphQLModel):
    code: str


class EntryAccount(GraphQLModel):
    account: AccountCode


class ActivityTransaction(GraphQLModel):
    metadata: dict[str, Any] | None = None
    entries: Connection[EntryAccount] = Field(default_factory=Connection[EntryAccount])


class ActivityEntry(GraphQLModel):
    metadata: dict[str, Any] | None = None
    amount: Money
    transaction: ActivityTransaction | None = None


class ActivityQueryResponse(GraphQLModel):
    """Entradas de actividad de una cuenta para un mes de extracto."""

    entries: Connection[ActivityEntry] = Field(default_factory=Connection[ActivityEntry])
