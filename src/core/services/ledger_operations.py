"""Operaciones GraphQL del escenario de fechas efectivas y de extracto.

Este módulo agrupa los documentos GraphQL que usan los tests de integración
y los envuelve en funciones tipadas: codifican variables con los scalars del
dominio y validan la respuesta en los modelos de `core.domain.models`. La
semántica (saldos, índices, cortes por fecha) pertenece al ledger.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from typing import Protocol, TypeVar

from pydantic import BaseModel

from core.domain.fixtures import BERT_ACCOUNT_ID, ERNIE_ACCOUNT_ID, JOURNAL_ID
from core.domain.models import (
    ActivityQueryResponse,
    CreateActivityIndexResponse,
    PostTransactionResponse,
    SetupResponse,
    StatementBalanceResponse,
)
from core.domain.scalars import Decimal

ModelT = TypeVar("ModelT", bound=BaseModel)

TRAN_CODE = "ACH_CREDIT"

CREATE_ACTIVITY_INDEX = """
mutation CreateActivityIndex {
  schema {
    createIndex(
      input: {
        name: "Entry.activity"
        on: Entry
        unique: false
        partition: [
          { alias: "journal_id", value: "string(document.journal_id)" }
          { alias: "account_id", value: "string(document.account_id)" }
          { alias: "statement_month", value: "document.metadata.statementDate.substring(0, 7)" }
        ]
        sort: [{ alias: "created", value: "document.created", sort: DESC }]
      }
    ) {
      name
      on
    }
  }
}
"""

SETUP = """
mutation Setup(
  $journalId: UUID!
  $tranCodeId: UUID!
  $ernieAccountId: UUID!
  $bertAccountId: UUID!
) {
  createJournal(input: { journalId: $journalId, name: "GL", description: "General ledger" }) {
    journalId
  }
  createTranCode(
    input: {
      tranCodeId: $tranCodeId
      code: "ACH_CREDIT"
      description: "ACH credit with explicit statement date"
      params: [
        { name: "journalId", type: UUID }
        { name: "crAccount", type: UUID }
        { name: "drAccount", type: UUID }
        { name: "amount", type: DECIMAL }
        { name: "effective", type: DATE }
        { name: "statementDate", type: DATE }
      ]
      transaction: {
        journalId: "params.journalId"
        effective: "params.effective"
        description: "'ACH credit'"
      }
      entries: [
        {
          accountId: "params.crAccount"
          units: "params.amount"
          currency: "'USD'"
          entryType: "'ACH_CR'"
          direction: "CREDIT"
          layer: "SETTLED"
          metadata: "{'effective': string(params.effective), 'statementDate': has(params.statementDate) ? string(params.statementDate) : string(params.effective)}"
        }
        {
          accountId: "params.drAccount"
          units: "params.amount"
          currency: "'USD'"
          entryType: "'ACH_DR'"
          direction: "DEBIT"
          layer: "SETTLED"
          metadata: "{'effective': string(params.effective), 'statementDate': has(params.statementDate) ? string(params.statementDate) : string(params.effective)}"
        }
      ]
    }
  ) {
    tranCodeId
  }
  ernie_checking: createAccount(
    input: {
      accountId: $ernieAccountId
      code: "ERNIE.CHECKING"
      name: "Ernie Checking"
      normalBalanceType: CREDIT
    }
  ) {
    accountId
  }
  bert_checking: createAccount(
    input: {
      accountId: $bertAccountId
      code: "BERT.CHECKING"
      name: "Bert Checking"
      normalBalanceType: DEBIT
    }
  ) {
    accountId
  }
}
"""

POST_TRANSACTION = """
mutation PostTransaction($transactionId: UUID!, $tranCode: String!, $params: JSON!) {
  postTransaction(input: { transactionId: $transactionId, tranCode: $tranCode, params: $params }) {
    transactionId
    created
  }
}
"""

STATEMENT_BALANCE = """
query StatementBalance(
  $accountId: UUID!
  $journalId: UUID!
  $openDate: Date!
  $closeDate: Date!
  $openAsOf: Timestamp!
  $closeAsOf: Timestamp!
) {
  open: balance(
    accountId: $accountId
    journalId: $journalId
    currency: "USD"
    effective: $openDate
    asOf: $openAsOf
  ) {
    available(layer: SETTLED) {
      normalBalance {
        units
      }
    }
  }
  closed: balance(
    accountId: $accountId
    journalId: $journalId
    currency: "USD"
    effective: $closeDate
    asOf: $closeAsOf
  ) {
    available(layer: SETTLED) {
      normalBalance {
        units
      }
    }
  }
}
"""

ACTIVITY_QUERY = """
query ActivityQuery($journalId: String, $accountId: String, $statementMonth: String) {
  entries(
    index: { name: "Entry.activity" }
    where: {
      journal_id: { eq: $journalId }
      account_id: { eq: $accountId }
      statement_month: { eq: $statementMonth }
    }
    first: 100
  ) {
    nodes {
      metadata
      amount {
        units
      }
      transaction {
        metadata
        entries(first: 10) {
          nodes {
            account {
              code
            }
          }
        }
      }
    }
  }
}
"""


class GraphQLExecutor(Protocol):
    async def execute_model(
        self,
        model: type[ModelT],
        query: str,
        variables: dict | None = None,
        operation_name: str | None = None,
    ) -> ModelT:
        ...


async def create_activity_index(client: GraphQLExecutor) -> CreateActivityIndexResponse:
    return await client.execute_model(
        CreateActivityIndexResponse, CREATE_ACTIVITY_INDEX, None, "CreateActivityIndex"
    )


async def setup(
    client: GraphQLExecutor,
    journal_id: uuid.UUID,
    tran_code_id: uuid.UUID,
    ernie_account_id: uuid.UUID,
    bert_account_id: uuid.UUID,
) -> SetupResponse:
    """Crea journal, tran code y las dos cuentas corrientes del escenario."""

    variables = {
        "journalId": journal_id,
        "tranCodeId": tran_code_id,
        "ernieAccountId": ernie_account_id,
        "bertAccountId": bert_account_id,
    }
    return await client.execute_model(SetupResponse, SETUP, variables, "Setup")


def _transaction_params(
    effective: date,
    amount: Decimal,
    statement_date: date | None,
    journal_id: uuid.UUID,
    credit_account_id: uuid.UUID,
    debit_account_id: uuid.UUID,
) -> dict:
    params: dict = {
        "journalId": journal_id,
        "crAccount": credit_account_id,
        "drAccount": debit_account_id,
        "amount": amount,
        "effective": effective,
    }
    if statement_date is not None:
        params["statementDate"] = statement_date
    return params


async def post_transaction(
    client: GraphQLExecutor,
    transaction_id: uuid.UUID,
    effective: date,
    *,
    amount: Decimal = Decimal("1.00"),
    journal_id: uuid.UUID = JOURNAL_ID,
    credit_account_id: uuid.UUID = ERNIE_ACCOUNT_ID,
    debit_account_id: uuid.UUID = BERT_ACCOUNT_ID,
) -> PostTransactionResponse:
    """Transferencia Bert -> Ernie con fecha de extracto igual a la efectiva."""

    variables = {
        "transactionId": transaction_id,
        "tranCode": TRAN_CODE,
        "params": _transaction_params(
            effective, amount, None, journal_id, credit_account_id, debit_account_id
        ),
    }
    return await client.execute_model(
        PostTransactionResponse, POST_TRANSACTION, variables, "PostTransaction"
    )


async def post_transaction_with_statement_date(
    client: GraphQLExecutor,
    transaction_id: uuid.UUID,
    effective: date,
    statement_date: date,
    *,
    amount: Decimal = Decimal("5.00"),
    journal_id: uuid.UUID = JOURNAL_ID,
    credit_account_id: uuid.UUID = ERNIE_ACCOUNT_ID,
    debit_account_id: uuid.UUID = BERT_ACCOUNT_ID,
) -> PostTransactionResponse:
    """Ajuste con fecha efectiva pasada y fecha de extracto posterior."""

    variables = {
        "transactionId": transaction_id,
        "tranCode": TRAN_CODE,
        "params": _transaction_params(
            effective, amount, statement_date, journal_id, credit_account_id, debit_account_id
        ),
    }
    return await client.execute_model(
        PostTransactionResponse, POST_TRANSACTION, variables, "PostTransaction"
    )


async def statement_balance(
    client: GraphQLExecutor,
    account_id: uuid.UUID,
    journal_id: uuid.UUID,
    open_date: date,
    close_date: date,
    open_as_of: datetime | str,
    close_as_of: datetime | str,
) -> StatementBalanceResponse:
    variables = {
        "accountId": account_id,
        "journalId": journal_id,
        "openDate": open_date,
        "closeDate": close_date,
        "openAsOf": open_as_of,
        "closeAsOf": close_as_of,
    }
    return await client.execute_model(
        StatementBalanceResponse, STATEMENT_BALANCE, variables, "StatementBalance"
    )


async def activity_query(
    client: GraphQLExecutor,
    journal_id: str | None,
    account_id: str | None,
    statement_month: str | None,
) -> ActivityQueryResponse:
    """Actividad de una cuenta para un mes de extracto (`YYYY-MM`)."""

    variables = {
        "journalId": journal_id,
        "accountId": account_id,
        "statementMonth": statement_month,
    }
    return await client.execute_model(
        ActivityQueryResponse, ACTIVITY_QUERY, variables, "ActivityQuery"
    )
