"""Unit tests for the GraphQL client and the ledger operation wrappers."""

from __future__ import annotations

import decimal
import json
import uuid
from datetime import date

import httpx
import pytest

from adapters.graphql_client import GraphQLClient
from core.domain.fixtures import BERT_ACCOUNT_ID, ERNIE_ACCOUNT_ID, JOURNAL_ID, TRAN_CODE_ID
from core.domain.scalars import Decimal
from core.errors import GraphQLResponseError
from core.services import ledger_operations as ops

ENDPOINT = "http://twisp.test/financial/v1/graphql"


def _client(handler) -> GraphQLClient:
    return GraphQLClient(ENDPOINT, httpx.AsyncClient(transport=httpx.MockTransport(handler)))


def _respond(body: object, status: int = 200):
    captured: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(json.loads(request.content))
        return httpx.Response(status, content=json.dumps(body).encode() if not isinstance(body, bytes) else body)

    return handler, captured


class TestExecute:
    @pytest.mark.asyncio
    async def test_posts_query_variables_and_operation_name(self) -> None:
        handler, captured = _respond({"data": {"ok": True}})
        async with _client(handler) as client:
            data = await client.execute(
                "query Q($d: Date!) { ok }",
                {"d": date(2026, 1, 31), "amount": Decimal("1.00"), "id": JOURNAL_ID},
                "Q",
            )

        assert data == {"ok": True}
        assert captured == [
            {
                "query": "query Q($d: Date!) { ok }",
                "variables": {"d": "2026-01-31", "amount": "1.00", "id": str(JOURNAL_ID)},
                "operationName": "Q",
            }
        ]

    @pytest.mark.asyncio
    async def test_numbers_are_decoded_exactly(self) -> None:
        handler, _ = _respond(b'{"data": {"units": 1.10, "count": 3}}')
        async with _client(handler) as client:
            data = await client.execute("{ units count }")

        assert data["units"] == decimal.Decimal("1.10")
        assert str(data["units"]) == "1.10"
        assert data["count"] == 3

    @pytest.mark.asyncio
    async def test_errors_payload_raises(self) -> None:
        handler, _ = _respond({"data": None, "errors": [{"message": "index exists"}, {"message": "boom"}]})
        async with _client(handler) as client:
            with pytest.raises(GraphQLResponseError) as excinfo:
                await client.execute("{ ok }")

        assert str(excinfo.value) == "index exists; boom"
        assert len(excinfo.value.errors) == 2

    @pytest.mark.asyncio
    async def test_missing_data_raises(self) -> None:
        handler, _ = _respond({})
        async with _client(handler) as client:
            with pytest.raises(GraphQLResponseError, match="no data"):
                await client.execute("{ ok }")

    @pytest.mark.asyncio
    async def test_invalid_json_raises(self) -> None:
        handler, _ = _respond(b"<html>bad gateway</html>")
        async with _client(handler) as client:
            with pytest.raises(GraphQLResponseError, match="invalid JSON"):
                await client.execute("{ ok }")

    @pytest.mark.asyncio
    async def test_http_error_status_raises(self) -> None:
        handler, _ = _respond({"errors": [{"message": "unauthorized"}]}, status=401)
        async with _client(handler) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await client.execute("{ ok }")


class TestLedgerOperations:
    @pytest.mark.asyncio
    async def test_setup_decodes_ids(self) -> None:
        handler, captured = _respond(
            {
                "data": {
                    "createJournal": {"journalId": str(JOURNAL_ID)},
                    "createTranCode": {"tranCodeId": str(TRAN_CODE_ID)},
                    "ernie_checking": {"accountId": str(ERNIE_ACCOUNT_ID)},
                    "bert_checking": {"accountId": str(BERT_ACCOUNT_ID)},
                }
            }
        )
        async with _client(handler) as client:
            resp = await ops.setup(client, JOURNAL_ID, TRAN_CODE_ID, ERNIE_ACCOUNT_ID, BERT_ACCOUNT_ID)

        assert resp.create_journal.journal_id == JOURNAL_ID
        assert resp.create_tran_code.tran_code_id == TRAN_CODE_ID
        assert resp.ernie_checking.account_id == ERNIE_ACCOUNT_ID
        assert resp.bert_checking.account_id == BERT_ACCOUNT_ID
        assert captured[0]["operationName"] == "Setup"

    @pytest.mark.asyncio
    async def test_create_activity_index(self) -> None:
        handler, captured = _respond({"data": {"schema": {"createIndex": {"name": "Entry.activity", "on": "Entry"}}}})
        async with _client(handler) as client:
            resp = await ops.create_activity_index(client)

        assert resp.schema_.create_index.on == "Entry"
        assert "variables" not in captured[0]

    @pytest.mark.asyncio
    async def test_post_transaction_with_statement_date(self) -> None:
        tx = uuid.uuid4()
        handler, captured = _respond(
            {"data": {"postTransaction": {"transactionId": str(tx), "created": "2026-02-15T10:11:12.123456789Z"}}}
        )
        async with _client(handler) as client:
            resp = await ops.post_transaction_with_statement_date(
                client, tx, date(2026, 1, 24), date(2026, 2, 15)
            )

        assert resp.post_transaction.transaction_id == tx
        assert resp.post_transaction.created.microsecond == 123456
        params = captured[0]["variables"]["params"]
        assert params == {
            "journalId": str(JOURNAL_ID),
            "crAccount": str(ERNIE_ACCOUNT_ID),
            "drAccount": str(BERT_ACCOUNT_ID),
            "amount": "5.00",
            "effective": "2026-01-24",
            "statementDate": "2026-02-15",
        }

    @pytest.mark.asyncio
    async def test_post_transaction_defaults_to_one_unit(self) -> None:
        tx = uuid.uuid4()
        handler, captured = _respond(
            {"data": {"postTransaction": {"transactionId": str(tx), "created": "2026-01-01T00:00:00Z"}}}
        )
        async with _client(handler) as client:
            await ops.post_transaction(client, tx, date(2026, 1, 1))

        params = captured[0]["variables"]["params"]
        assert params["amount"] == "1.00"
        assert "statementDate" not in params

    @pytest.mark.asyncio
    async def test_statement_balance_units_are_exact(self) -> None:
        def balance(units: str) -> dict:
            return {"available": {"normalBalance": {"units": units}}}

        handler, captured = _respond({"data": {"open": balance("0.00"), "closed": balance("3.00")}})
        async with _client(handler) as client:
            resp = await ops.statement_balance(
                client,
                ERNIE_ACCOUNT_ID,
                JOURNAL_ID,
                date(2025, 12, 31),
                date(2026, 1, 31),
                "2026-01-31T00:00:00.001Z",
                "2026-01-31T00:00:00.001Z",
            )

        assert resp.open.available.normal_balance.units == Decimal("0.00")
        assert resp.closed.available.normal_balance.units == Decimal("3.00")
        assert captured[0]["variables"]["openDate"] == "2025-12-31"

    @pytest.mark.asyncio
    async def test_activity_query_round_trips_to_wire_json(self) -> None:
        node = {
            "metadata": {"effective": "2026-01-31", "statementDate": "2026-01-31"},
            "amount": {"units": "1.00"},
            "transaction": {
                "metadata": {},
                "entries": {"nodes": [{"account": {"code": "ERNIE.CHECKING"}}, {"account": {"code": "BERT.CHECKING"}}]},
            },
        }
        payload = {"entries": {"nodes": [node]}}
        handler, _ = _respond({"data": payload})
        async with _client(handler) as client:
            resp = await ops.activity_query(client, str(JOURNAL_ID), str(ERNIE_ACCOUNT_ID), "2026-01")

        assert resp.model_dump(mode="json", by_alias=True) == payload
