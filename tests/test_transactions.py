"""
Tests for POST /v1/transactions.

These tests verify:
  - Posting is idempotent: a repeated request returns the same empty
    response and changes nothing
  - Currency mismatches and unknown accounts fail without side effects
  - Every applied post bumps the account version by exactly one
  - Amounts that don't fit the currency scale are rejected
  - A lost insert race surfaces as INTERNAL and a retry succeeds
"""

from unittest.mock import AsyncMock, patch


def txn(operation_id="operation-id", account_id="account-id", units=1, nanos=0, currency="USD"):
    """Build a CreateTransaction request body dated 2020-01-01."""
    return {
        "operation_id": operation_id,
        "account_id": account_id,
        "value_date": {"year": 2020, "month": 1, "day": 1},
        "amount": {"currency_code": currency, "units": units, "nanos": nanos},
    }


async def create_account(client, account_id="account-id", currency="USD"):
    response = await client.post(
        "/v1/accounts", json={"account_id": account_id, "currency": currency}
    )
    assert response.status_code == 201, response.text


class TestIdempotency:

    async def test_create_transaction_is_idempotent(self, client):
        await create_account(client, "account-id", "USD")

        first = await client.post("/v1/transactions", json=txn())
        second = await client.post("/v1/transactions", json=txn())

        assert first.status_code == 200
        assert second.status_code == 200
        assert first.json() == second.json() == {}

        account = (await client.get("/v1/accounts/account-id")).json()
        assert account["balance"] == {"currency_code": "USD", "units": 1, "nanos": 0}
        assert account["version"] == 1

        txns = (await client.get("/v1/accounts/account-id/transactions")).json()
        assert len(txns) == 1
        assert txns[0]["operation_id"] == "operation-id"
        assert txns[0]["amount"] == {"currency_code": "USD", "units": 1, "nanos": 0}
        assert txns[0]["value_date"] == {"year": 2020, "month": 1, "day": 1}

    async def test_lost_insert_race_then_retry(self, client):
        await create_account(client, "a", "USD")
        await client.post("/v1/transactions", json=txn("op-x", "a"))

        with patch(
            "ledger.stores.transaction_store.find_by_operation_id",
            new=AsyncMock(return_value=None),
        ):
            raced = await client.post("/v1/transactions", json=txn("op-x", "a"))

        assert raced.status_code == 500
        assert raced.json()["code"] == "INTERNAL"
        assert raced.json()["error_type"] == "concurrent_insert"

        retry = await client.post("/v1/transactions", json=txn("op-x", "a"))
        assert retry.status_code == 200

        account = (await client.get("/v1/accounts/a")).json()
        assert account["balance"]["units"] == 1
        assert account["version"] == 1


class TestFailures:

    async def test_different_currency_fails(self, client):
        await create_account(client, "account-id", "RUB")

        response = await client.post("/v1/transactions", json=txn(currency="USD"))

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ARGUMENT"
        assert response.json()["error_type"] == "currency_mismatch"

        account = (await client.get("/v1/accounts/account-id")).json()
        assert account["version"] == 0
        assert account["balance"] == {"currency_code": "RUB", "units": 0, "nanos": 0}
        txns = await client.get("/v1/accounts/account-id/transactions")
        assert txns.json() == []

    async def test_without_an_account(self, client):
        response = await client.post("/v1/transactions", json=txn())

        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"
        assert "account-id" in response.json()["detail"]

    async def test_sub_cent_amount_rejected(self, client):
        await create_account(client)

        response = await client.post("/v1/transactions", json=txn(units=0, nanos=1))

        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_amount"
        account = (await client.get("/v1/accounts/account-id")).json()
        assert account["version"] == 0

    async def test_opposite_unit_and_nano_signs_rejected(self, client):
        await create_account(client)

        response = await client.post(
            "/v1/transactions", json=txn(units=1, nanos=-500_000_000)
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ARGUMENT"
        assert response.json()["error_type"] == "invalid_amount"

    async def test_amount_beyond_storable_range_rejected(self, client):
        await create_account(client)

        response = await client.post("/v1/transactions", json=txn(units=9 * 10**18))

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_ARGUMENT"
        assert response.json()["error_type"] == "invalid_amount"
        txns = await client.get("/v1/accounts/account-id/transactions")
        assert txns.json() == []

    async def test_balance_overflow_rejected_without_side_effects(self, client):
        await create_account(client)
        largest = txn("op-1", units=92_233_720_368_547_758, nanos=70_000_000)
        assert (await client.post("/v1/transactions", json=largest)).status_code == 200

        response = await client.post(
            "/v1/transactions", json=txn("op-2", units=0, nanos=10_000_000)
        )

        assert response.status_code == 400
        assert response.json()["error_type"] == "invalid_amount"
        account = (await client.get("/v1/accounts/account-id")).json()
        assert account["version"] == 1
        assert account["balance"]["units"] == 92_233_720_368_547_758
        txns = (await client.get("/v1/accounts/account-id/transactions")).json()
        assert [t["operation_id"] for t in txns] == ["op-1"]

    async def test_empty_operation_id_rejected(self, client):
        await create_account(client)

        response = await client.post("/v1/transactions", json=txn(operation_id=""))

        assert response.status_code == 422

    async def test_invalid_value_date_rejected(self, client):
        await create_account(client)
        body = txn()
        body["value_date"] = {"year": 2021, "month": 2, "day": 30}

        response = await client.post("/v1/transactions", json=body)

        assert response.status_code == 422


class TestBalanceUpdates:

    async def test_account_version_increments_on_every_balance_update(self, client):
        await create_account(client, "acc-ver", "USD")

        await client.post("/v1/transactions", json=txn("op-1", "acc-ver"))
        await client.post("/v1/transactions", json=txn("op-2", "acc-ver"))

        account = (await client.get("/v1/accounts/acc-ver")).json()
        assert account["balance"] == {"currency_code": "USD", "units": 2, "nanos": 0}
        assert account["version"] == 2

        balance = (await client.get("/v1/accounts/acc-ver/balance")).json()
        assert balance["balance"]["units"] == 2

    async def test_debits_and_fractions(self, client):
        await create_account(client)

        await client.post("/v1/transactions", json=txn("op-1", units=10, nanos=500_000_000))
        await client.post("/v1/transactions", json=txn("op-2", units=-3, nanos=-750_000_000))

        balance = (await client.get("/v1/accounts/account-id/balance")).json()
        assert balance["balance"] == {
            "currency_code": "USD",
            "units": 6,
            "nanos": 750_000_000,
        }
