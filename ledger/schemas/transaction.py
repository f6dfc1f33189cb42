"""Pydantic schemas for Transaction endpoints."""

from datetime import datetime

from pydantic import BaseModel, Field

from ledger.domain import Transaction
from ledger.schemas.common import DatePayload, MoneyPayload


class TransactionCreateRequest(BaseModel):
    """Request body for POST /v1/transactions."""
    operation_id: str = Field(
        min_length=1, max_length=128, description="Client-generated idempotency key"
    )
    account_id: str = Field(min_length=1, max_length=64, description="External account id")
    value_date: DatePayload
    amount: MoneyPayload


class TransactionCreateResponse(BaseModel):
    """Empty on purpose: a replayed post must look exactly like the first one."""


class TransactionResponse(BaseModel):
    """Public representation of a transaction."""
    operation_id: str
    account_id: str
    amount: MoneyPayload
    value_date: DatePayload
    created_at: datetime

    @classmethod
    def from_transaction(cls, transaction: Transaction, account_id: str) -> "TransactionResponse":
        return cls(
            operation_id=transaction.operation_id,
            account_id=account_id,
            amount=MoneyPayload.from_amount(transaction.amount),
            value_date=DatePayload.from_date(transaction.value_date),
            created_at=transaction.created_at,
        )
