"""
Pydantic schemas for Account endpoints.

Balances are returned in the same {currency_code, units, nanos} money
shape that transactions are posted in.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from ledger.domain import Account
from ledger.schemas.common import MoneyPayload


class AccountCreateRequest(BaseModel):
    """Request body for POST /v1/accounts."""
    account_id: str = Field(min_length=1, max_length=64, description="External account id")
    currency: str = Field(pattern=r"^[A-Z]{3}$", description="ISO 4217 code")


class AccountResponse(BaseModel):
    """Public representation of an account."""
    account_id: str
    balance: MoneyPayload
    version: int
    updated_at: datetime

    @classmethod
    def from_account(cls, account: Account) -> "AccountResponse":
        return cls(
            account_id=account.external_id,
            balance=MoneyPayload.from_amount(account.balance),
            version=account.version,
            updated_at=account.updated_at,
        )


class BalanceResponse(BaseModel):
    """Response body for GET /v1/accounts/{account_id}/balance."""
    account_id: str
    balance: MoneyPayload
