"""
Domain values for accounts and transactions.

These are plain frozen dataclasses, detached from the ORM. The stores map
rows to and from them, which keeps the posting logic free of session
state: a changed balance is a new Account value, and only the store's
save() decides whether it reaches the database.
"""

import dataclasses
import uuid
from dataclasses import dataclass
from datetime import date, datetime, timezone

from ledger.exceptions import CurrencyMismatchError
from ledger.money import Amount


@dataclass(frozen=True)
class Account:
    id: uuid.UUID
    external_id: str
    balance: Amount
    version: int
    updated_at: datetime

    @property
    def currency(self) -> str:
        return self.balance.currency

    def with_balance(self, balance: Amount) -> "Account":
        """
        Return a copy carrying a new balance and the SAME version.

        The version is bumped by account_store.save(), not here; saving the
        copy is what proves nobody else touched the row in between.
        """
        if balance.currency != self.balance.currency:
            raise CurrencyMismatchError(expected=self.currency, actual=balance.currency)
        return dataclasses.replace(self, balance=balance)


@dataclass(frozen=True)
class Transaction:
    id: uuid.UUID
    operation_id: str
    value_date: date
    account_id: uuid.UUID
    amount: Amount
    created_at: datetime

    @classmethod
    def create(
        cls,
        operation_id: str,
        value_date: date,
        account_id: uuid.UUID,
        amount: Amount,
    ) -> "Transaction":
        return cls(
            id=uuid.uuid4(),
            operation_id=operation_id,
            value_date=value_date,
            account_id=account_id,
            amount=amount,
            created_at=datetime.now(timezone.utc),
        )
