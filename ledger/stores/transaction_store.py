"""
Transaction store — append-only persistence for Transaction values.

The UNIQUE constraint on operation_id is enforced by the database, not by
a prior lookup: save() reports a violation as DuplicateKeyError. After
that the session's transaction is unusable and must be rolled back by
the caller.
"""

import uuid

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.domain import Transaction
from ledger.exceptions import DuplicateKeyError
from ledger.models.transaction import TransactionRecord
from ledger.money import Amount


def _to_domain(record: TransactionRecord) -> Transaction:
    return Transaction(
        id=record.id,
        operation_id=record.operation_id,
        value_date=record.value_date,
        account_id=record.account_id,
        amount=Amount.from_minor_units(record.currency, record.amount_minor_units),
        created_at=record.created_at,
    )


async def find_by_operation_id(db: AsyncSession, operation_id: str) -> Transaction | None:
    result = await db.execute(
        select(TransactionRecord).where(TransactionRecord.operation_id == operation_id)
    )
    record = result.scalar_one_or_none()
    return _to_domain(record) if record is not None else None


async def save(db: AsyncSession, transaction: Transaction) -> Transaction:
    """
    Insert a transaction.

    Raises:
        DuplicateKeyError: If a transaction with the same operation id exists.
    """
    db.add(
        TransactionRecord(
            id=transaction.id,
            operation_id=transaction.operation_id,
            account_id=transaction.account_id,
            currency=transaction.amount.currency,
            amount_minor_units=transaction.amount.to_minor_units(),
            value_date=transaction.value_date,
            created_at=transaction.created_at,
        )
    )
    try:
        await db.flush()
    except IntegrityError:
        raise DuplicateKeyError(transaction.operation_id) from None
    return transaction


async def list_for_account(
    db: AsyncSession,
    account_id: uuid.UUID,
    limit: int = 50,
    offset: int = 0,
) -> list[Transaction]:
    """List an account's transactions, newest first."""
    result = await db.execute(
        select(TransactionRecord)
        .where(TransactionRecord.account_id == account_id)
        .order_by(TransactionRecord.created_at.desc(), TransactionRecord.id)
        .limit(limit)
        .offset(offset)
    )
    return [_to_domain(record) for record in result.scalars().all()]
