"""
Account store — persistence for Account values.

Every function takes the caller's AsyncSession as the transaction handle
and never commits; the caller owns the transaction boundary.

Optimistic concurrency:
  save() issues a conditional UPDATE:

      UPDATE accounts
         SET balance_minor_units = :balance, version = version + 1, updated_at = :now
       WHERE id = :id AND version = :version

  If another writer committed first, the WHERE clause matches no row and
  OptimisticConflictError is raised. No row locks are taken, so this works
  the same on SQLite and on PostgreSQL under READ COMMITTED.

Reads use populate_existing so that a re-read after a conflict returns
the committed row instead of whatever the session identity map cached.
"""

import dataclasses
import uuid
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.domain import Account
from ledger.exceptions import DuplicateKeyError, OptimisticConflictError
from ledger.models.account import AccountRecord
from ledger.money import Amount


def _to_domain(record: AccountRecord) -> Account:
    return Account(
        id=record.id,
        external_id=record.external_id,
        balance=Amount.from_minor_units(record.currency, record.balance_minor_units),
        version=record.version,
        updated_at=record.updated_at,
    )


async def find_by_external_id(db: AsyncSession, external_id: str) -> Account | None:
    result = await db.execute(
        select(AccountRecord)
        .where(AccountRecord.external_id == external_id)
        .execution_options(populate_existing=True)
    )
    record = result.scalar_one_or_none()
    return _to_domain(record) if record is not None else None


async def find_by_id(db: AsyncSession, account_id: uuid.UUID) -> Account | None:
    result = await db.execute(
        select(AccountRecord)
        .where(AccountRecord.id == account_id)
        .execution_options(populate_existing=True)
    )
    record = result.scalar_one_or_none()
    return _to_domain(record) if record is not None else None


async def insert(db: AsyncSession, external_id: str, balance: Amount) -> Account:
    """
    Insert a new account at version 0.

    Raises:
        DuplicateKeyError: If the external id is already taken.
    """
    record = AccountRecord(
        external_id=external_id,
        currency=balance.currency,
        balance_minor_units=balance.to_minor_units(),
        version=0,
    )
    db.add(record)
    try:
        await db.flush()
    except IntegrityError:
        raise DuplicateKeyError(external_id) from None
    return _to_domain(record)


async def save(db: AsyncSession, account: Account) -> Account:
    """
    Persist the account's balance if its version is still current.

    Returns:
        The new state: version + 1 and a fresh updated_at.

    Raises:
        OptimisticConflictError: If the stored version differs from account.version.
    """
    now = datetime.now(timezone.utc)
    result = await db.execute(
        update(AccountRecord)
        .where(AccountRecord.id == account.id)
        .where(AccountRecord.version == account.version)
        .values(
            balance_minor_units=account.balance.to_minor_units(),
            version=AccountRecord.version + 1,
            updated_at=now,
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise OptimisticConflictError(account.id, account.version)

    return dataclasses.replace(account, version=account.version + 1, updated_at=now)
