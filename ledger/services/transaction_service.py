"""
Transaction service — idempotent posting of amounts to accounts.

THIS IS THE MOST CRITICAL FILE IN THE PROJECT. post_transaction() must be
safe to call any number of times with the same operation id, from any
number of concurrent callers, without ever applying an amount twice or
losing one.

Algorithm (all inside the caller's database transaction):
  1. Resolve the account by external id        -> AccountNotFoundError
  2. Check the amount currency                  -> CurrencyMismatchError
  3. Probe for the operation id; if it already exists, return the stored
     transaction and touch nothing else (idempotent replay)
  4. Insert the transaction; a unique-key violation means a concurrent
     poster won the race                        -> ConcurrentInsertError
  5. Save balance + amount with a version check
  6. On a version conflict, re-read the account and re-save from the fresh
     balance, up to max_retries times          -> ConcurrentUpdateError
     (account gone on re-read                   -> AccountDisappearedError)

Concurrency guarantees:
  The UNIQUE constraint on operation_id stops two inserts of the same
  operation; the account version stops two different operations from
  overwriting each other's balance. Neither requires SERIALIZABLE
  isolation or row locks.

Results instead of exceptions:
  post_transaction() never raises a LedgerError. It returns a PostResult
  holding either the transaction or the error, and rolls the session back
  before returning a failure so no partial state can be committed.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import date

from sqlalchemy.ext.asyncio import AsyncSession

from ledger.config import settings
from ledger.domain import Account, Transaction
from ledger.exceptions import (
    AccountDisappearedError,
    AccountNotFoundError,
    ConcurrentInsertError,
    ConcurrentUpdateError,
    CurrencyMismatchError,
    DeadlineExceededError,
    DuplicateKeyError,
    LedgerError,
    OptimisticConflictError,
)
from ledger.money import Amount
from ledger.stores import account_store, transaction_store

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PostResult:
    """
    Outcome of a post.

    Exactly one of `transaction` / `error` is set. `created` is False when
    the operation id had already been posted and nothing was changed.
    """

    transaction: Transaction | None = None
    created: bool = False
    error: LedgerError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def applied(cls, transaction: Transaction) -> "PostResult":
        return cls(transaction=transaction, created=True)

    @classmethod
    def replayed(cls, transaction: Transaction) -> "PostResult":
        return cls(transaction=transaction, created=False)

    @classmethod
    def failed(cls, error: LedgerError) -> "PostResult":
        return cls(error=error)


async def post_transaction(
    db: AsyncSession,
    account_id: str,
    amount: Amount,
    operation_id: str,
    value_date: date,
    *,
    max_retries: int | None = None,
    timeout: float | None = None,
) -> PostResult:
    """
    Post `amount` to the account with external id `account_id`.

    Args:
        db: Database session; the caller commits it when the result is ok.
        account_id: External id of the target account.
        amount: Signed amount; its currency must match the account's.
        operation_id: Client idempotency key.
        value_date: Business date of the transaction.
        max_retries: Re-saves allowed after an optimistic-lock conflict
                     (defaults to settings.POST_MAX_RETRIES).
        timeout: Seconds before the whole post is abandoned
                 (defaults to settings.POST_TIMEOUT_SECONDS).

    Returns:
        PostResult. On failure the session has already been rolled back.
    """
    if max_retries is None:
        max_retries = settings.POST_MAX_RETRIES
    if timeout is None:
        timeout = settings.POST_TIMEOUT_SECONDS

    try:
        result = await asyncio.wait_for(
            _post(db, account_id, amount, operation_id, value_date, max_retries),
            timeout=timeout,
        )
    except asyncio.TimeoutError:
        logger.warning("Post of %s timed out after %ss", operation_id, timeout)
        await db.rollback()
        return PostResult.failed(DeadlineExceededError(timeout))
    except LedgerError as exc:
        await db.rollback()
        return PostResult.failed(exc)
    return result


async def _post(
    db: AsyncSession,
    account_id: str,
    amount: Amount,
    operation_id: str,
    value_date: date,
    max_retries: int,
) -> PostResult:
    account = await account_store.find_by_external_id(db, account_id)
    if account is None:
        raise AccountNotFoundError(account_id)

    if amount.currency != account.currency:
        raise CurrencyMismatchError(expected=account.currency, actual=amount.currency)

    existing = await transaction_store.find_by_operation_id(db, operation_id)
    if existing is not None:
        logger.info("Transaction already created %s", operation_id)
        return PostResult.replayed(existing)

    try:
        transaction = await transaction_store.save(
            db, Transaction.create(operation_id, value_date, account.id, amount)
        )
    except DuplicateKeyError:
        logger.info("DuplicateKey on %s, concurrent insert won", operation_id)
        raise ConcurrentInsertError(operation_id) from None

    await _apply_balance(db, account, amount, max_retries)
    return PostResult.applied(transaction)


async def _apply_balance(
    db: AsyncSession,
    account: Account,
    amount: Amount,
    max_retries: int,
) -> Account:
    """Add `amount` to the account balance, re-reading on version conflicts."""
    attempt = 0
    while True:
        try:
            return await account_store.save(db, account.with_balance(account.balance + amount))
        except OptimisticConflictError:
            if attempt >= max_retries:
                logger.error(
                    "Optimistic-lock retries exhausted on account %s after %d attempts",
                    account.id, attempt + 1,
                )
                raise ConcurrentUpdateError(account.id, attempt + 1) from None
            attempt += 1
            logger.warning(
                "Optimistic-lock conflict on account %s, retry %d", account.id, attempt
            )

        reloaded = await account_store.find_by_id(db, account.id)
        if reloaded is None:
            logger.error("Account %s disappeared during posting", account.id)
            raise AccountDisappearedError(account.id)
        account = reloaded


async def list_transactions(
    db: AsyncSession,
    account_id: str,
    limit: int = 50,
    offset: int = 0,
) -> list[Transaction]:
    """
    List transactions for an account, newest first.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
    """
    account = await account_store.find_by_external_id(db, account_id)
    if account is None:
        raise AccountNotFoundError(account_id)
    return await transaction_store.list_for_account(db, account.id, limit, offset)
