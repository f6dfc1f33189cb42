"""
Account service — business logic for ledger accounts.

This module handles:
  - Account creation (zero balance in a fixed currency, version 0)
  - Account retrieval by external id

Accounts are addressed by their external id everywhere outside the
stores; the internal UUID never leaves the service layer.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from ledger.domain import Account
from ledger.exceptions import AccountAlreadyExistsError, AccountNotFoundError, DuplicateKeyError
from ledger.money import Amount
from ledger.stores import account_store


async def create_account(
    db: AsyncSession,
    external_id: str,
    currency: str,
) -> Account:
    """
    Create a new account with a zero balance.

    Args:
        db: Database session.
        external_id: Client-chosen unique identifier.
        currency: ISO 4217 code; fixed for the account's lifetime.

    Returns:
        The new Account at version 0.

    Raises:
        InvalidAmountError: If the currency is unknown.
        AccountAlreadyExistsError: If the external id is taken.
    """
    balance = Amount.zero(currency)

    if await account_store.find_by_external_id(db, external_id) is not None:
        raise AccountAlreadyExistsError(external_id)

    try:
        return await account_store.insert(db, external_id, balance)
    except DuplicateKeyError:
        # Lost a race with a concurrent create for the same external id
        raise AccountAlreadyExistsError(external_id) from None


async def get_account(db: AsyncSession, external_id: str) -> Account:
    """
    Get a single account by external id.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
    """
    account = await account_store.find_by_external_id(db, external_id)
    if account is None:
        raise AccountNotFoundError(external_id)
    return account
