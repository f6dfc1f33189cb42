"""
Accounts router — account management endpoints.

  POST /v1/accounts                                — Create an account
  GET  /v1/accounts/{account_id}                   — Account details (balance, version)
  GET  /v1/accounts/{account_id}/balance           — Current balance
  GET  /v1/accounts/{account_id}/transactions      — List transactions, newest first

`account_id` is always the client-visible external id.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.database import get_db
from ledger.schemas.account import AccountCreateRequest, AccountResponse, BalanceResponse
from ledger.schemas.common import MoneyPayload
from ledger.schemas.transaction import TransactionResponse
from ledger.services import account_service, transaction_service

router = APIRouter()


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
async def create_account(
    request: AccountCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Create an account with a zero balance in the given currency.

    The currency cannot be changed later. Returns 409 if the account id
    is already taken and 400 for an unsupported currency.
    """
    account = await account_service.create_account(
        db=db,
        external_id=request.account_id,
        currency=request.currency,
    )
    return AccountResponse.from_account(account)


@router.get(
    "/{account_id}",
    response_model=AccountResponse,
    summary="Get account details",
)
async def get_account(
    account_id: str,
    db: AsyncSession = Depends(get_db),
):
    account = await account_service.get_account(db, account_id)
    return AccountResponse.from_account(account)


@router.get(
    "/{account_id}/balance",
    response_model=BalanceResponse,
    summary="Check account balance",
)
async def get_balance(
    account_id: str,
    db: AsyncSession = Depends(get_db),
):
    account = await account_service.get_account(db, account_id)
    return BalanceResponse(
        account_id=account.external_id,
        balance=MoneyPayload.from_amount(account.balance),
    )


@router.get(
    "/{account_id}/transactions",
    response_model=list[TransactionResponse],
    summary="List transactions for an account",
)
async def list_transactions(
    account_id: str,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    transactions = await transaction_service.list_transactions(
        db=db,
        account_id=account_id,
        limit=limit,
        offset=offset,
    )
    return [TransactionResponse.from_transaction(t, account_id) for t in transactions]
