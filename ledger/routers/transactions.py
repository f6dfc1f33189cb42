"""
Transactions router — posting amounts to accounts.

  POST /v1/transactions   — Post an amount under a client operation id

Status mapping (see ledger.exceptions):
  account not found          -> 404 NOT_FOUND
  currency mismatch / scale  -> 400 INVALID_ARGUMENT
  concurrent insert          -> 500 INTERNAL (retry is safe)
  concurrent update          -> 409 ABORTED  (or 500 INTERNAL, configurable)
  account disappeared        -> 500 INTERNAL
  deadline exceeded          -> 504 DEADLINE_EXCEEDED
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.database import get_db
from ledger.schemas.transaction import TransactionCreateRequest, TransactionCreateResponse
from ledger.services import transaction_service

router = APIRouter()


@router.post(
    "",
    response_model=TransactionCreateResponse,
    summary="Create a transaction (idempotent)",
)
async def create_transaction(
    request: TransactionCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Post a signed amount to an account.

    Repeating a request with the same `operation_id` is a no-op that returns
    the same empty response, so clients can retry freely on timeouts and
    5xx responses.
    """
    result = await transaction_service.post_transaction(
        db=db,
        account_id=request.account_id,
        amount=request.amount.to_amount(),
        operation_id=request.operation_id,
        value_date=request.value_date.to_date(),
    )
    if not result.ok:
        raise result.error
    return TransactionCreateResponse()
