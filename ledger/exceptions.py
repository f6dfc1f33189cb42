"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain-specific errors without importing HTTP
concepts. Each error class carries the outbound status it maps to, and a
single handler translates them into JSON responses.

Exception hierarchy:
    LedgerError (base)
    ├── AccountNotFoundError       — no account with the given external id
    ├── CurrencyMismatchError      — amount currency differs from the account's
    ├── InvalidAmountError         — unknown currency or more digits than it allows
    ├── AccountAlreadyExistsError  — external id already taken
    ├── ConcurrentInsertError      — another poster inserted the same operation id
    ├── ConcurrentUpdateError      — optimistic-lock retries ran out
    ├── AccountDisappearedError    — account vanished between resolve and reload
    └── DeadlineExceededError      — the post ran past its deadline

    StoreError (base, never leaves the service layer)
    ├── DuplicateKeyError          — unique constraint violated on insert
    └── OptimisticConflictError    — row version moved since it was read

Error kinds:
  Callers that need to branch on the class of failure rather than the
  concrete type use `exc.kind`. CONTENTION errors are transient and safe
  to retry with the same operation id.
"""

import enum
import uuid

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ledger.config import settings


class ErrorKind(str, enum.Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    CONTENTION = "contention"
    INCONSISTENCY = "inconsistency"
    TIMEOUT = "timeout"


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class LedgerError(Exception):
    """Base exception for all Ledger API domain errors."""

    kind: ErrorKind = ErrorKind.INCONSISTENCY
    code: str = "INTERNAL"
    status_code: int = 500
    error_type: str = "internal"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class AccountNotFoundError(LedgerError):
    """Raised when a requested account does not exist."""

    kind = ErrorKind.NOT_FOUND
    code = "NOT_FOUND"
    status_code = 404
    error_type = "account_not_found"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account {account_id} not found")


class CurrencyMismatchError(LedgerError):
    """
    Raised when two amounts of different currencies meet.

    Attributes:
        expected: The currency the operation requires (e.g. the account's).
        actual: The currency that was supplied.
    """

    kind = ErrorKind.VALIDATION
    code = "INVALID_ARGUMENT"
    status_code = 400
    error_type = "currency_mismatch"

    def __init__(self, expected: str, actual: str):
        self.expected = expected
        self.actual = actual
        super().__init__(f"Currency mismatch: expected {expected}, got {actual}")


class InvalidAmountError(LedgerError):
    """Raised when a monetary value cannot be represented in its currency."""

    kind = ErrorKind.VALIDATION
    code = "INVALID_ARGUMENT"
    status_code = 400
    error_type = "invalid_amount"


class AccountAlreadyExistsError(LedgerError):
    """Raised when creating an account whose external id is already taken."""

    kind = ErrorKind.CONFLICT
    code = "ALREADY_EXISTS"
    status_code = 409
    error_type = "account_already_exists"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account {account_id} already exists")


class ConcurrentInsertError(LedgerError):
    """
    Raised when the operation id was inserted by a concurrent poster
    between the idempotency lookup and our own insert.

    Retrying the same request is safe: it will find the operation id and
    return without applying the amount a second time.
    """

    kind = ErrorKind.CONTENTION
    code = "INTERNAL"
    status_code = 500
    error_type = "concurrent_insert"

    def __init__(self, operation_id: str):
        self.operation_id = operation_id
        super().__init__("Concurrent transaction insert failed")


class ConcurrentUpdateError(LedgerError):
    """Raised when the account row kept changing under us for every retry."""

    kind = ErrorKind.CONTENTION
    error_type = "concurrent_update"

    def __init__(self, account_id: uuid.UUID, attempts: int):
        self.account_id = account_id
        self.attempts = attempts
        if settings.CONCURRENT_UPDATE_STATUS == "ABORTED":
            self.code, self.status_code = "ABORTED", 409
        else:
            self.code, self.status_code = "INTERNAL", 500
        super().__init__(
            f"Account {account_id} was updated concurrently, "
            f"gave up after {attempts} attempts"
        )


class AccountDisappearedError(LedgerError):
    """Raised when an account resolved earlier in the call can no longer be read."""

    kind = ErrorKind.INCONSISTENCY
    code = "INTERNAL"
    status_code = 500
    error_type = "account_disappeared"

    def __init__(self, account_id: uuid.UUID):
        self.account_id = account_id
        super().__init__("Account disappeared")


class DeadlineExceededError(LedgerError):
    kind = ErrorKind.TIMEOUT
    code = "DEADLINE_EXCEEDED"
    status_code = 504
    error_type = "deadline_exceeded"

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"Deadline of {timeout}s exceeded")


# ---------------------------------------------------------------------------
# Store exceptions
# ---------------------------------------------------------------------------

class StoreError(Exception):
    """Base exception for persistence-level signals consumed by services."""


class DuplicateKeyError(StoreError):
    """Raised when an insert violates a unique constraint."""

    def __init__(self, key: str):
        self.key = key
        super().__init__(f"Duplicate key {key}")


class OptimisticConflictError(StoreError):
    """Raised when a versioned save finds the stored version has moved on."""

    def __init__(self, row_id: uuid.UUID, expected_version: int):
        self.row_id = row_id
        self.expected_version = expected_version
        super().__init__(f"Row {row_id} is no longer at version {expected_version}")


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Every LedgerError is rendered as:
        {"detail": "...", "error_type": "...", "code": "NOT_FOUND"}
    with the HTTP status carried by the exception class.

    This is called once during app startup in main.py.
    """

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(
        request: Request, exc: LedgerError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "detail": exc.detail,
                "error_type": exc.error_type,
                "code": exc.code,
            },
        )
