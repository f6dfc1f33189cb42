"""
Transaction table — one row per posted operation.

Rows are append-only: the poster inserts them and nothing updates or
deletes them afterwards.

Key fields:
  - operation_id: Client-generated idempotency key. The UNIQUE constraint
    is what makes posting idempotent under concurrency: of two posters
    racing on the same key, only one insert can succeed.
  - account_id: Owning account (internal id).
  - currency / amount_minor_units: Signed amount in minor units; the
    currency always equals the owning account's currency.
  - value_date: Business date the transaction is effective on (no time zone).
"""

import uuid
from datetime import date, datetime, timezone

from sqlalchemy import String, BigInteger, Date, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column

from ledger.database import Base


class TransactionRecord(Base):
    __tablename__ = "transactions"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    operation_id: Mapped[str] = mapped_column(
        String(128),
        unique=True,
        nullable=False,
    )

    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
        index=True,
    )

    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
    )

    # Signed: credits are positive, debits negative
    amount_minor_units: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    value_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
    )

    # Indexed for newest-first listing
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
