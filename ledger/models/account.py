"""
Account table — one row per ledger account.

Each account has:
  - An internal UUID primary key (never shown to clients)
  - A unique external id chosen by the client ("account-id", "acc-ver", ...)
  - A currency fixed at creation time (ISO 4217)
  - A balance in integer minor units of that currency
  - A version counter for optimistic concurrency control

Storage:
  The balance is exact fixed-point at the currency's scale: 10.50 USD is
  stored as 1050. The ledger.money.Amount value type converts in both
  directions, so the rest of the code works in Decimal.

Versioning:
  `version` starts at 0 and is bumped by exactly one on every balance
  update, through account_store.save(). The update only applies when the
  stored version still equals the one the writer read, which is how lost
  updates between concurrent posters are detected.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, BigInteger, Integer, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from ledger.database import Base


class AccountRecord(Base):
    __tablename__ = "accounts"

    __table_args__ = (
        CheckConstraint("version >= 0", name="ck_accounts_non_negative_version"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Client-visible identifier, unique across all accounts
    external_id: Mapped[str] = mapped_column(
        String(64),
        unique=True,
        nullable=False,
    )

    # ISO 4217 currency code, never changes after creation
    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
    )

    balance_minor_units: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
