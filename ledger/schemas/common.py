"""
Wire representations of money and calendar dates.

Money travels as {currency_code, units, nanos}: a signed decimal with nine
fractional digits split into whole units and billionths. Both parts carry
the same sign, so -1.75 is units=-1, nanos=-750000000.

Conversion to Amount is exact. Digits beyond the currency's scale are
rejected with InvalidAmountError rather than rounded away.
"""

from datetime import date
from decimal import Decimal

from pydantic import BaseModel, Field, model_validator

from ledger.exceptions import InvalidAmountError
from ledger.money import Amount


class MoneyPayload(BaseModel):
    currency_code: str = Field(pattern=r"^[A-Z]{3}$", description="ISO 4217 code")
    units: int = 0
    nanos: int = Field(default=0, ge=-999_999_999, le=999_999_999)

    def to_amount(self) -> Amount:
        if (self.units > 0 and self.nanos < 0) or (self.units < 0 and self.nanos > 0):
            raise InvalidAmountError("amount.units and amount.nanos must have the same sign")
        value = Decimal(self.units) + Decimal(self.nanos).scaleb(-9)
        return Amount.of(self.currency_code, value)

    @classmethod
    def from_amount(cls, amount: Amount) -> "MoneyPayload":
        units = int(amount.value)  # truncates toward zero
        nanos = int((amount.value - units).scaleb(9))
        return cls(currency_code=amount.currency, units=units, nanos=nanos)


class DatePayload(BaseModel):
    year: int = Field(ge=1, le=9999)
    month: int = Field(ge=1, le=12)
    day: int = Field(ge=1, le=31)

    @model_validator(mode="after")
    def must_be_calendar_date(self):
        """Reject 2021-02-30 and friends."""
        self.to_date()
        return self

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    @classmethod
    def from_date(cls, value: date) -> "DatePayload":
        return cls(year=value.year, month=value.month, day=value.day)
