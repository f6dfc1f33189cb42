"""
Tests for the wire codecs: {currency_code, units, nanos} money and
{year, month, day} dates.
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from ledger.exceptions import InvalidAmountError
from ledger.money import Amount
from ledger.schemas.common import DatePayload, MoneyPayload


class TestMoneyPayload:

    def test_units_only(self):
        money = MoneyPayload(currency_code="USD", units=1)
        assert money.to_amount() == Amount.of("USD", "1.00")

    def test_units_and_nanos(self):
        money = MoneyPayload(currency_code="USD", units=-1, nanos=-750_000_000)
        assert money.to_amount() == Amount.of("USD", "-1.75")

    def test_nanos_below_currency_scale_rejected(self):
        """0.005 USD has a digit past the cent and is rejected, not truncated."""
        money = MoneyPayload(currency_code="USD", units=0, nanos=5_000_000)
        with pytest.raises(InvalidAmountError):
            money.to_amount()

    def test_opposite_signs_rejected(self):
        money = MoneyPayload(currency_code="USD", units=1, nanos=-500_000_000)
        with pytest.raises(InvalidAmountError, match="same sign"):
            money.to_amount()

    def test_units_beyond_storable_range_rejected(self):
        money = MoneyPayload(currency_code="USD", units=9 * 10**18)
        with pytest.raises(InvalidAmountError):
            money.to_amount()

    def test_nanos_out_of_range_rejected(self):
        with pytest.raises(ValidationError):
            MoneyPayload(currency_code="USD", units=0, nanos=1_000_000_000)

    def test_lowercase_currency_rejected(self):
        with pytest.raises(ValidationError):
            MoneyPayload(currency_code="usd", units=1)

    def test_from_amount(self):
        money = MoneyPayload.from_amount(Amount.of("EUR", Decimal("-3.25")))
        assert money.currency_code == "EUR"
        assert money.units == -3
        assert money.nanos == -250_000_000


class TestDatePayload:

    def test_to_date(self):
        assert DatePayload(year=2020, month=1, day=1).to_date() == date(2020, 1, 1)

    def test_impossible_date_rejected(self):
        with pytest.raises(ValidationError):
            DatePayload(year=2021, month=2, day=30)

    def test_from_date(self):
        payload = DatePayload.from_date(date(2024, 2, 29))
        assert (payload.year, payload.month, payload.day) == (2024, 2, 29)
