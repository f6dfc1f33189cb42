"""
Amount — a currency-qualified exact decimal value.

Representation:
  No float ever enters this module. Values are `decimal.Decimal`
  quantized to the currency's scale, and are persisted as integer minor
  units (1.05 USD -> 105).

Scale rules:
  - A value with more significant fractional digits than the currency
    allows is rejected, never rounded: 1.005 USD is an error.
  - Trailing zeros are not significant: 1.000 USD is accepted and equals 1.00 USD.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from ledger.exceptions import CurrencyMismatchError, InvalidAmountError


# ISO 4217 alphabetic code -> number of fractional (minor unit) digits.
CURRENCY_DIGITS: dict[str, int] = {
    "AUD": 2,
    "CAD": 2,
    "CHF": 2,
    "CNY": 2,
    "EUR": 2,
    "GBP": 2,
    "HKD": 2,
    "NZD": 2,
    "RUB": 2,
    "SEK": 2,
    "SGD": 2,
    "USD": 2,
}


def currency_digits(currency: str) -> int:
    try:
        return CURRENCY_DIGITS[currency]
    except KeyError:
        raise InvalidAmountError(f"Unknown currency code {currency!r}") from None


def _quantum(digits: int) -> Decimal:
    return Decimal(1).scaleb(-digits)


# Minor units are persisted in signed 64-bit columns
MIN_MINOR_UNITS = -(2**63)
MAX_MINOR_UNITS = 2**63 - 1


def _check_range(currency: str, value: Decimal) -> None:
    minor_units = int(value.scaleb(currency_digits(currency)))
    if not MIN_MINOR_UNITS <= minor_units <= MAX_MINOR_UNITS:
        raise InvalidAmountError(f"{currency} {value} is outside the storable range")


@dataclass(frozen=True)
class Amount:
    """
    Immutable (currency, value) pair.

    Build instances with Amount.of() (or zero() / from_minor_units()), which
    validate the currency and scale; the bare constructor trusts its input.
    Equality compares currency and numeric value.
    """

    currency: str
    value: Decimal

    @classmethod
    def of(cls, currency: str, value: Decimal | int | str) -> "Amount":
        digits = currency_digits(currency)
        if isinstance(value, float):
            raise InvalidAmountError("Amounts must not be built from floats")
        try:
            value = Decimal(value)
        except InvalidOperation:
            raise InvalidAmountError(f"Invalid decimal value {value!r}") from None
        if not value.is_finite():
            raise InvalidAmountError(f"Invalid decimal value {value}")

        try:
            quantized = value.quantize(_quantum(digits))
        except InvalidOperation:
            raise InvalidAmountError(f"Value {value} is too large") from None
        if quantized != value:
            raise InvalidAmountError(
                f"{currency} allows {digits} fractional digits, got {value}"
            )
        _check_range(currency, quantized)
        return cls(currency, quantized)

    @classmethod
    def zero(cls, currency: str) -> "Amount":
        return cls.of(currency, 0)

    @classmethod
    def from_minor_units(cls, currency: str, minor_units: int) -> "Amount":
        digits = currency_digits(currency)
        return cls(currency, Decimal(minor_units).scaleb(-digits).quantize(_quantum(digits)))

    def to_minor_units(self) -> int:
        return int(self.value.scaleb(currency_digits(self.currency)))

    def add(self, other: "Amount") -> "Amount":
        if self.currency != other.currency:
            raise CurrencyMismatchError(expected=self.currency, actual=other.currency)
        total = self.value + other.value
        _check_range(self.currency, total)
        return Amount(self.currency, total)

    __add__ = add

    def __str__(self) -> str:
        return f"{self.currency} {self.value}"
