"""
Value types shared by the ledger use cases.

Quantities are Decimals quantized to two places. Results handed back to
callers are frozen snapshots: nothing outside the use cases holds a
mutable reference to a balance.
"""

from dataclasses import asdict, dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Optional

from ledger.domain.exceptions import InvalidAmount, InvalidInput

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# Column widths (max_digits, two decimal places) used in ledger.models.
BALANCE_DIGITS = 14
ENERGY_DIGITS = 12
PRICE_DIGITS = 8
UNIT_RATE_DIGITS = 10


def max_for_digits(max_digits: int) -> Decimal:
    """Largest two-place Decimal a ``DecimalField(max_digits=...)`` column can hold."""
    return Decimal(10) ** (max_digits - 2) - CENT


MAX_AMOUNT = max_for_digits(BALANCE_DIGITS)


def quantize(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def ensure_fits(value: Decimal, field_name: str, max_digits: int = BALANCE_DIGITS, message=None) -> Decimal:
    """Reject a derived quantity that would not fit the column it is written to."""
    if abs(value) > max_for_digits(max_digits):
        raise InvalidAmount(field_name, value, message=message or f"{field_name} is too large.")
    return value


def to_decimal(value, field_name: str, allow_negative: bool = False, max_digits: int = BALANCE_DIGITS) -> Decimal:
    """Coerce a request value into a cent-quantized Decimal.

    Booleans, blanks, NaN, infinities and values wider than ``max_digits``
    are rejected along with anything that does not parse as a number.
    """
    if value is None or isinstance(value, bool):
        raise InvalidInput(field_name, value)
    if isinstance(value, float):
        value = repr(value)
    try:
        number = Decimal(str(value).strip())
        if not number.is_finite():
            raise InvalidInput(field_name, value)
        number = quantize(number)
    except (InvalidOperation, ValueError):
        raise InvalidInput(field_name, value)
    if number < 0 and not allow_negative:
        raise InvalidInput(field_name, value)
    if abs(number) > max_for_digits(max_digits):
        raise InvalidInput(field_name, value, message=f"{field_name} is too large.")
    return number


@dataclass(frozen=True)
class BillMetadata:
    """Optional descriptive fields recorded alongside a bill payment."""

    provider: str = ""
    consumer_number: str = ""
    consumer_name: str = ""
    billing_month: str = ""
    meter_number: str = ""
    units_consumed: Decimal = ZERO

    @classmethod
    def from_mapping(cls, data) -> "BillMetadata":
        data = data or {}
        units = data.get("units_consumed")
        return cls(
            provider=str(data.get("provider") or "")[:100],
            consumer_number=str(data.get("consumer_number") or "")[:50],
            consumer_name=str(data.get("consumer_name") or "")[:150],
            billing_month=str(data.get("billing_month") or "")[:20],
            meter_number=str(data.get("meter_number") or "")[:50],
            units_consumed=(
                ZERO if units in (None, "")
                else to_decimal(units, "units_consumed", max_digits=ENERGY_DIGITS)
            ),
        )

    def rate_per_unit(self, bill_amount: Decimal) -> Decimal:
        if self.units_consumed <= 0:
            return ZERO
        return ensure_fits(
            quantize(bill_amount / self.units_consumed),
            "units_consumed",
            max_digits=UNIT_RATE_DIGITS,
            message="units_consumed is too small for this bill amount.",
        )


@dataclass(frozen=True)
class BalanceSnapshot:
    credits: Decimal
    cash: Decimal


@dataclass(frozen=True)
class BillQuote:
    bill_amount: Decimal
    credits_to_use: Decimal
    credit_savings: Decimal
    cash_due: Decimal
    max_credits_for_bill: Decimal
    can_afford: bool

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class LifetimeImpact:
    role: str
    lifetime_units: Decimal
    co2_avoided_kg: int

    def to_dict(self):
        return asdict(self)


def bill_breakdown(bill_amount: Decimal, credits_to_use: Decimal, savings_rate: Decimal):
    """Return (credit_savings, cash_due) for a bill; cash_due never drops below zero."""
    credit_savings = ensure_fits(quantize(credits_to_use * savings_rate), "credits_to_use")
    cash_due = max(ZERO, quantize(bill_amount - credit_savings))
    return credit_savings, cash_due


def optional_text(value: Optional[str], limit: int) -> str:
    return (value or "").strip()[:limit]
