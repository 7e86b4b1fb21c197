"""Ledger parameters read from the SOLAR_LEDGER settings dict."""

from dataclasses import dataclass
from decimal import Decimal

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

DEFAULTS = {
    "SAVINGS_RATE": "2.00",
    "MIN_PRICE_PER_CREDIT": "0.50",
    "MAX_PRICE_PER_CREDIT": "2.50",
    "CO2_KG_PER_KWH": "0.82",
    "STARTING_CASH": "0.00",
}


@dataclass(frozen=True)
class LedgerSettings:
    savings_rate: Decimal
    min_price_per_credit: Decimal
    max_price_per_credit: Decimal
    co2_kg_per_kwh: Decimal
    starting_cash: Decimal


def ledger_settings() -> LedgerSettings:
    """Read the current ledger parameters.

    Read on every call rather than cached at import so override_settings
    applies in tests.
    """
    values = {**DEFAULTS, **getattr(settings, "SOLAR_LEDGER", {})}
    try:
        parsed = {key: Decimal(str(values[key])) for key in DEFAULTS}
    except ArithmeticError as exc:
        raise ImproperlyConfigured(f"SOLAR_LEDGER contains a non-numeric value: {exc}")

    if parsed["SAVINGS_RATE"] <= 0:
        raise ImproperlyConfigured("SOLAR_LEDGER['SAVINGS_RATE'] must be positive.")
    if parsed["MIN_PRICE_PER_CREDIT"] > parsed["MAX_PRICE_PER_CREDIT"]:
        raise ImproperlyConfigured("SOLAR_LEDGER price bounds are inverted.")

    return LedgerSettings(
        savings_rate=parsed["SAVINGS_RATE"],
        min_price_per_credit=parsed["MIN_PRICE_PER_CREDIT"],
        max_price_per_credit=parsed["MAX_PRICE_PER_CREDIT"],
        co2_kg_per_kwh=parsed["CO2_KG_PER_KWH"],
        starting_cash=parsed["STARTING_CASH"],
    )
