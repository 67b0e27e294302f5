"""Money/datetime helpers — pure functions with no HTTP framework dependency."""
from __future__ import annotations

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from rental_pricing.config import CURRENCY_SYMBOL


CENT = Decimal("0.01")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_decimal(value: object) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")
    try:
        # via str() so 0.1 becomes Decimal("0.1")
        return Decimal(str(value))
    except (InvalidOperation, TypeError) as exc:
        raise ValueError(f"Invalid amount: {value!r}") from exc


def round_money(value: object) -> Decimal:
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def has_whole_cents(value: Decimal) -> bool:
    return value == value.quantize(CENT)


def money_to_float(value: object) -> float:
    return float(round_money(value))


def format_brl(value: object) -> str:
    try:
        amount = round_money(value or 0)
    except ValueError:
        amount = Decimal("0.00")
    sign = "-" if amount < 0 else ""
    integer_part, _, cents = f"{abs(amount):,.2f}".partition(".")
    return f"{sign}{CURRENCY_SYMBOL} {integer_part.replace(',', '.')},{cents}"
