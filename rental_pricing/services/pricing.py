"""Rental price calculation over an equipment's configured rental periods.

A rental period is a fixed block of days sold at a fixed total price
("7 days for R$ 500"). For a requested duration the calculator combines
periods greedily, largest first, and compares the result with charging the
whole duration at the smallest period's daily rate. The cheaper of the two
is returned, so a customer never pays more than the plain pro-rated price.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from sqlalchemy.orm import Session, selectinload

from rental_pricing.config import DEFAULT_PERIOD_LABEL
from rental_pricing.models import Equipment
from rental_pricing.utils import to_decimal


logger = logging.getLogger(__name__)


class PricingError(ValueError):
    """Raised for rental requests that cannot be priced."""


class EquipmentNotFoundError(LookupError):
    def __init__(self, equipment_id: object) -> None:
        super().__init__(f"Equipment {equipment_id} not found.")
        self.equipment_id = equipment_id


@dataclass(frozen=True)
class RentalPeriod:
    days: int
    price: Decimal
    label: Optional[str] = None
    id: Optional[int] = None

    @property
    def display_label(self) -> str:
        return self.label or f"{self.days} dia(s)"

    @property
    def daily_rate(self) -> Decimal:
        return self.price / self.days


@dataclass(frozen=True)
class PriceComboResult:
    total_price: Decimal
    main_period: Optional[RentalPeriod]
    period_label: str
    price_per_day: Decimal


@dataclass(frozen=True)
class PriceCalculationResult:
    unit_price: Decimal
    total_price: Decimal
    applied_period: Optional[RentalPeriod]
    period_label: str
    price_per_day: Decimal


def as_rental_period(source: object) -> RentalPeriod:
    """Snapshot a period given as a RentalPeriod, an ORM row or a mapping."""
    if isinstance(source, RentalPeriod):
        period = source
    elif isinstance(source, dict):
        period = RentalPeriod(
            days=source.get("days"),
            price=source.get("price"),
            label=source.get("label"),
            id=source.get("id"),
        )
    else:
        period = RentalPeriod(
            days=getattr(source, "days", None),
            price=getattr(source, "price", None),
            label=getattr(source, "label", None),
            id=getattr(source, "id", None),
        )

    if isinstance(period.days, bool) or not isinstance(period.days, int) or period.days <= 0:
        raise PricingError(f"Rental period days must be a positive integer, got {period.days!r}.")
    try:
        price = to_decimal(period.price)
    except ValueError as exc:
        raise PricingError(str(exc)) from exc
    if not price.is_finite() or price < 0:
        raise PricingError(f"Rental period price cannot be negative, got {period.price!r}.")

    label = (period.label or "").strip() or None
    return RentalPeriod(days=period.days, price=price, label=label, id=period.id)


def smallest_period(periods: Sequence[RentalPeriod]) -> RentalPeriod:
    return min(periods, key=lambda period: (period.days, period.price))


def uniform_prorated_total(periods: Sequence[RentalPeriod], total_days: int) -> Decimal:
    smallest = smallest_period(periods)
    return smallest.price * total_days / smallest.days


def _combo_label(used: list[tuple[RentalPeriod, int]], prorated_days: int) -> str:
    if len(used) == 1 and not prorated_days:
        period, count = used[0]
        return period.display_label if count == 1 else f"{count}x {period.display_label}"

    parts = [f"{count}x {period.display_label}" for period, count in used]
    if prorated_days:
        parts.append(f"{prorated_days} dia(s) proporcional(is)")
    return " + ".join(parts)


def find_best_price_combo(periods: Sequence[object], total_days: int) -> PriceComboResult:
    if not periods:
        raise PricingError("At least one rental period is required.")
    if isinstance(total_days, bool) or not isinstance(total_days, int) or total_days <= 0:
        raise PricingError(f"Rental days must be a positive integer, got {total_days!r}.")
    periods = [as_rental_period(period) for period in periods]

    # Stable sort: equal day counts keep the cheaper period first, then input order.
    ordered = sorted(periods, key=lambda period: (-period.days, period.price))
    smallest = smallest_period(ordered)

    remaining_days = total_days
    whole_periods_price = Decimal(0)
    main_period: Optional[RentalPeriod] = None
    used: list[tuple[RentalPeriod, int]] = []

    for period in ordered:
        if remaining_days >= period.days:
            count = remaining_days // period.days
            used.append((period, count))
            whole_periods_price += period.price * count
            remaining_days -= period.days * count
            if main_period is None:
                main_period = period

    # A 1-day period always absorbs the remainder above, so anything left
    # is shorter than every configured period and is pro-rated.
    prorated_days = remaining_days

    # Both totals are compared as numerators over smallest.days; dividing
    # first would round each side to the context precision independently.
    greedy_numerator = whole_periods_price * smallest.days + smallest.price * prorated_days
    uniform_numerator = smallest.price * total_days
    if uniform_numerator < greedy_numerator or not used:
        uniform_price = uniform_numerator / smallest.days
        return PriceComboResult(
            total_price=uniform_price,
            main_period=smallest,
            period_label=smallest.display_label,
            price_per_day=uniform_price / total_days,
        )

    total_price = greedy_numerator / smallest.days
    return PriceComboResult(
        total_price=total_price,
        main_period=main_period,
        period_label=_combo_label(used, prorated_days),
        price_per_day=total_price / total_days,
    )


def _validate_request(days: int, quantity: int) -> None:
    if isinstance(days, bool) or not isinstance(days, int) or days <= 0:
        raise PricingError(f"Rental days must be a positive integer, got {days!r}.")
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
        raise PricingError(f"Quantity must be a positive integer, got {quantity!r}.")


def price_from_periods(
    periods: Iterable[object],
    days: int,
    quantity: int = 1,
    fallback_price_per_day: object = None,
) -> PriceCalculationResult:
    _validate_request(days, quantity)
    snapshot = [as_rental_period(period) for period in periods]

    if not snapshot:
        if fallback_price_per_day is None:
            raise PricingError("No rental periods configured and no daily rate to fall back on.")
        try:
            unit_price = to_decimal(fallback_price_per_day)
        except ValueError as exc:
            raise PricingError(str(exc)) from exc
        if not unit_price.is_finite() or unit_price < 0:
            raise PricingError("Daily rate cannot be negative.")
        return PriceCalculationResult(
            unit_price=unit_price,
            total_price=unit_price * days * quantity,
            applied_period=None,
            period_label=DEFAULT_PERIOD_LABEL,
            price_per_day=unit_price,
        )

    combo = find_best_price_combo(snapshot, days)
    return PriceCalculationResult(
        unit_price=combo.price_per_day,
        total_price=combo.total_price * quantity,
        applied_period=combo.main_period,
        period_label=combo.period_label,
        price_per_day=combo.price_per_day,
    )


def load_equipment(db: Session, equipment_id: int) -> Equipment:
    equipment = db.get(Equipment, equipment_id, options=[selectinload(Equipment.rental_periods)])
    if equipment is None:
        raise EquipmentNotFoundError(equipment_id)
    return equipment


def calculate_rental_price(db: Session, equipment_id: int, days: int, quantity: int = 1) -> PriceCalculationResult:
    equipment = load_equipment(db, equipment_id)
    result = price_from_periods(
        equipment.rental_periods,
        days,
        quantity,
        fallback_price_per_day=equipment.price_per_day,
    )
    logger.debug(
        "Quote equipment=%s days=%d quantity=%d total=%s label=%r",
        equipment_id,
        days,
        quantity,
        result.total_price,
        result.period_label,
    )
    return result


def calculate_multiple_rental_prices(db: Session, items: Iterable[dict], days: int) -> dict[str, object]:
    calculated_items: list[dict[str, object]] = []
    for item in items:
        equipment_id = item["equipment_id"]
        quantity = item.get("quantity", 1)
        result = calculate_rental_price(db, equipment_id, days, quantity)
        calculated_items.append(
            {
                "equipment_id": equipment_id,
                "quantity": quantity,
                "unit_price": result.price_per_day,
                "total_price": result.total_price,
                "period_label": result.period_label,
            }
        )

    grand_total = sum((item["total_price"] for item in calculated_items), Decimal(0))
    return {
        "items": calculated_items,
        "grand_total": grand_total,
    }
