"""Rental period configuration: validation and storage for an equipment's periods."""
from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy.orm import Session

from rental_pricing.models import Equipment, RentalPeriodRow
from rental_pricing.services.pricing import PricingError, RentalPeriod, as_rental_period
from rental_pricing.utils import has_whole_cents


logger = logging.getLogger(__name__)

DEFAULT_LABELS = {
    1: "Diária",
    7: "Semanal",
    15: "Quinzenal",
    30: "Mensal",
}


def default_period_label(days: int) -> str:
    return DEFAULT_LABELS.get(days, f"{days} dias")


def normalize_rental_periods(periods: Iterable[object]) -> list[RentalPeriod]:
    normalized: list[RentalPeriod] = []
    seen_days: set[int] = set()
    for raw in periods:
        period = as_rental_period(raw)
        if period.price <= 0:
            raise PricingError(f"Price for the {period.days}-day period must be greater than zero.")
        if not has_whole_cents(period.price):
            raise PricingError(f"Price for the {period.days}-day period has more than 2 decimal places.")
        if period.days in seen_days:
            raise PricingError(f"Duplicate rental period for {period.days} day(s).")
        seen_days.add(period.days)
        normalized.append(period)
    return sorted(normalized, key=lambda period: period.days)


def replace_rental_periods(db: Session, equipment: Equipment, periods: Iterable[object]) -> list[RentalPeriodRow]:
    normalized = normalize_rental_periods(periods)

    equipment.rental_periods.clear()
    # Flush the deletes first so the (equipment_id, days) unique key is free again.
    db.flush()
    for period in normalized:
        equipment.rental_periods.append(
            RentalPeriodRow(days=period.days, price=period.price, label=period.label)
        )
    db.commit()
    db.refresh(equipment)

    logger.info(
        "Rental periods replaced: equipment=%s periods=%s",
        equipment.id,
        [(row.days, str(row.price)) for row in equipment.rental_periods],
    )
    return list(equipment.rental_periods)
