import argparse
from decimal import Decimal, InvalidOperation

from sqlalchemy.orm import Session

from rental_pricing.database import SessionLocal, init_db
from rental_pricing.models import Equipment
from rental_pricing.services.pricing import PricingError, RentalPeriod
from rental_pricing.services.rental_periods import normalize_rental_periods, replace_rental_periods
from rental_pricing.utils import has_whole_cents


def parse_period(raw_value: str) -> RentalPeriod:
    """Parse DAYS:PRICE[:LABEL], e.g. "7:500" or "30:1200:Mensal"."""
    parts = raw_value.split(":", 2)
    if len(parts) < 2:
        raise argparse.ArgumentTypeError(f"Invalid period {raw_value!r}; expected DAYS:PRICE[:LABEL].")
    try:
        days = int(parts[0])
        price = Decimal(parts[1].replace(",", "."))
    except (ValueError, InvalidOperation) as exc:
        raise argparse.ArgumentTypeError(f"Invalid period {raw_value!r}; expected DAYS:PRICE[:LABEL].") from exc
    label = parts[2].strip() if len(parts) == 3 else None
    return RentalPeriod(days=days, price=price, label=label or None)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create or update an equipment and its rental periods.")
    parser.add_argument("--name", required=True, help="Equipment name")
    parser.add_argument("--category", required=True, help="Equipment category")
    parser.add_argument("--price-per-day", required=True, type=Decimal, help="Flat daily rate fallback")
    parser.add_argument("--quantity", type=int, default=1, help="Units owned")
    parser.add_argument(
        "--period",
        action="append",
        default=[],
        type=parse_period,
        help="Rental period as DAYS:PRICE[:LABEL]; repeatable",
    )
    parser.add_argument(
        "--update-existing",
        action="store_true",
        help="Update existing equipment when same name already exists",
    )
    return parser.parse_args(argv)


def seed_equipment(
    db: Session,
    *,
    name: str,
    category: str,
    price_per_day: Decimal,
    quantity: int = 1,
    periods: list[RentalPeriod],
    update_existing: bool = False,
) -> tuple[Equipment, bool]:
    name = name.strip()
    category = category.strip()
    if not name or not category:
        raise SystemExit("Name and category are required.")
    if price_per_day < 0:
        raise SystemExit("Daily rate cannot be negative.")
    if not has_whole_cents(price_per_day):
        raise SystemExit("Daily rate has more than 2 decimal places.")
    try:
        normalize_rental_periods(periods)
    except PricingError as exc:
        raise SystemExit(str(exc)) from exc

    row = db.query(Equipment).filter(Equipment.name == name).first()
    created = row is None
    if created:
        row = Equipment(name=name, category=category, price_per_day=price_per_day, quantity=quantity)
        db.add(row)
        db.flush()
    elif not update_existing:
        raise SystemExit("Equipment already exists. Use --update-existing to modify it.")
    else:
        row.category = category
        row.price_per_day = price_per_day
        row.quantity = quantity

    replace_rental_periods(db, row, periods)
    return row, created


def main(argv=None) -> None:
    args = parse_args(argv)
    init_db()

    db = SessionLocal()
    try:
        row, created = seed_equipment(
            db,
            name=args.name,
            category=args.category,
            price_per_day=args.price_per_day,
            quantity=args.quantity,
            periods=args.period,
            update_existing=args.update_existing,
        )
        tag = "CREATED" if created else "UPDATED"
        print(f"[{tag}] id={row.id} name={row.name} periods={len(row.rental_periods)}")
    finally:
        db.close()


if __name__ == "__main__":
    main()
