import argparse

from rental_pricing.database import SessionLocal
from rental_pricing.services.pricing import EquipmentNotFoundError, PricingError, calculate_rental_price
from rental_pricing.utils import format_brl


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Print a rental price quote for an equipment.")
    parser.add_argument("--equipment-id", required=True, type=int, help="Equipment id")
    parser.add_argument("--days", required=True, type=int, help="Rental length in days")
    parser.add_argument("--quantity", type=int, default=1, help="Units to rent")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = parse_args(argv)
    db = SessionLocal()
    try:
        result = calculate_rental_price(db, args.equipment_id, args.days, args.quantity)
    except (EquipmentNotFoundError, PricingError) as exc:
        raise SystemExit(str(exc)) from exc
    finally:
        db.close()

    print(f"{result.period_label}: {format_brl(result.total_price)} ({format_brl(result.price_per_day)}/dia)")


if __name__ == "__main__":
    main()
