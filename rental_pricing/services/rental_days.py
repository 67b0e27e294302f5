from datetime import date, datetime, timedelta, timezone
from typing import Union


DateLike = Union[date, datetime]

ONE_DAY = timedelta(days=1)


def _as_utc_datetime(value: DateLike) -> datetime:
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)
    return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)


def calculate_rental_days(start: DateLike, end: DateLike) -> int:
    start_dt = _as_utc_datetime(start)
    end_dt = _as_utc_datetime(end)
    if end_dt < start_dt:
        raise ValueError("Rental end cannot be before the rental start.")
    elapsed = end_dt - start_dt
    days = elapsed // ONE_DAY
    if elapsed % ONE_DAY:
        days += 1
    return max(days, 1)
