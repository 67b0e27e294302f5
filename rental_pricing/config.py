from pathlib import Path
import os


BASE_DIR = Path(__file__).resolve().parent.parent
APP_ENV = os.getenv("APP_ENV", "development").strip().lower()
IS_PRODUCTION = APP_ENV in {"prod", "production"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


DATA_DIR = Path(os.getenv("DATA_DIR", str(BASE_DIR / "data")))
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATA_DIR / 'rental_pricing.db'}")
DATABASE_ECHO = _env_bool("DATABASE_ECHO", False)

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING" if IS_PRODUCTION else "INFO").strip().upper()

DEFAULT_PERIOD_LABEL = "Diária"
CURRENCY_SYMBOL = "R$"

MAX_RENTAL_DAYS = int(os.getenv("MAX_RENTAL_DAYS", "3650"))
MAX_QUANTITY = int(os.getenv("MAX_QUANTITY", "999"))

EQUIPMENT_STATUSES = ("AVAILABLE", "RENTED", "MAINTENANCE", "INACTIVE")
