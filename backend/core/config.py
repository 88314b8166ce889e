import os

from dotenv import load_dotenv


load_dotenv()


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int(value: str | None, default: int) -> int:
    if value is None or not value.strip():
        return default
    return int(value)


def _get_float(value: str | None, default: float) -> float:
    if value is None or not value.strip():
        return default
    return float(value)

APP_ENV = os.getenv("APP_ENV", "development")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./clinic.db")
SQL_ECHO = _get_bool(os.getenv("SQL_ECHO"), default=False)

# Length of the interval probed when a caller asks who is free at a time of day.
DEFAULT_SLOT_WINDOW_MINUTES = _get_int(os.getenv("DEFAULT_SLOT_WINDOW_MINUTES"), default=30)

AVAILABILITY_MAX_WORKERS = _get_int(os.getenv("AVAILABILITY_MAX_WORKERS"), default=4)
AVAILABILITY_MAX_RANGE_DAYS = _get_int(os.getenv("AVAILABILITY_MAX_RANGE_DAYS"), default=92)
COLLABORATOR_TIMEOUT_SECONDS = _get_float(os.getenv("COLLABORATOR_TIMEOUT_SECONDS"), default=10.0)

# Empty means templates and reservations share naive local datetimes.
CLINIC_TIMEZONE = os.getenv("CLINIC_TIMEZONE", "")

def validate_runtime_config() -> None:
    if DEFAULT_SLOT_WINDOW_MINUTES <= 0:
        raise RuntimeError("DEFAULT_SLOT_WINDOW_MINUTES must be a positive number of minutes.")
    if AVAILABILITY_MAX_WORKERS < 1:
        raise RuntimeError("AVAILABILITY_MAX_WORKERS must be at least 1.")
    if AVAILABILITY_MAX_RANGE_DAYS < 1:
        raise RuntimeError("AVAILABILITY_MAX_RANGE_DAYS must be at least 1.")
    if COLLABORATOR_TIMEOUT_SECONDS < 0:
        raise RuntimeError("COLLABORATOR_TIMEOUT_SECONDS cannot be negative.")
    if APP_ENV.lower() == "production" and DATABASE_URL.startswith("sqlite"):
        raise RuntimeError("DATABASE_URL must point at a server database in production.")
