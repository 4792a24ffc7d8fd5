"""Service configuration read from the environment."""
import os


def _env_flag(name: str, default: bool = False) -> bool:
    """Read a boolean-like flag; unknown values fall back to ``default``."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"0", "false", "off", "no"}:
        return False
    if value in {"1", "true", "on", "yes"}:
        return True
    return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.environ.get(name, default))
    except ValueError:
        return default


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.environ.get(name, default))
    except ValueError:
        return default


APP_NAME = "ReservationService"
APP_VERSION = "1.0.0"

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

# Room service; an empty base URL selects the in-memory room directory
ROOM_SERVICE_BASE_URL = os.environ.get("ROOM_SERVICE_BASE_URL", "")
ROOM_SERVICE_TIMEOUT_SECONDS = _env_float("ROOM_SERVICE_TIMEOUT_SECONDS", 10.0)
ROOM_SERVICE_MAX_RETRIES = _env_int("ROOM_SERVICE_MAX_RETRIES", 2)

# Business rules
CANCELLATION_WINDOW_HOURS = _env_float("CANCELLATION_WINDOW_HOURS", 48.0)

# Availability check and insert are not atomic; this serializes create/update per room type
SERIALIZE_RESERVATION_WRITES = _env_flag("SERIALIZE_RESERVATION_WRITES", default=False)
