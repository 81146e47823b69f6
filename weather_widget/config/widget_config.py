# config/widget_config.py
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger("widget_config")

# === КООРДИНАТЫ ПО УМОЛЧАНИЮ (Манхэттен) ===
DEFAULT_LATITUDE = 40.5
DEFAULT_LONGITUDE = -74.0
DEFAULT_LOCATION_NAME = "Manhattan, New York, US"

# === ТАЙМЛАЙН ===
REFRESH_INTERVAL_MINUTES = 30
FORECAST_DAYS = 4
OUTDATED_AFTER_HOURS = 3
FAILED_AFTER_HOURS = 6

SUPPORTED_UNITS = ("standard", "metric", "imperial")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _env_int(name: str, default: int, minimum: int = 1) -> int:
    """Целое из окружения; мусор или значение меньше minimum → default."""
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    try:
        parsed = int(value)
    except ValueError:
        logger.warning("⚠️ %s=%r не целое число, используем %d", name, value, default)
        return default
    if parsed < minimum:
        logger.warning("⚠️ %s=%d меньше %d, используем %d", name, parsed, minimum, default)
        return default
    return parsed


@dataclass
class WidgetConfig:
    weather_api_key: str
    temperature_unit: str = "imperial"
    use_custom_location: bool = False
    custom_latitude: Optional[float] = None
    custom_longitude: Optional[float] = None
    location_services_enabled: bool = True
    location_authorized: bool = True
    refresh_interval_minutes: int = REFRESH_INTERVAL_MINUTES
    request_timeout_sec: int = 15
    nominatim_user_agent: str = "WeatherWidget/1.0"
    log_level: str = "INFO"

    @classmethod
    def load(cls):
        return cls(
            weather_api_key=os.getenv("OPENWEATHER_API_KEY", ""),
            temperature_unit=os.getenv("TEMPERATURE_UNIT", "imperial").lower(),
            use_custom_location=_env_bool("USE_CUSTOM_LOCATION", False),
            custom_latitude=_env_float("CUSTOM_LATITUDE"),
            custom_longitude=_env_float("CUSTOM_LONGITUDE"),
            location_services_enabled=_env_bool("LOCATION_SERVICES_ENABLED", True),
            location_authorized=_env_bool("LOCATION_AUTHORIZED", True),
            refresh_interval_minutes=_env_int("REFRESH_INTERVAL_MINUTES", REFRESH_INTERVAL_MINUTES),
            request_timeout_sec=_env_int("REQUEST_TIMEOUT_SEC", 15),
            nominatim_user_agent=os.getenv("NOMINATIM_USER_AGENT", "WeatherWidget/1.0"),
            log_level=os.getenv("LOG_LEVEL", "INFO")
        )
