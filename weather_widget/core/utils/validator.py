# core/utils/validator.py
from typing import Any, Optional, Tuple


def validate_coordinates(lat: Any, lon: Any) -> bool:
    """
    Проверяет, что координаты в допустимом диапазоне.

    Args:
        lat: Широта (-90 .. 90), число или строка
        lon: Долгота (-180 .. 180), число или строка

    Returns:
        bool: True, если координаты корректны
    """
    parsed = parse_coordinates(lat, lon)
    return parsed is not None


def parse_coordinates(lat: Any, lon: Any) -> Optional[Tuple[float, float]]:
    """Приводит координаты к float; None, если они пустые, нечисловые или вне диапазона."""
    if lat is None or lon is None or isinstance(lat, bool) or isinstance(lon, bool):
        return None
    try:
        lat_f = float(lat)
        lon_f = float(lon)
    except (TypeError, ValueError):
        return None
    # NaN не проходит сравнения
    if not (-90 <= lat_f <= 90 and -180 <= lon_f <= 180):
        return None
    return lat_f, lon_f


def validate_unit(unit: Any) -> bool:
    """Проверяет систему единиц OpenWeatherMap."""
    from weather_widget.config.widget_config import SUPPORTED_UNITS
    return isinstance(unit, str) and unit in SUPPORTED_UNITS
