# -*- coding: utf-8 -*-
"""
Обратный геокодинг для подписи виджета.

Функции:
- Получение короткого названия места по координатам (Nominatim)
- Правило длины: "город, регион" + ", страна", только если итог ≤ 24 символов

Ошибки геокодинга не фатальны: планировщик оставляет прежнее название.

Использование:
>>> geocoder = ReverseGeocoder(user_agent="WeatherWidget/1.0")
>>> await geocoder.resolve(Coordinate(40.71, -74.0))
'New York, New York, US'
"""

import asyncio
import logging
from typing import Dict, Optional

import requests

from weather_widget.core.models.forecast import Coordinate
from weather_widget.core.utils.error_handler import GeocodeFailed

logger = logging.getLogger("coordinate_manager")

# === КОНФИГУРАЦИЯ ===
NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"
REQUEST_TIMEOUT = 10  # секунд
MAX_PLACE_LENGTH = 24

LOCALITY_FIELDS = ("city", "town", "village", "suburb", "hamlet", "municipality")
REGION_FIELDS = ("state", "province", "region", "county")


def format_place_string(
    locality: Optional[str],
    region: Optional[str],
    country: Optional[str],
    max_length: int = MAX_PLACE_LENGTH
) -> Optional[str]:
    """
    Собирает подпись места.

    Страна добавляется, только если полная строка укладывается в max_length;
    иначе возвращается "город, регион" без страны.

    Returns:
        Optional[str]: Подпись или None, если нет ни города, ни региона, ни страны
    """
    parts = [p.strip() for p in (locality, region) if p and p.strip()]
    country = country.strip() if country else None
    if not parts:
        return country or None

    unqualified = ", ".join(parts)
    if country:
        qualified = f"{unqualified}, {country}"
        if len(qualified) <= max_length:
            return qualified
    return unqualified


def _first_field(address: Dict, fields: tuple) -> Optional[str]:
    for name in fields:
        value = address.get(name)
        if value:
            return value
    return None


class ReverseGeocoder:
    """Клиент Nominatim для обратного геокодинга."""

    def __init__(
        self,
        user_agent: str = "WeatherWidget/1.0",
        session: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT,
        language: str = "en"
    ):
        self.user_agent = user_agent
        self.session = session or requests.Session()
        self.timeout = timeout
        self.language = language

    def _reverse_geocode(self, coordinate: Coordinate) -> Dict:
        """Запрос к Nominatim; возвращает словарь address."""
        if not coordinate.is_valid():
            raise GeocodeFailed(f"Неверные координаты: {coordinate}")

        params = {
            "lat": coordinate.latitude,
            "lon": coordinate.longitude,
            "format": "json",
            "addressdetails": 1,
            "accept-language": self.language
        }
        headers = {"User-Agent": self.user_agent}

        try:
            response = self.session.get(NOMINATIM_URL, params=params, headers=headers, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise GeocodeFailed(f"Ошибка геокодирования (Nominatim): {e}") from e
        except ValueError as e:
            raise GeocodeFailed(f"Ошибка обработки ответа Nominatim: {e}") from e

        if not isinstance(data, dict) or "error" in data:
            error = data.get("error") if isinstance(data, dict) else data
            raise GeocodeFailed(f"Nominatim не нашёл место: {error}")
        address = data.get("address")
        if not isinstance(address, dict):
            raise GeocodeFailed("Nominatim вернул ответ без адреса")
        return address

    def _resolve_sync(self, coordinate: Coordinate) -> str:
        address = self._reverse_geocode(coordinate)
        country_code = address.get("country_code")
        place = format_place_string(
            _first_field(address, LOCALITY_FIELDS),
            _first_field(address, REGION_FIELDS),
            country_code.upper() if country_code else None
        )
        if not place:
            raise GeocodeFailed(f"Пустой адрес для {coordinate.label()}")
        logger.info("🌍 Название места: %s", place)
        return place

    async def resolve(self, coordinate: Coordinate) -> str:
        """
        Возвращает короткую подпись места.

        Raises:
            GeocodeFailed: сеть, сервис или пустой ответ
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._resolve_sync, coordinate)
