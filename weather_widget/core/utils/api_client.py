# -*- coding: utf-8 -*-
"""
Клиент прогноза OpenWeatherMap (One Call).

Один запрос: текущая погода + дневной прогноз.
Повторов нет — повторяет планировщик своим интервалом обновления.

Ошибки:
- InvalidRequest: нет ключа, неверные координаты/единицы, 400/401/403/404
- NetworkError: транспорт, таймаут, прочие HTTP-статусы
- DecodeError: ответ не JSON или неожиданной формы
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

import requests

from weather_widget.config.widget_config import FORECAST_DAYS
from weather_widget.core.models.forecast import (
    UNKNOWN_DESCRIPTION,
    UNKNOWN_ICON,
    Coordinate,
    CurrentConditions,
    DailyForecast,
    ForecastEntry,
    Temperature,
)
from weather_widget.core.utils.error_handler import DecodeError, InvalidRequest, NetworkError
from weather_widget.core.utils.validator import validate_unit

logger = logging.getLogger("api_client")

# === КОНФИГУРАЦИЯ API ===
BASE_URL = "https://api.openweathermap.org/data/2.5/onecall"
API_TIMEOUT = 15  # секунд
EXCLUDE = "minutely,hourly,alerts"
CLIENT_ERROR_STATUSES = (400, 401, 403, 404)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_daily(raw: Dict[str, Any]) -> DailyForecast:
    """Дневная запись из ответа API (dt / temp / weather / pop)."""
    temp = raw["temp"]
    weather = raw.get("weather") or []
    icon = weather[0].get("icon", UNKNOWN_ICON) if weather else UNKNOWN_ICON
    pop = float(raw.get("pop", 0.0))
    return DailyForecast(
        dt=int(raw["dt"]),
        temp=Temperature(
            morn=float(temp["morn"]),
            day=float(temp["day"]),
            eve=float(temp["eve"]),
            night=float(temp["night"]),
            min=float(temp["min"]),
            max=float(temp["max"]),
        ),
        icon=icon,
        pop=min(max(pop, 0.0), 1.0),
    )


def parse_current(raw: Dict[str, Any]) -> CurrentConditions:
    weather = raw.get("weather") or []
    description = weather[0].get("description", UNKNOWN_DESCRIPTION) if weather else UNKNOWN_DESCRIPTION
    return CurrentConditions(temp=float(raw["temp"]), description=description)


def parse_forecast(data: Any, date: datetime, days: int = FORECAST_DAYS) -> ForecastEntry:
    """
    Превращает JSON One Call в ForecastEntry.

    Дней меньше, чем days, — допустимо: берём сколько есть.

    Raises:
        DecodeError: неожиданная форма ответа
    """
    try:
        if not isinstance(data, dict):
            raise TypeError(f"ожидался объект, получено {type(data).__name__}")
        daily: List[DailyForecast] = [parse_daily(d) for d in (data.get("daily") or [])[:days]]
        current = parse_current(data["current"])
    except (KeyError, TypeError, ValueError, AttributeError, IndexError) as e:
        raise DecodeError(f"Неожиданный формат ответа: {e!r}") from e

    if len(daily) < days:
        logger.warning("⚠️ API вернул %d дней вместо %d", len(daily), days)
    return ForecastEntry(date=date, daily=daily, current=current)


class ForecastClient:
    """Клиент One Call API."""

    def __init__(
        self,
        session: Optional[requests.Session] = None,
        base_url: str = BASE_URL,
        timeout: int = API_TIMEOUT,
        clock: Callable[[], datetime] = _utcnow
    ):
        self.session = session or requests.Session()
        self.base_url = base_url
        self.timeout = timeout
        self.clock = clock

    def _build_params(self, coordinate: Coordinate, unit: str, api_key: str) -> Dict[str, Any]:
        if not api_key:
            raise InvalidRequest("Не задан ключ API (OPENWEATHER_API_KEY)")
        if not coordinate.is_valid():
            raise InvalidRequest(f"Неверные координаты: {coordinate}")
        if not validate_unit(unit):
            raise InvalidRequest(f"Неизвестная система единиц: {unit!r}")
        if not self.base_url.startswith(("http://", "https://")):
            raise InvalidRequest(f"Неверный URL: {self.base_url!r}")
        return {
            "lat": coordinate.latitude,
            "lon": coordinate.longitude,
            "exclude": EXCLUDE,
            "units": unit,
            "appid": api_key,
        }

    def fetch_sync(self, coordinate: Coordinate, unit: str, api_key: str) -> ForecastEntry:
        """Синхронный запрос прогноза (выполняется в executor из fetch)."""
        params = self._build_params(coordinate, unit, api_key)

        try:
            response = self.session.get(self.base_url, params=params, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise NetworkError(f"Таймаут запроса прогноза: {e}") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Ошибка сети: {e}") from e

        if response.status_code in CLIENT_ERROR_STATUSES:
            raise InvalidRequest(f"API отклонил запрос: HTTP {response.status_code}")
        try:
            response.raise_for_status()
        except requests.exceptions.HTTPError as e:
            raise NetworkError(f"Ошибка API: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise DecodeError(f"Ответ не является JSON: {e}") from e

        entry = parse_forecast(data, date=self.clock())
        logger.info(
            "✅ Прогноз получен для (%s): %d дн., сейчас %.0f° & %s",
            coordinate.label(), len(entry.daily), entry.current.temp, entry.current.description
        )
        return entry

    async def fetch(self, coordinate: Coordinate, unit: str, api_key: str) -> ForecastEntry:
        """
        Асинхронно получает прогноз.

        Raises:
            InvalidRequest, NetworkError, DecodeError
        """
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self.fetch_sync, coordinate, unit, api_key)
