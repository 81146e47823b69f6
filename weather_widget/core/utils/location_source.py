# -*- coding: utf-8 -*-
"""
Источник местоположения.

Единственный асинхронный запрос за раз: если запрос уже выполняется,
повторные вызовы request_once() ждут его результата.

Реализации:
- StaticLocationSource: фиксированные координаты
- IPLocationSource: определение по IP через ip-api.com

Использование:
>>> source = IPLocationSource(timeout=10)
>>> coordinate = await source.request_once()
"""

import asyncio
import logging
from typing import Optional

import requests

from weather_widget.core.models.forecast import Coordinate
from weather_widget.core.utils.error_handler import LocationUnavailable, PermissionDenied

logger = logging.getLogger("location_source")

# === КОНФИГУРАЦИЯ ===
IP_API_URL = "http://ip-api.com/json/"
REQUEST_TIMEOUT = 10  # секунд


class LocationSource:
    """Базовый источник: проверка разрешений и один запрос в полёте."""

    def __init__(self, enabled: bool = True, authorized: bool = True):
        self.enabled = enabled
        self.authorized = authorized
        self._pending: Optional[asyncio.Future] = None
        self.last_known: Optional[Coordinate] = None

    def set_authorization(self, authorized: bool) -> None:
        """
        Меняет статус разрешения.

        Ожидающие запросы не переигрываются: вызывающий должен запросить заново.
        """
        self.authorized = authorized
        logger.info("🔐 Разрешение на геолокацию: %s", "есть" if authorized else "нет")

    @property
    def in_flight(self) -> bool:
        return self._pending is not None and not self._pending.done()

    async def request_once(self) -> Coordinate:
        """
        Однократно запрашивает координаты.

        Raises:
            LocationUnavailable: службы выключены или запрос не удался
            PermissionDenied: нет разрешения
        """
        if self.in_flight:
            logger.debug("📍 Запрос уже выполняется, ждём его результат")
            return await asyncio.shield(self._pending)

        if not self.enabled:
            raise LocationUnavailable("Службы геолокации выключены")
        if not self.authorized:
            raise PermissionDenied("Нет разрешения на определение местоположения")

        self._pending = asyncio.ensure_future(self._locate())
        coordinate = await asyncio.shield(self._pending)
        self.last_known = coordinate
        logger.info("📍 Координаты получены: %s", coordinate.label())
        return coordinate

    async def _locate(self) -> Coordinate:
        raise NotImplementedError


class StaticLocationSource(LocationSource):
    """Возвращает заранее заданную координату."""

    def __init__(self, coordinate: Coordinate, enabled: bool = True, authorized: bool = True):
        super().__init__(enabled=enabled, authorized=authorized)
        self.coordinate = coordinate

    async def _locate(self) -> Coordinate:
        return self.coordinate


class IPLocationSource(LocationSource):
    """Местоположение по внешнему IP-адресу."""

    def __init__(
        self,
        enabled: bool = True,
        authorized: bool = True,
        session: Optional[requests.Session] = None,
        timeout: int = REQUEST_TIMEOUT
    ):
        super().__init__(enabled=enabled, authorized=authorized)
        self.session = session or requests.Session()
        self.timeout = timeout

    def _fetch(self) -> Coordinate:
        params = {"fields": "status,message,lat,lon"}
        try:
            response = self.session.get(IP_API_URL, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise LocationUnavailable(f"Ошибка запроса местоположения: {e}") from e
        except ValueError as e:
            raise LocationUnavailable(f"Некорректный ответ ip-api: {e}") from e

        if not isinstance(data, dict) or data.get("status") != "success":
            message = data.get("message") if isinstance(data, dict) else None
            raise LocationUnavailable(f"ip-api не определил местоположение: {message or 'нет данных'}")

        coordinate = Coordinate.parse(data.get("lat"), data.get("lon"))
        if coordinate is None:
            raise LocationUnavailable(f"ip-api вернул неверные координаты: {data.get('lat')}, {data.get('lon')}")
        return coordinate

    async def _locate(self) -> Coordinate:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._fetch)
