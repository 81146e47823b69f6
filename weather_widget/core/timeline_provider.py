# -*- coding: utf-8 -*-
"""
Планировщик таймлайна погодного виджета.

Один цикл build_timeline():
1. Координаты: своя локация из настроек → источник геолокации →
   последние сохранённые → координаты по умолчанию
2. Обратный геокодинг в фоне (не блокирует выдачу, обновляет название
   для следующего цикла)
3. Запрос прогноза
4. Успех → запись + кэш; ошибка → политика устаревания кэша
5. Следующее обновление: now + 30 минут при любом исходе

Ни одна ошибка не выходит наружу: цикл всегда выдаёт запись для отображения.

Использование:
>>> provider = TimelineProvider(config, store, location_source, geocoder, forecast_client)
>>> timeline = await provider.build_timeline()
>>> timeline.entry.current.description
'clear sky'
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional, Set, Tuple

from weather_widget.config.widget_config import (
    DEFAULT_LATITUDE,
    DEFAULT_LONGITUDE,
    FAILED_AFTER_HOURS,
    OUTDATED_AFTER_HOURS,
    REFRESH_INTERVAL_MINUTES,
    WidgetConfig,
)
from weather_widget.core.db.local_db_widget import (
    KeyValueStore,
    load_cached_entry,
    load_coordinate,
    save_cached_entry,
    save_coordinate,
    save_location_name,
)
from weather_widget.core.models.forecast import Coordinate, EntryStatus, ForecastEntry, Timeline
from weather_widget.core.utils.api_client import ForecastClient
from weather_widget.core.utils.coordinate_manager import ReverseGeocoder
from weather_widget.core.utils.error_handler import log_exception
from weather_widget.core.utils.location_source import LocationSource

logger = logging.getLogger("timeline_provider")

DEFAULT_COORDINATE = Coordinate(DEFAULT_LATITUDE, DEFAULT_LONGITUDE)


class SchedulerState(str, Enum):
    IDLE = "idle"
    RESOLVING = "resolving"
    FETCHING = "fetching"
    EMITTING = "emitting"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def apply_staleness_policy(
    cached: Optional[Tuple[ForecastEntry, datetime]],
    now: datetime,
    outdated_after: timedelta = timedelta(hours=OUTDATED_AFTER_HOURS),
    failed_after: timedelta = timedelta(hours=FAILED_AFTER_HOURS)
) -> Tuple[ForecastEntry, EntryStatus]:
    """
    Что показать, если прогноз получить не удалось.

    - кэша нет → «entry missing»
    - возраст > 6 ч → «update failed», дневные данные не используются
    - 3 ч < возраст ≤ 6 ч → дни из кэша, текущая погода → «data outdated»
    - возраст ≤ 3 ч → кэш как есть
    """
    if cached is None:
        return ForecastEntry.missing(now), EntryStatus.MISSING

    entry, fetched_at = cached
    age = now - fetched_at
    if age > failed_after:
        return ForecastEntry.update_failed(now), EntryStatus.UPDATE_FAILED
    if age > outdated_after:
        return entry.mark_outdated(), EntryStatus.OUTDATED
    return entry, EntryStatus.CACHED


class TimelineProvider:
    """Оркестратор: локация → геокодинг → прогноз → запись таймлайна."""

    def __init__(
        self,
        config: WidgetConfig,
        store: KeyValueStore,
        location_source: Optional[LocationSource],
        geocoder: Optional[ReverseGeocoder],
        forecast_client: ForecastClient,
        clock: Callable[[], datetime] = _utcnow
    ):
        self.config = config
        self.store = store
        self.location_source = location_source
        self.geocoder = geocoder
        self.forecast_client = forecast_client
        self.clock = clock
        self.state = SchedulerState.IDLE
        self._cycle_lock = asyncio.Lock()
        self._background: Set[asyncio.Task] = set()

    @property
    def refresh_interval(self) -> timedelta:
        minutes = self.config.refresh_interval_minutes
        if not isinstance(minutes, int) or minutes < 1:
            # Неположительный интервал → 30 минут
            minutes = REFRESH_INTERVAL_MINUTES
        return timedelta(minutes=minutes)

    def _set_state(self, state: SchedulerState) -> None:
        logger.debug("🔁 %s → %s", self.state.value, state.value)
        self.state = state

    # === ЗАГЛУШКА / СНИМОК ===
    def placeholder(self) -> ForecastEntry:
        """Обнулённая запись для предпросмотра."""
        return ForecastEntry.placeholder(self.clock())

    def snapshot(self) -> ForecastEntry:
        """Последний кэш без обращения к сети (или заглушка)."""
        cached = self._load_cache()
        return cached[0] if cached else self.placeholder()

    def display_coordinate(self) -> Optional[Coordinate]:
        """Координаты для подписи снимка: своя локация или последние сохранённые."""
        if self.config.use_custom_location:
            return self._custom_coordinate() or DEFAULT_COORDINATE
        try:
            return load_coordinate(self.store)
        except Exception as e:
            log_exception(e, "Сохранённые координаты недоступны")
            return None

    # === КООРДИНАТЫ ===
    def _custom_coordinate(self) -> Optional[Coordinate]:
        return Coordinate.parse(self.config.custom_latitude, self.config.custom_longitude)

    async def resolve_coordinate(self) -> Coordinate:
        """
        Выбирает координаты для цикла.

        Своя локация вне диапазона → координаты по умолчанию
        (источник геолокации при этом не опрашивается).
        """
        if self.config.use_custom_location:
            custom = self._custom_coordinate()
            if custom is not None:
                logger.info("📍 Своя локация: %s", custom.label())
                return custom
            logger.warning(
                "⚠️ Своя локация вне диапазона (%s, %s), используем координаты по умолчанию",
                self.config.custom_latitude, self.config.custom_longitude
            )
            return DEFAULT_COORDINATE

        if self.location_source is not None:
            try:
                coordinate = await self.location_source.request_once()
            except Exception as e:
                log_exception(e, "Геолокация недоступна")
            else:
                try:
                    save_coordinate(self.store, coordinate)
                except Exception as e:
                    log_exception(e, "Не удалось сохранить координаты", {"coordinate": coordinate.label()})
                return coordinate

        try:
            persisted = load_coordinate(self.store)
        except Exception as e:
            log_exception(e, "Сохранённые координаты недоступны")
            persisted = None
        if persisted is not None:
            logger.info("📍 Последние сохранённые координаты: %s", persisted.label())
            return persisted

        logger.info("📍 Координаты по умолчанию: %s", DEFAULT_COORDINATE.label())
        return DEFAULT_COORDINATE

    # === ГЕОКОДИНГ В ФОНЕ ===
    async def _geocode(self, coordinate: Coordinate) -> None:
        try:
            place = await self.geocoder.resolve(coordinate)
            save_location_name(self.store, place)
        except Exception as e:
            # Прежнее название остаётся в хранилище
            log_exception(e, "Геокодинг пропущен", {"coordinate": coordinate.label()})

    def _schedule_geocode(self, coordinate: Coordinate) -> None:
        if self.geocoder is None:
            return
        task = asyncio.ensure_future(self._geocode(coordinate))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def drain_background(self) -> None:
        """Дожидается фоновых задач геокодинга."""
        if self._background:
            await asyncio.gather(*list(self._background), return_exceptions=True)

    # === КЭШ ===
    def _load_cache(self) -> Optional[Tuple[ForecastEntry, datetime]]:
        try:
            return load_cached_entry(self.store)
        except Exception as e:
            log_exception(e, "Кэш прогноза недоступен")
            return None

    def _store_cache(self, entry: ForecastEntry) -> None:
        fetched_at = self.clock()
        try:
            save_cached_entry(self.store, entry, fetched_at)
        except Exception as e:
            log_exception(e, "Не удалось сохранить прогноз в кэш")

    # === ЦИКЛ ===
    async def build_timeline(self) -> Timeline:
        """Один цикл обновления; всегда возвращает таймлайн с одной записью."""
        async with self._cycle_lock:
            try:
                self._set_state(SchedulerState.RESOLVING)
                coordinate = await self.resolve_coordinate()
                self._schedule_geocode(coordinate)

                self._set_state(SchedulerState.FETCHING)
                try:
                    entry = await self.forecast_client.fetch(
                        coordinate, self.config.temperature_unit, self.config.weather_api_key
                    )
                except Exception as e:
                    log_exception(e, "Не удалось получить прогноз", {"coordinate": coordinate.label()})
                    entry, status = apply_staleness_policy(self._load_cache(), self.clock())
                else:
                    self._store_cache(entry)
                    status = EntryStatus.LIVE

                self._set_state(SchedulerState.EMITTING)
                now = self.clock()
                next_refresh = now + self.refresh_interval
                logger.info(
                    "📤 Запись таймлайна: %s (%s), следующее обновление %s",
                    status.value, entry.current.description, next_refresh.isoformat()
                )
                return Timeline(entries=[entry], next_refresh=next_refresh, status=status, coordinate=coordinate)
            finally:
                self._set_state(SchedulerState.IDLE)
