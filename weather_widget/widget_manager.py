# widget_manager.py
# -*- coding: utf-8 -*-
"""
Глобальный координатор зависимостей виджета.
Инициализирует конфигурацию, хранилище и клиенты один раз и собирает из них
планировщик таймлайна.
"""

import logging
from pathlib import Path
from typing import Optional

from weather_widget.config.db_config import WIDGET_STORE_DB
from weather_widget.config.logging_config import setup_logging
from weather_widget.config.widget_config import WidgetConfig
from weather_widget.core.db.local_db_widget import KeyValueStore, SQLiteKeyValueStore
from weather_widget.core.timeline_provider import TimelineProvider
from weather_widget.core.utils.api_client import ForecastClient
from weather_widget.core.utils.coordinate_manager import ReverseGeocoder
from weather_widget.core.utils.location_source import IPLocationSource

logger = logging.getLogger("widget_manager")


class WidgetManager:
    """
    Единый контекст приложения. Все зависимости инициализируются здесь.
    """

    def __init__(self):
        self._initialized = False
        self.config: Optional[WidgetConfig] = None
        self.store: Optional[KeyValueStore] = None
        self.provider: Optional[TimelineProvider] = None

    def initialize_sync(
        self,
        config: Optional[WidgetConfig] = None,
        store: Optional[KeyValueStore] = None,
        db_path: Optional[Path] = None,
        configure_logging: bool = True
    ):
        """Синхронная инициализация всех компонентов."""
        if self._initialized:
            return

        # 1. Загрузка конфигурации
        self.config = config or WidgetConfig.load()
        if configure_logging:
            setup_logging(self.config.log_level)

        # 2. Хранилище
        self.store = store or SQLiteKeyValueStore(db_path=db_path or WIDGET_STORE_DB)

        # 3. Клиенты и планировщик
        timeout = self.config.request_timeout_sec
        self.provider = TimelineProvider(
            config=self.config,
            store=self.store,
            location_source=IPLocationSource(
                enabled=self.config.location_services_enabled,
                authorized=self.config.location_authorized,
                timeout=timeout
            ),
            geocoder=ReverseGeocoder(user_agent=self.config.nominatim_user_agent, timeout=timeout),
            forecast_client=ForecastClient(timeout=timeout)
        )

        if not self.config.weather_api_key:
            logger.warning("⚠️ OPENWEATHER_API_KEY не задан: прогноз будет браться только из кэша")

        self._initialized = True
        logger.info("✅ WidgetManager: initialized (unit=%s)", self.config.temperature_unit)

    def shutdown_sync(self):
        """Синхронное завершение."""
        if not self._initialized:
            return
        # SQLite-хранилище открывает соединения на каждый вызов, закрывать нечего
        self._initialized = False
        logger.info("🛑 WidgetManager: shut down")


# Глобальный экземпляр — точка доступа для всех модулей
widget_manager = WidgetManager()
