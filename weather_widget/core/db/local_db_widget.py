# -*- coding: utf-8 -*-
"""
Локальное хранилище ключ-значение для виджета.

Хранит между запусками:
- последние координаты (latitude / longitude)
- название места (location)
- последний успешный прогноз вместе со временем получения (cached_entry)

Таблицы:
- widget_store: key → value_json
"""

import json
import logging
import sqlite3
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from weather_widget.config.db_config import DB_CONNECTION_TIMEOUT, WIDGET_STORE_DB
from weather_widget.core.models.forecast import Coordinate, ForecastEntry
from weather_widget.core.utils.error_handler import log_and_raise

logger = logging.getLogger("local_db_widget")

# === КЛЮЧИ ===
LATITUDE_KEY = "latitude"
LONGITUDE_KEY = "longitude"
LOCATION_KEY = "location"
CACHED_ENTRY_KEY = "cached_entry"

# === SQL ЗАПРОСЫ ===
CREATE_TABLES_SQL = """
CREATE TABLE IF NOT EXISTS widget_store (
    key TEXT PRIMARY KEY,
    value_json TEXT NOT NULL,
    updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
);
"""


class KeyValueStore:
    """Интерфейс хранилища: значения — любые JSON-совместимые объекты."""

    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    def set(self, key: str, value: Any) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore(KeyValueStore):
    """Хранилище в памяти (тесты, однократный запуск без диска)."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()
        for key, value in (initial or {}).items():
            self.set(key, value)

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            raw = self._data.get(key)
        return json.loads(raw) if raw is not None else default

    def set(self, key: str, value: Any) -> None:
        # Сериализуем, чтобы поведение совпадало с SQLite-версией
        raw = json.dumps(value, ensure_ascii=False)
        with self._lock:
            self._data[key] = raw


class SQLiteKeyValueStore(KeyValueStore):
    """
    Хранилище на SQLite.
    Потокобезопасно за счёт локального подключения в каждом методе.
    """

    def __init__(self, db_path: Optional[Path] = None):
        self.db_path = Path(db_path or WIDGET_STORE_DB)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(
            self.db_path,
            timeout=DB_CONNECTION_TIMEOUT,
            check_same_thread=False
        )
        conn.row_factory = sqlite3.Row
        return conn

    def _init_db(self):
        """Создаёт таблицу при первом запуске."""
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._get_connection()
        try:
            conn.executescript(CREATE_TABLES_SQL)
            conn.commit()
            logger.info("Хранилище виджета инициализировано: %s", self.db_path)
        except sqlite3.Error as e:
            log_and_raise("Ошибка инициализации хранилища виджета", e, {"db_path": str(self.db_path)})
        finally:
            conn.close()

    def get(self, key: str, default: Any = None) -> Any:
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT value_json FROM widget_store WHERE key = ?",
                (key,)
            ).fetchone()
        finally:
            conn.close()
        if row is None:
            return default
        try:
            return json.loads(row["value_json"])
        except ValueError as e:
            logger.warning("⚠️ Повреждённое значение для ключа %s: %s", key, e)
            return default

    def set(self, key: str, value: Any) -> None:
        conn = self._get_connection()
        try:
            conn.execute(
                """
                INSERT OR REPLACE INTO widget_store (key, value_json, updated_at)
                VALUES (?, ?, CURRENT_TIMESTAMP)
                """,
                (key, json.dumps(value, ensure_ascii=False))
            )
            conn.commit()
            logger.debug("💾 Сохранено: %s", key)
        finally:
            conn.close()


# === ТИПИЗИРОВАННЫЕ ОПЕРАЦИИ ===
def save_coordinate(store: KeyValueStore, coordinate: Coordinate) -> None:
    store.set(LATITUDE_KEY, coordinate.latitude)
    store.set(LONGITUDE_KEY, coordinate.longitude)


def load_coordinate(store: KeyValueStore) -> Optional[Coordinate]:
    """Последние сохранённые координаты или None."""
    return Coordinate.parse(store.get(LATITUDE_KEY), store.get(LONGITUDE_KEY))


def save_location_name(store: KeyValueStore, name: str) -> None:
    store.set(LOCATION_KEY, name)


def load_location_name(store: KeyValueStore) -> Optional[str]:
    name = store.get(LOCATION_KEY)
    return name if isinstance(name, str) and name else None


def save_cached_entry(store: KeyValueStore, entry: ForecastEntry, fetched_at: datetime) -> None:
    """Перезаписывает последний успешный прогноз (запись и время — одним значением)."""
    store.set(CACHED_ENTRY_KEY, {"entry": entry.to_dict(), "fetched_at": fetched_at.isoformat()})
    logger.info("💾 Прогноз закэширован (%s)", fetched_at.isoformat())


def load_cached_entry(store: KeyValueStore) -> Optional[Tuple[ForecastEntry, datetime]]:
    """
    Возвращает (ForecastEntry, fetched_at) или None.

    Повреждённая запись считается отсутствующей.
    """
    raw = store.get(CACHED_ENTRY_KEY)
    if raw is None:
        return None
    try:
        entry = ForecastEntry.from_dict(raw["entry"])
        fetched_at = datetime.fromisoformat(raw["fetched_at"])
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        logger.warning("⚠️ Кэш прогноза не читается, игнорируем: %s", e)
        return None
    return entry, fetched_at
