# -*- coding: utf-8 -*-
"""
Конфигурация путей к хранилищу виджета.
Папка данных переопределяется через WIDGET_DATA_DIR.
"""

import os
from pathlib import Path

# === Папка данных ===
DATA_DIR = Path(os.getenv("WIDGET_DATA_DIR", Path.home() / ".weather_widget")).expanduser()

# === ХРАНИЛИЩЕ КЛЮЧ-ЗНАЧЕНИЕ (координаты, название места, последний прогноз) ===
WIDGET_STORE_DB = DATA_DIR / "widget_store.db"

# === ЛОГИ ===
LOGS_DIR = DATA_DIR / "logs"

# === ПАРАМЕТРЫ ПОДКЛЮЧЕНИЯ ===
DB_CONNECTION_TIMEOUT = 30  # секунд
