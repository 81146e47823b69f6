# core/models/forecast.py
# -*- coding: utf-8 -*-
"""
Модели данных виджета: координата, дневной прогноз, текущая погода,
запись таймлайна и сам таймлайн.

Записи сериализуются в JSON-словарь (to_dict / from_dict) для хранилища.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional

from weather_widget.core.utils.validator import parse_coordinates, validate_coordinates

# === ЗАГЛУШКИ ===
ENTRY_MISSING = "entry missing"
UPDATE_FAILED = "update failed"
DATA_OUTDATED = "data outdated"
UNKNOWN_ICON = "unknown"
UNKNOWN_DESCRIPTION = "unknown"

# Код иконки OpenWeatherMap → имя символа
WEATHER_ICON_MAP = {
    "01d": "sun.max",
    "01n": "moon",
    "02d": "cloud.sun",
    "02n": "cloud.moon",
    "03d": "cloud",
    "03n": "cloud.fill",
    "04d": "cloud",
    "04n": "cloud.fill",
    "09d": "cloud.rain",
    "09n": "cloud.rain.fill",
    "10d": "cloud.sun.rain",
    "10n": "cloud.moon.rain",
    "11d": "cloud.bolt",
    "11n": "cloud.bolt.fill",
    "13d": "snowflake",
    "13n": "snowflake",
    "50d": "cloud.fog",
    "50n": "cloud.fog.fill",
    UNKNOWN_ICON: "questionmark.circle",
}


def icon_symbol(icon: str) -> str:
    """Имя символа для кода иконки; неизвестные коды → вопросительный знак."""
    return WEATHER_ICON_MAP.get(icon, WEATHER_ICON_MAP[UNKNOWN_ICON])


class EntryStatus(str, Enum):
    """Какая ветка планировщика породила запись."""
    LIVE = "live"
    CACHED = "cached"
    OUTDATED = "outdated"
    UPDATE_FAILED = "update_failed"
    MISSING = "missing"


@dataclass(frozen=True)
class Coordinate:
    latitude: float
    longitude: float

    @classmethod
    def parse(cls, lat: Any, lon: Any) -> Optional["Coordinate"]:
        """Координата из сырых значений или None, если они вне диапазона."""
        parsed = parse_coordinates(lat, lon)
        if parsed is None:
            return None
        return cls(*parsed)

    def is_valid(self) -> bool:
        return validate_coordinates(self.latitude, self.longitude)

    def label(self) -> str:
        return f"{self.latitude:.2f}, {self.longitude:.2f}"


@dataclass(frozen=True)
class Temperature:
    morn: float = 0.0
    day: float = 0.0
    eve: float = 0.0
    night: float = 0.0
    min: float = 0.0
    max: float = 0.0

    def periods(self) -> List[float]:
        """Температуры утро/день/вечер/ночь."""
        return [self.morn, self.day, self.eve, self.night]


@dataclass(frozen=True)
class DailyForecast:
    dt: int
    temp: Temperature
    icon: str = UNKNOWN_ICON
    pop: float = 0.0

    @property
    def date(self) -> datetime:
        return datetime.fromtimestamp(self.dt, tz=timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dt": self.dt,
            "temp": {
                "morn": self.temp.morn,
                "day": self.temp.day,
                "eve": self.temp.eve,
                "night": self.temp.night,
                "min": self.temp.min,
                "max": self.temp.max,
            },
            "icon": self.icon,
            "pop": self.pop,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DailyForecast":
        temp = data["temp"]
        return cls(
            dt=int(data["dt"]),
            temp=Temperature(
                morn=float(temp["morn"]),
                day=float(temp["day"]),
                eve=float(temp["eve"]),
                night=float(temp["night"]),
                min=float(temp["min"]),
                max=float(temp["max"]),
            ),
            icon=str(data.get("icon", UNKNOWN_ICON)),
            pop=float(data.get("pop", 0.0)),
        )


@dataclass(frozen=True)
class CurrentConditions:
    temp: float = 0.0
    description: str = UNKNOWN_DESCRIPTION


def placeholder_days(count: int = 4) -> List[DailyForecast]:
    """Обнулённые дни с иконкой «unknown»."""
    return [DailyForecast(dt=0, temp=Temperature()) for _ in range(count)]


@dataclass(frozen=True)
class ForecastEntry:
    """Снимок данных для отображения (запись таймлайна)."""
    date: datetime
    daily: List[DailyForecast] = field(default_factory=placeholder_days)
    current: CurrentConditions = field(default_factory=CurrentConditions)

    @property
    def is_sentinel(self) -> bool:
        return self.current.description in (ENTRY_MISSING, UPDATE_FAILED)

    def mark_outdated(self) -> "ForecastEntry":
        """Дневные данные сохраняются, текущая погода заменяется заглушкой."""
        return replace(self, current=CurrentConditions(description=DATA_OUTDATED))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "daily": [d.to_dict() for d in self.daily],
            "current": {"temp": self.current.temp, "description": self.current.description},
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ForecastEntry":
        current = data.get("current") or {}
        return cls(
            date=datetime.fromisoformat(data["date"]),
            daily=[DailyForecast.from_dict(d) for d in data.get("daily", [])],
            current=CurrentConditions(
                temp=float(current.get("temp", 0.0)),
                description=str(current.get("description", UNKNOWN_DESCRIPTION)),
            ),
        )

    # === ЗАГЛУШКИ ===
    @classmethod
    def placeholder(cls, date: datetime) -> "ForecastEntry":
        return cls(date=date)

    @classmethod
    def missing(cls, date: datetime) -> "ForecastEntry":
        return cls(date=date, current=CurrentConditions(description=ENTRY_MISSING))

    @classmethod
    def update_failed(cls, date: datetime) -> "ForecastEntry":
        return cls(date=date, current=CurrentConditions(description=UPDATE_FAILED))


@dataclass(frozen=True)
class Timeline:
    entries: List[ForecastEntry]
    next_refresh: datetime
    status: EntryStatus = EntryStatus.LIVE
    # Координаты, для которых запрашивался прогноз
    coordinate: Optional[Coordinate] = None

    @property
    def entry(self) -> ForecastEntry:
        return self.entries[0]
