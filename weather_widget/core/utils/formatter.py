# -*- coding: utf-8 -*-
"""
Текстовое представление записи таймлайна (для CLI и логов).
"""

from typing import List, Optional

from weather_widget.config.widget_config import DEFAULT_LOCATION_NAME
from weather_widget.core.models.forecast import Coordinate, DailyForecast, ForecastEntry, icon_symbol

RAINDROP_SLOTS = 5
COLUMN_WIDTH = 14


def raindrop_count(pop: float) -> int:
    """Сколько из 5 капель закрасить для вероятности осадков."""
    return max(0, min(RAINDROP_SLOTS, int(pop * RAINDROP_SLOTS)))


def format_day(daily: DailyForecast) -> List[str]:
    """Колонка дня: день недели, максимум, минимум, иконка, капли."""
    drops = raindrop_count(daily.pop)
    return [
        daily.date.strftime("%a").upper(),
        f"H: {daily.temp.max:.0f}°",
        f"L: {daily.temp.min:.0f}°",
        icon_symbol(daily.icon),
        "●" * drops + "○" * (RAINDROP_SLOTS - drops),
    ]


def format_entry(
    entry: ForecastEntry,
    location_name: Optional[str] = None,
    coordinate: Optional[Coordinate] = None
) -> str:
    """
    Формирует текст виджета.

    Args:
        entry (ForecastEntry): Запись таймлайна
        location_name (str): Подпись места (по умолчанию — Манхэттен)
        coordinate (Coordinate): Координаты для правого верхнего угла

    Returns:
        str: Многострочный текст
    """
    header = location_name or DEFAULT_LOCATION_NAME
    if coordinate is not None:
        header = f"{header}  |  {coordinate.label()}"

    lines = [header]
    columns = [format_day(d) for d in entry.daily[:4]]
    if columns:
        for row in range(len(columns[0])):
            lines.append("|".join(col[row].center(COLUMN_WIDTH) for col in columns))

    lines.append(f"Current: {entry.current.temp:.0f}° & {entry.current.description}")
    lines.append(f"Updated: {entry.date.isoformat(timespec='minutes')}")
    return "\n".join(lines)
