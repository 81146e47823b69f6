# -*- coding: utf-8 -*-
"""
Иерархия ошибок конвейера и централизованное логирование.

Ни одна из ошибок не должна доходить до пользователя: планировщик таймлайна
поглощает их и выдаёт заглушку или кэш.
"""

import logging
from typing import Optional

logger = logging.getLogger("error_handler")


class WidgetError(Exception):
    """Базовая ошибка конвейера виджета."""


# === ЛОКАЦИЯ ===
class PermissionDenied(WidgetError):
    """Нет разрешения на определение местоположения."""


class LocationUnavailable(WidgetError):
    """Службы геолокации выключены или не вернули координаты."""


# === ГЕОКОДИНГ ===
class GeocodeFailed(WidgetError):
    """Обратный геокодинг не удался (не фатально)."""


# === ПРОГНОЗ ===
class ForecastError(WidgetError):
    """Базовая ошибка получения прогноза."""


class InvalidRequest(ForecastError):
    """Неверный URL, ключ API или параметры запроса."""


class NetworkError(ForecastError):
    """Транспортная ошибка или таймаут."""


class DecodeError(ForecastError):
    """Ответ не удалось разобрать."""


def log_exception(exception: Exception, message: str = "Необработанное исключение", context: Optional[dict] = None):
    """
    Логирует исключение без выбрасывания.

    Args:
        exception (Exception): Исключение
        message (str): Описание
        context (dict): Контекст (lat, lon и т.п.)
    """
    log_context = f" | Контекст: {context}" if context else ""
    # Ожидаемые ошибки конвейера — без трейсбека
    exc_info = not isinstance(exception, WidgetError)
    logger.error(f"{message}{log_context} | Ошибка: {exception!r}", exc_info=exc_info)


def log_and_raise(message: str, exception: Exception, context: Optional[dict] = None):
    """
    Логирует ошибку и выбрасывает её дальше.

    Args:
        message (str): Описание
        exception (Exception): Исключение, которое обрабатывается
        context (dict): Дополнительный контекст
    """
    log_context = f" | Контекст: {context}" if context else ""
    logger.error(f"{message}{log_context} | Ошибка: {exception!r}", exc_info=True)
    raise exception
