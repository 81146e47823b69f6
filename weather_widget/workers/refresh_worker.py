# -*- coding: utf-8 -*-
"""
Воркер обновления таймлайна: запускает цикл и спит до next_refresh.
"""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional

from weather_widget.core.models.forecast import Timeline
from weather_widget.core.timeline_provider import TimelineProvider

logger = logging.getLogger("refresh_worker")

TimelineHandler = Callable[[Timeline], Awaitable[None]]


async def refresh_worker(
    provider: TimelineProvider,
    on_timeline: Optional[TimelineHandler] = None,
    max_cycles: Optional[int] = None,
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
) -> List[Timeline]:
    """
    Строит таймлайн по расписанию провайдера.

    Args:
        provider (TimelineProvider): Планировщик
        on_timeline: Асинхронный обработчик каждого таймлайна
        max_cycles (int): Ограничение числа циклов (None — бесконечно)
        sleep: Функция ожидания (подменяется в тестах)

    Returns:
        List[Timeline]: Таймлайны всех выполненных циклов
    """
    logger.info("🔄 Refresh worker запущен")
    timelines: List[Timeline] = []
    cycle = 0

    try:
        while max_cycles is None or cycle < max_cycles:
            timeline = await provider.build_timeline()
            timelines.append(timeline)
            cycle += 1

            if on_timeline is not None:
                try:
                    await on_timeline(timeline)
                except Exception as e:
                    logger.error(f"❌ Обработчик таймлайна упал: {e}", exc_info=True)

            if max_cycles is not None and cycle >= max_cycles:
                break

            # === ЖДЁМ ДО СЛЕДУЮЩЕГО ОБНОВЛЕНИЯ ===
            delay = (timeline.next_refresh - provider.clock()).total_seconds()
            logger.info("⏳ Следующий цикл через %.0f с", max(delay, 0.0))
            await sleep(max(delay, 0.0))
    finally:
        await provider.drain_background()
        logger.info("🛑 Refresh worker остановлен после %d циклов", cycle)

    return timelines
