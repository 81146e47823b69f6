# main.py
# -*- coding: utf-8 -*-
"""
Точка входа погодного виджета.

Команды:
- once — один цикл обновления, печать записи
- run  — воркер обновления каждые 30 минут
- show — последний кэш без обращения к сети
"""
import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from weather_widget.core.db.local_db_widget import load_location_name
from weather_widget.core.models.forecast import Coordinate, ForecastEntry, Timeline
from weather_widget.core.utils.formatter import format_entry
from weather_widget.widget_manager import widget_manager
from weather_widget.workers.refresh_worker import refresh_worker


def _render(entry: ForecastEntry, coordinate: Optional[Coordinate]) -> str:
    return format_entry(entry, load_location_name(widget_manager.store), coordinate)


async def _print_timeline(timeline: Timeline):
    print(_render(timeline.entry, timeline.coordinate))
    print(f"Status: {timeline.status.value} | Next refresh: {timeline.next_refresh.isoformat(timespec='minutes')}")
    print()


async def run_once():
    provider = widget_manager.provider
    timeline = await provider.build_timeline()
    # Название места из фонового геокодинга понадобится следующему запуску
    await provider.drain_background()
    await _print_timeline(timeline)


async def run_worker(cycles: Optional[int]):
    await refresh_worker(widget_manager.provider, on_timeline=_print_timeline, max_cycles=cycles)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="weather-widget",
        description="Weather widget timeline: location → forecast → cached fallback."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("once", help="Run a single refresh cycle and print the entry")

    run_parser = subparsers.add_parser("run", help="Refresh on the 30-minute cadence")
    run_parser.add_argument("--cycles", type=int, default=None, help="Stop after N cycles")

    subparsers.add_parser("show", help="Print the cached entry without network access")
    return parser


# === Основная функция запуска ===
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    widget_manager.initialize_sync()
    logging.info("🚀 Запуск виджета: %s", args.command)

    try:
        if args.command == "once":
            asyncio.run(run_once())
        elif args.command == "run":
            asyncio.run(run_worker(args.cycles))
        elif args.command == "show":
            provider = widget_manager.provider
            print(_render(provider.snapshot(), provider.display_coordinate()))
    except KeyboardInterrupt:
        logging.info("🛑 Остановлено пользователем")
    finally:
        widget_manager.shutdown_sync()
    return 0


if __name__ == "__main__":
    sys.exit(main())
