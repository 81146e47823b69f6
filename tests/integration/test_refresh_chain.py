# -*- coding: utf-8 -*-
"""
Интеграционные тесты: полная цепочка на поддельных HTTP-сессиях
(ip-api → Nominatim → One Call) с SQLite-хранилищем и воркером обновления.
"""
from datetime import timedelta

from conftest import FakeResponse, FakeSession, one_call_payload
from weather_widget.core.db.local_db_widget import (
    SQLiteKeyValueStore,
    load_cached_entry,
    load_coordinate,
    load_location_name,
)
from weather_widget.core.models.forecast import Coordinate, EntryStatus
from weather_widget.core.timeline_provider import TimelineProvider
from weather_widget.core.utils.api_client import ForecastClient
from weather_widget.core.utils.coordinate_manager import ReverseGeocoder
from weather_widget.core.utils.location_source import IPLocationSource
from weather_widget.workers.refresh_worker import refresh_worker

import requests


def build_chain(config, store, clock, forecast_session):
    location_session = FakeSession(FakeResponse({"status": "success", "lat": 40.71, "lon": -74.01}))
    geo_session = FakeSession(FakeResponse({
        "address": {"suburb": "Manhattan", "state": "New York", "country_code": "us"},
    }))
    return TimelineProvider(
        config=config,
        store=store,
        location_source=IPLocationSource(session=location_session),
        geocoder=ReverseGeocoder(session=geo_session),
        forecast_client=ForecastClient(session=forecast_session, clock=clock),
        clock=clock,
    )


async def test_full_chain_persists_everything(tmp_path, config, clock):
    store = SQLiteKeyValueStore(db_path=tmp_path / "widget_store.db")
    forecast_session = FakeSession(FakeResponse(one_call_payload()))
    provider = build_chain(config, store, clock, forecast_session)

    timeline = await provider.build_timeline()
    await provider.drain_background()

    assert timeline.status == EntryStatus.LIVE
    assert len(timeline.entry.daily) == 4
    assert timeline.next_refresh == clock.now + timedelta(minutes=30)

    # Холодный старт: новое подключение к тому же файлу
    reopened = SQLiteKeyValueStore(db_path=tmp_path / "widget_store.db")
    assert load_coordinate(reopened) == Coordinate(40.71, -74.01)
    assert load_location_name(reopened) == "Manhattan, New York, US"
    cached_entry, fetched_at = load_cached_entry(reopened)
    assert cached_entry == timeline.entry
    assert fetched_at == clock.now


async def test_worker_degrades_as_cache_ages(memory_store, config, clock):
    forecast_session = FakeSession(
        FakeResponse(one_call_payload()),
        requests.exceptions.ConnectionError("offline"),
    )
    provider = build_chain(config, memory_store, clock, forecast_session)
    sleeps = []

    async def fake_sleep(seconds):
        sleeps.append(seconds)
        # Каждый «сон» — на два часа вперёд
        clock.advance(hours=2)

    timelines = await refresh_worker(provider, max_cycles=5, sleep=fake_sleep)

    assert [t.status for t in timelines] == [
        EntryStatus.LIVE,           # 0 ч
        EntryStatus.CACHED,         # 2 ч
        EntryStatus.OUTDATED,       # 4 ч
        EntryStatus.OUTDATED,       # 6 ч
        EntryStatus.UPDATE_FAILED,  # 8 ч
    ]
    assert sleeps == [30 * 60.0] * 4
    assert timelines[2].entry.daily == timelines[0].entry.daily


async def test_worker_survives_failing_handler(memory_store, config, clock):
    provider = build_chain(config, memory_store, clock, FakeSession(FakeResponse(one_call_payload())))
    handled = []

    async def handler(timeline):
        handled.append(timeline)
        raise ValueError("display crashed")

    async def fake_sleep(seconds):
        clock.advance(seconds=seconds)

    timelines = await refresh_worker(provider, on_timeline=handler, max_cycles=2, sleep=fake_sleep)

    assert len(timelines) == 2
    assert len(handled) == 2
