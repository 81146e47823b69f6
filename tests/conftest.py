# -*- coding: utf-8 -*-
"""
Общие фикстуры: поддельные HTTP-сессии, часы, клиенты и хранилища.
Сеть в тестах не используется.
"""
import asyncio
from datetime import datetime, timedelta, timezone

import pytest
import requests

from weather_widget.config.widget_config import WidgetConfig
from weather_widget.core.db.local_db_widget import InMemoryKeyValueStore, SQLiteKeyValueStore
from weather_widget.core.models.forecast import (
    Coordinate,
    CurrentConditions,
    DailyForecast,
    ForecastEntry,
    Temperature,
)
from weather_widget.core.utils.error_handler import GeocodeFailed, NetworkError

START = datetime(2024, 6, 29, 12, 0, 0, tzinfo=timezone.utc)


class FakeResponse:
    def __init__(self, payload=None, status_code=200, text=None):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def json(self):
        if self.text is not None:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error", response=self)


class FakeSession:
    """Отдаёт ответы по очереди; исключения в очереди выбрасываются."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        item = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(item, Exception):
            raise item
        return item


class FakeClock:
    def __init__(self, now=START):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeForecastClient:
    """Возвращает запись или выбрасывает ошибку; запоминает состояние провайдера."""

    def __init__(self, clock, result=None, error=None, duration=timedelta(seconds=2)):
        self.clock = clock
        self.result = result
        self.error = error
        self.duration = duration
        self.calls = []
        self.provider = None
        self.states_seen = []

    async def fetch(self, coordinate, unit, api_key):
        self.calls.append((coordinate, unit, api_key))
        if self.provider is not None:
            self.states_seen.append(self.provider.state)
        await asyncio.sleep(0)
        self.clock.advance(seconds=self.duration.total_seconds())
        if self.error is not None:
            raise self.error
        return self.result


class FakeGeocoder:
    def __init__(self, place="Manhattan, New York, US", error=None, gate=None):
        self.place = place
        self.error = error
        self.gate = gate
        self.calls = []

    async def resolve(self, coordinate):
        self.calls.append(coordinate)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.place


class RecordingLocationSource:
    def __init__(self, coordinate=None, error=None):
        self.coordinate = coordinate
        self.error = error
        self.calls = 0

    async def request_once(self):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.coordinate


def make_entry(date=START, temp=72.0, description="clear sky", days=4):
    daily = [
        DailyForecast(
            dt=1719676800 + i * 86400,
            temp=Temperature(morn=12 + i, day=28, eve=22, night=17, min=10 + i, max=30 - i),
            icon="01d",
            pop=0.2 * i,
        )
        for i in range(days)
    ]
    return ForecastEntry(date=date, daily=daily, current=CurrentConditions(temp=temp, description=description))


def one_call_payload(days=8):
    return {
        "timezone": "America/New_York",
        "current": {"temp": -3.0, "weather": [{"description": "snow"}]},
        "daily": [
            {
                "dt": 1719676800 + i * 86400,
                "temp": {"morn": 12, "day": 28, "eve": 22, "night": 17, "min": 20, "max": 25},
                "weather": [{"icon": "09d"}],
                "pop": 0.6,
            }
            for i in range(days)
        ],
    }


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory_store():
    return InMemoryKeyValueStore()


@pytest.fixture
def sqlite_store(tmp_path):
    return SQLiteKeyValueStore(db_path=tmp_path / "widget_store.db")


@pytest.fixture
def config():
    return WidgetConfig(weather_api_key="test-key", temperature_unit="imperial")


@pytest.fixture
def nyc():
    return Coordinate(40.71, -74.01)


@pytest.fixture
def network_error():
    return NetworkError("connection refused")


@pytest.fixture
def geocode_error():
    return GeocodeFailed("service unavailable")
