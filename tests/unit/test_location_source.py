# -*- coding: utf-8 -*-
"""
Тесты для core/utils/location_source.py
"""
import asyncio

import pytest
import requests

from conftest import FakeResponse, FakeSession
from weather_widget.core.models.forecast import Coordinate
from weather_widget.core.utils.error_handler import LocationUnavailable, PermissionDenied
from weather_widget.core.utils.location_source import IP_API_URL, IPLocationSource, LocationSource, StaticLocationSource


class SlowSource(LocationSource):
    def __init__(self, coordinate, gate):
        super().__init__()
        self.coordinate = coordinate
        self.gate = gate
        self.lookups = 0

    async def _locate(self):
        self.lookups += 1
        await self.gate.wait()
        return self.coordinate


async def test_static_source_returns_coordinate(nyc):
    source = StaticLocationSource(nyc)
    assert await source.request_once() == nyc
    assert source.last_known == nyc
    assert not source.in_flight


async def test_disabled_services_raise_unavailable(nyc):
    with pytest.raises(LocationUnavailable):
        await StaticLocationSource(nyc, enabled=False).request_once()


async def test_missing_permission_raises_permission_denied(nyc):
    with pytest.raises(PermissionDenied):
        await StaticLocationSource(nyc, authorized=False).request_once()


async def test_authorization_change_requires_new_request(nyc):
    source = StaticLocationSource(nyc, authorized=False)
    with pytest.raises(PermissionDenied):
        await source.request_once()

    source.set_authorization(True)
    # Ничего не разрешилось само: last_known пуст, пока не запросили заново
    assert source.last_known is None
    assert await source.request_once() == nyc


async def test_single_request_in_flight(nyc):
    gate = asyncio.Event()
    source = SlowSource(nyc, gate)

    first = asyncio.ensure_future(source.request_once())
    await asyncio.sleep(0)
    assert source.in_flight
    second = asyncio.ensure_future(source.request_once())
    await asyncio.sleep(0)

    gate.set()
    results = await asyncio.gather(first, second)

    assert results == [nyc, nyc]
    assert source.lookups == 1


async def test_ip_source_parses_response():
    session = FakeSession(FakeResponse({"status": "success", "lat": 40.7128, "lon": -74.006}))
    source = IPLocationSource(session=session, timeout=3)

    coordinate = await source.request_once()

    assert coordinate == Coordinate(40.7128, -74.006)
    assert session.calls[0]["url"] == IP_API_URL
    assert session.calls[0]["timeout"] == 3


@pytest.mark.parametrize("response", [
    requests.exceptions.ConnectionError("offline"),
    FakeResponse(status_code=500),
    FakeResponse(text="oops"),
    FakeResponse({"status": "fail", "message": "private range"}),
    FakeResponse({"status": "success", "lat": 123.0, "lon": 0}),
])
async def test_ip_source_failures_are_unavailable(response):
    with pytest.raises(LocationUnavailable):
        await IPLocationSource(session=FakeSession(response)).request_once()
