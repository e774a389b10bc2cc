from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any
from urllib.parse import parse_qs, urlsplit

import pytest

from sfmap._transport import HttpResponse
from sfmap.config import SfmConfig
from sfmap.exceptions import GeocodeError, SfmTransportError
from sfmap.geocoder import Geocoder


class _FakeTransport:
    def __init__(self, *responses: HttpResponse | Exception) -> None:
        self.responses = list(responses)
        self.urls: list[str] = []

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> HttpResponse:
        self.urls.append(url)
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def _geocoder(transport: _FakeTransport, rest_key: str = "rest-key") -> Geocoder:
    config = SfmConfig(amap_rest_key=rest_key)
    return Geocoder(lambda: config, transport)


@pytest.mark.asyncio
async def test_resolve_takes_first_candidate() -> None:
    body = {"status": "1", "geocodes": [{"location": "104.06,30.67"}, {"location": "1,1"}]}
    transport = _FakeTransport(HttpResponse(200, json.dumps(body)))

    coords = await _geocoder(transport).resolve("成都 春熙路")

    assert (coords.lng, coords.lat) == (104.06, 30.67)
    query = parse_qs(urlsplit(transport.urls[0]).query)
    assert query == {"key": ["rest-key"], "address": ["成都 春熙路"], "city": ["Nationwide"]}


@pytest.mark.asyncio
async def test_resolve_without_rest_key_makes_no_request() -> None:
    transport = _FakeTransport()

    with pytest.raises(GeocodeError, match="missing rest key"):
        await _geocoder(transport, rest_key="  ").resolve("x")
    assert transport.urls == []


@pytest.mark.asyncio
async def test_resolve_surfaces_provider_info() -> None:
    body = {"status": "0", "info": "INVALID_USER_KEY", "infocode": "10001"}
    transport = _FakeTransport(HttpResponse(200, json.dumps(body)))

    with pytest.raises(GeocodeError) as excinfo:
        await _geocoder(transport).resolve("x")

    assert excinfo.value.info == "INVALID_USER_KEY"
    assert "INVALID_USER_KEY" in str(excinfo.value)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        json.dumps({"status": "1", "geocodes": []}),
        json.dumps({"status": "1", "geocodes": [{"location": "NaN,30"}]}),
        json.dumps({"status": "1", "geocodes": [{"location": ""}]}),
        "not json",
    ],
)
async def test_resolve_rejects_empty_or_garbled_results(body: str) -> None:
    with pytest.raises(GeocodeError):
        await _geocoder(_FakeTransport(HttpResponse(200, body))).resolve("x")


@pytest.mark.asyncio
async def test_resolve_wraps_transport_failures() -> None:
    with pytest.raises(GeocodeError) as excinfo:
        await _geocoder(_FakeTransport(SfmTransportError("dns"))).resolve("x")

    assert isinstance(excinfo.value.__cause__, SfmTransportError)
