"""AMap geocoding endpoint.

``GET /v3/geocode/geo?key=&address=&city=`` → ``{status, info, geocodes: [{location: "lng,lat"}]}``
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from sfmap._constants import AMAP_GEOCODE_URL, AMAP_SUCCESS_STATUS
from sfmap.models.route import Coordinates
from sfmap.normalize import safe_float


def build_geocode_url(rest_key: str, address: str, city: str) -> str:
    params = {"key": rest_key, "address": address or "", "city": city}
    return f"{AMAP_GEOCODE_URL}?{urlencode(params)}"


def provider_info(data: Any) -> str:
    """Provider failure text (``info`` then ``infocode``), or ``""``."""
    if not isinstance(data, dict):
        return ""
    return str(data.get("info") or data.get("infocode") or "")


def parse_location(location: Any) -> Coordinates | None:
    """Parse ``"lng,lat"``; ``None`` unless both parts are finite numbers."""
    if not isinstance(location, str):
        return None
    parts = location.split(",")
    if len(parts) < 2:
        return None
    lng = safe_float(parts[0])
    lat = safe_float(parts[1])
    if lng is None or lat is None:
        return None
    return Coordinates(lng=lng, lat=lat)


def parse_geocode(data: Any) -> Coordinates | None:
    """First candidate's coordinates, or ``None`` on any provider failure."""
    if not isinstance(data, dict) or str(data.get("status")) != AMAP_SUCCESS_STATUS:
        return None
    geocodes = data.get("geocodes")
    if not isinstance(geocodes, list) or not geocodes or not isinstance(geocodes[0], dict):
        return None
    coords = parse_location(geocodes[0].get("location"))
    if coords is None:
        return None
    return Coordinates(lng=coords.lng, lat=coords.lat, raw=geocodes[0])
