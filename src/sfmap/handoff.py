"""Hand-off URIs that open the AMap app (or its web page) for navigation.

Everything here is pure: no I/O, no globals.
"""

from __future__ import annotations

import re
from urllib.parse import quote

from sfmap._constants import AMAP_ANDROID_ROUTE_URL, AMAP_IOS_NAV_URL, AMAP_WEB_NAV_URL, SOURCE_APPLICATION
from sfmap.exceptions import PlanningError
from sfmap.models.place import Place
from sfmap.models.route import Platform, TravelMode
from sfmap.normalize import format_coordinate

_IOS_PATTERN = re.compile(r"iPhone|iPad|iPod", re.IGNORECASE)
_ANDROID_PATTERN = re.compile(r"Android", re.IGNORECASE)
_MOBILE_PATTERN = re.compile(r"Android|iPhone|iPad|iPod|Mobile", re.IGNORECASE)

# iOS route style preference; AMap uses 2 for both driving and walking hand-off.
_IOS_STYLE = 2


def _encode(value: object) -> str:
    """``encodeURIComponent`` equivalent."""
    return quote(str(value), safe="-_.!~*'()")


def _lng_lat(place: Place) -> tuple[str, str]:
    if place.lng is None or place.lat is None:
        raise PlanningError("missing destination coordinates")
    return format_coordinate(place.lng), format_coordinate(place.lat)


def detect_platform(user_agent: str | None) -> Platform:
    """Classify a device identification string."""
    ua = user_agent or ""
    if _IOS_PATTERN.search(ua):
        return Platform.IOS
    if _ANDROID_PATTERN.search(ua):
        return Platform.ANDROID
    return Platform.OTHER


def is_mobile(user_agent: str | None) -> bool:
    return bool(_MOBILE_PATTERN.search(user_agent or ""))


def nav_mode(mode: TravelMode | str) -> str:
    """Web hand-off mode name."""
    return "walk" if mode == TravelMode.WALKING else "drive"


def android_route_type(mode: TravelMode | str) -> int:
    return 2 if mode == TravelMode.WALKING else 0


def build_web_uri(place: Place, mode: TravelMode | str = TravelMode.DRIVING, *, callnative: int = 0) -> str:
    lng, lat = _lng_lat(place)
    name = _encode(place.name or "target")
    return f"{AMAP_WEB_NAV_URL}?to={lng},{lat},{name}&mode={_encode(nav_mode(mode))}&callnative={callnative}"


def build_ios_uri(place: Place, mode: TravelMode | str = TravelMode.DRIVING) -> str:
    lng, lat = _lng_lat(place)
    name = _encode(place.name or "destination")
    return (
        f"{AMAP_IOS_NAV_URL}?sourceApplication={SOURCE_APPLICATION}&poiname={name}"
        f"&lat={_encode(lat)}&lon={_encode(lng)}&dev=0&style={_IOS_STYLE}"
    )


def build_android_uri(place: Place, mode: TravelMode | str = TravelMode.DRIVING) -> str:
    lng, lat = _lng_lat(place)
    name = _encode(place.name or "destination")
    return (
        f"{AMAP_ANDROID_ROUTE_URL}?sourceApplication={SOURCE_APPLICATION}"
        f"&dlat={_encode(lat)}&dlon={_encode(lng)}&dname={name}&dev=0&t={android_route_type(mode)}"
    )


def build_handoff_uri(
    destination: Place,
    mode: TravelMode | str = TravelMode.DRIVING,
    platform: Platform | str = Platform.OTHER,
) -> str:
    """Pick the URI family for *platform*.

    Raises
    ------
    PlanningError
        If *destination* lacks coordinates.
    """
    if platform == Platform.IOS:
        return build_ios_uri(destination, mode)
    if platform == Platform.ANDROID:
        return build_android_uri(destination, mode)
    return build_web_uri(destination, mode)
