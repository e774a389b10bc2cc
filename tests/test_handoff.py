from __future__ import annotations

import pytest

from sfmap.exceptions import PlanningError
from sfmap.handoff import build_handoff_uri, detect_platform, is_mobile
from sfmap.models import Place, Platform, TravelMode

_A = Place.from_row({"id": "a", "name": "A", "lng": 1, "lat": 2})

_IPHONE_UA = "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 Mobile/15E148"
_ANDROID_UA = "Mozilla/5.0 (Linux; Android 14; Pixel 8) AppleWebKit/537.36 Mobile Safari/537.36"
_DESKTOP_UA = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 Chrome/120.0 Safari/537.36"


def test_ios_walking_uri() -> None:
    uri = build_handoff_uri(_A, "walking", "ios")

    assert uri.startswith("iosamap://navi?")
    assert "style=2" in uri
    assert "lat=2" in uri and "lon=1" in uri
    assert "sourceApplication=street_food_map" in uri
    assert "poiname=A" in uri


def test_android_uri_maps_mode_to_route_type() -> None:
    walking = build_handoff_uri(_A, TravelMode.WALKING, Platform.ANDROID)
    driving = build_handoff_uri(_A, TravelMode.DRIVING, Platform.ANDROID)

    assert walking.startswith("androidamap://route?")
    assert "dlat=2&dlon=1&dname=A&dev=0&t=2" in walking
    assert driving.endswith("t=0")


def test_web_uri_for_other_platforms() -> None:
    assert build_handoff_uri(_A, "walking", Platform.OTHER) == (
        "https://uri.amap.com/navigation?to=1,2,A&mode=walk&callnative=0"
    )
    assert "mode=drive" in build_handoff_uri(_A, "bus", "other")


def test_names_are_percent_encoded() -> None:
    place = Place.from_row({"name": "钟水饺 & 面", "lng": 104.0716, "lat": 30.6657})

    uri = build_handoff_uri(place, TravelMode.DRIVING, Platform.IOS)

    assert "poiname=%E9%92%9F%E6%B0%B4%E9%A5%BA%20%26%20%E9%9D%A2" in uri
    assert "lat=30.6657&lon=104.0716" in uri


def test_unnamed_place_uses_placeholder_name() -> None:
    place = Place.from_row({"lng": 1, "lat": 2})

    assert "to=1,2,target" in build_handoff_uri(place)
    assert "dname=destination" in build_handoff_uri(place, platform=Platform.ANDROID)


def test_missing_coordinates_rejected() -> None:
    with pytest.raises(PlanningError, match="missing destination coordinates"):
        build_handoff_uri(Place.from_row({"name": "A", "lng": 1}), "walking", "ios")


@pytest.mark.parametrize(
    ("ua", "platform", "mobile"),
    [
        (_IPHONE_UA, Platform.IOS, True),
        ("Mozilla/5.0 (iPad; CPU OS 16_0 like Mac OS X)", Platform.IOS, True),
        (_ANDROID_UA, Platform.ANDROID, True),
        (_DESKTOP_UA, Platform.OTHER, False),
        ("", Platform.OTHER, False),
        (None, Platform.OTHER, False),
    ],
)
def test_detect_platform(ua: str | None, platform: Platform, mobile: bool) -> None:
    assert detect_platform(ua) is platform
    assert is_mobile(ua) is mobile
