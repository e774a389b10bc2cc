"""AMap direction endpoints.

Endpoints:
  - /v3/direction/driving (``strategy=0&extensions=base``)
  - /v3/direction/walking

Success payloads carry ``route.paths[0].steps[].polyline`` strings of the
form ``"lng,lat;lng,lat;..."``.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import urlencode

from sfmap._constants import AMAP_DRIVING_URL, AMAP_SUCCESS_STATUS, AMAP_WALKING_URL
from sfmap.models.route import Coordinates, TravelMode
from sfmap.normalize import safe_float


def build_direction_url(rest_key: str, origin: Coordinates, destination: Coordinates, mode: TravelMode) -> str:
    walking = mode == TravelMode.WALKING
    params = {
        "key": rest_key,
        "origin": origin.as_param(),
        "destination": destination.as_param(),
    }
    if not walking:
        params["strategy"] = "0"
        params["extensions"] = "base"
    endpoint = AMAP_WALKING_URL if walking else AMAP_DRIVING_URL
    return f"{endpoint}?{urlencode(params, safe=',')}"


def is_success(data: Any) -> bool:
    return isinstance(data, dict) and str(data.get("status")) == AMAP_SUCCESS_STATUS


def parse_polyline(polyline: str | None) -> list[tuple[float, float]]:
    """Decode ``"lng,lat;lng,lat"`` dropping any pair that is not two finite numbers.

    >>> parse_polyline("1,2;bad;3,4")
    [(1.0, 2.0), (3.0, 4.0)]
    """
    if not polyline:
        return []
    points: list[tuple[float, float]] = []
    for pair in polyline.split(";"):
        parts = pair.split(",")
        if len(parts) < 2:
            continue
        lng = safe_float(parts[0])
        lat = safe_float(parts[1])
        if lng is None or lat is None:
            continue
        points.append((lng, lat))
    return points


def extract_route_points(data: Any) -> list[tuple[float, float]]:
    """Concatenate every step polyline of the first path, in order."""
    if not isinstance(data, dict):
        return []
    route = data.get("route")
    paths = route.get("paths") if isinstance(route, dict) else None
    if not isinstance(paths, list) or not paths or not isinstance(paths[0], dict):
        return []
    steps = paths[0].get("steps")
    if not isinstance(steps, list):
        return []
    points: list[tuple[float, float]] = []
    for step in steps:
        if isinstance(step, dict) and isinstance(step.get("polyline"), str):
            points.extend(parse_polyline(step["polyline"]))
    return points
