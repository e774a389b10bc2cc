"""Pydantic models for places, snapshots and navigation."""

from sfmap.models.place import Place, PlaceDraft, new_place_id, normalize_place
from sfmap.models.route import Coordinates, Platform, PositionOptions, RouteResult, TravelMode
from sfmap.models.snapshot import LocalSnapshot, Provenance

__all__ = [
    "Coordinates",
    "LocalSnapshot",
    "Place",
    "PlaceDraft",
    "Platform",
    "PositionOptions",
    "Provenance",
    "RouteResult",
    "TravelMode",
    "new_place_id",
    "normalize_place",
]
