"""Navigation models: coordinates, transport mode, platform, route result."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from sfmap.normalize import format_coordinate


class TravelMode(StrEnum):
    DRIVING = "driving"
    WALKING = "walking"

    @classmethod
    def coerce(cls, value: TravelMode | str | None) -> TravelMode:
        """``walking`` stays walking; anything else plans as driving."""
        return cls.WALKING if value == cls.WALKING else cls.DRIVING


class Platform(StrEnum):
    """Device family, used only to choose a hand-off URI."""

    IOS = "ios"
    ANDROID = "android"
    OTHER = "other"


class Coordinates(BaseModel):
    """A ``(lng, lat)`` point; ``raw`` keeps the provider payload when there is one."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    lng: float
    lat: float
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)

    def as_param(self) -> str:
        """``"lng,lat"`` as the AMap REST API expects it."""
        return f"{format_coordinate(self.lng)},{format_coordinate(self.lat)}"


class PositionOptions(BaseModel):
    """Single-shot geolocation request options."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enable_high_accuracy: bool = True
    timeout_ms: int = 10_000
    maximum_age_ms: int = 0


class RouteResult(BaseModel):
    """A planned route.

    ``points`` is the decoded path geometry in order; it is empty when the
    provider returned no usable polyline.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    from_point: Coordinates
    to_point: Coordinates
    mode: TravelMode
    points: list[tuple[float, float]] = Field(default_factory=list)
    raw: dict[str, Any] = Field(default_factory=dict, repr=False)
    url: str = ""
