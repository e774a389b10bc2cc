"""Place model and editor draft."""

from __future__ import annotations

import dataclasses
import uuid
from collections.abc import Mapping
from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, model_validator

from sfmap.exceptions import PlaceValidationError
from sfmap.normalize import parse_timestamp, safe_float, safe_text

_TEXT_FIELDS = ("name", "city", "address", "category")


def new_place_id() -> str:
    """Random caller-issued id for locally created places."""
    return str(uuid.uuid4())


class Place(BaseModel):
    """A point of interest.

    Accepts remote rows (``updated_at``), local snapshot rows
    (``updatedAt``) and static fallback rows (nested ``location``).
    Coordinates that are blank, non-numeric or non-finite become ``None``.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    id: str = Field(default_factory=new_place_id)
    name: str = ""
    city: str = ""
    address: str = ""
    category: str = ""
    lng: float | None = None
    lat: float | None = None
    updated_at: datetime | None = Field(default=None, validation_alias=AliasChoices("updated_at", "updatedAt"))

    @model_validator(mode="before")
    @classmethod
    def _normalize_row(cls, values: Any) -> Any:
        if not isinstance(values, Mapping):
            return values
        row = dict(values)

        location = row.pop("location", None)
        if isinstance(location, Mapping):
            for axis in ("lng", "lat"):
                if row.get(axis) is None:
                    row[axis] = location.get(axis)

        raw_id = row.get("id")
        if raw_id is None:
            row.pop("id", None)
        else:
            row["id"] = str(raw_id)

        for name in _TEXT_FIELDS:
            row[name] = safe_text(row.get(name))
        row["lng"] = safe_float(row.get("lng"))
        row["lat"] = safe_float(row.get("lat"))

        stamp = row.pop("updated_at", None) or row.pop("updatedAt", None)
        row.pop("updatedAt", None)
        row["updated_at"] = parse_timestamp(stamp)
        return row

    @classmethod
    def from_row(cls, row: Mapping[str, Any] | Place) -> Place:
        """Normalize any supported row shape (or an existing place) into a :class:`Place`."""
        if isinstance(row, Place):
            return cls.model_validate(row.to_snapshot_row())
        return cls.model_validate(row)

    @property
    def has_coordinates(self) -> bool:
        """Both coordinates present; one without the other counts as none."""
        return self.lng is not None and self.lat is not None

    @property
    def display_name(self) -> str:
        return self.name or "（未命名）"

    def _stamp(self) -> str | None:
        return self.updated_at.isoformat() if self.updated_at is not None else None

    def to_snapshot_row(self) -> dict[str, Any]:
        """Row shape stored in the local snapshot (camelCase)."""
        return {
            "id": self.id,
            "name": self.name,
            "city": self.city,
            "address": self.address,
            "category": self.category,
            "lng": self.lng,
            "lat": self.lat,
            "updatedAt": self._stamp(),
        }

    def to_remote_row(self) -> dict[str, Any]:
        """Row shape for the remote collection (snake_case)."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "city": self.city,
            "address": self.address,
            "lng": self.lng,
            "lat": self.lat,
            "updated_at": self._stamp(),
        }

    def merged(self, patch: Mapping[str, Any]) -> Place:
        """Return a normalized copy with *patch* (either row shape) applied."""
        row = self.to_remote_row()
        row.update(patch)
        if "updatedAt" in patch:
            row["updated_at"] = patch["updatedAt"]
        return Place.from_row(row)


def normalize_place(row: Mapping[str, Any] | Place) -> Place:
    return Place.from_row(row)


@dataclasses.dataclass(frozen=True)
class PlaceDraft:
    """Raw editor form values.

    Coordinates are kept as text so validation can distinguish "left
    blank" from "not a number".
    """

    name: str = ""
    category: str = ""
    city: str = ""
    address: str = ""
    lng: str = ""
    lat: str = ""

    @classmethod
    def from_place(cls, place: Place) -> PlaceDraft:
        return cls(
            name=place.name,
            category=place.category,
            city=place.city,
            address=place.address,
            lng="" if place.lng is None else str(place.lng),
            lat="" if place.lat is None else str(place.lat),
        )

    def cleaned(self) -> PlaceDraft:
        return PlaceDraft(**{f.name: (getattr(self, f.name) or "").strip() for f in dataclasses.fields(self)})

    def coordinates(self) -> tuple[float | None, float | None]:
        """Validate the draft and return ``(lng, lat)``.

        Raises
        ------
        PlaceValidationError
            Name empty, or a coordinate neither blank nor a finite number.
        """
        draft = self.cleaned()
        if not draft.name:
            raise PlaceValidationError("name is required")
        lng = safe_float(draft.lng)
        lat = safe_float(draft.lat)
        if (draft.lng and lng is None) or (draft.lat and lat is None):
            raise PlaceValidationError("coordinates must be numbers or left blank")
        return lng, lat

    def full_address(self) -> str:
        """``"city address"`` as sent to the geocoder."""
        draft = self.cleaned()
        return " ".join(part for part in (draft.city, draft.address) if part).strip()

    def to_fields(self) -> dict[str, Any]:
        """Validated field patch (snake_case) for create/update."""
        lng, lat = self.coordinates()
        draft = self.cleaned()
        return {
            "name": draft.name,
            "category": draft.category,
            "city": draft.city,
            "address": draft.address,
            "lng": lng,
            "lat": lat,
        }
