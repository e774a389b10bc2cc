"""Versioned local snapshot envelope."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from sfmap._constants import SNAPSHOT_VERSION
from sfmap.models.place import Place
from sfmap.normalize import parse_timestamp, safe_int


class Provenance(StrEnum):
    """Which data source last produced the in-memory list."""

    EDITED = "edited"
    SUPABASE = "supabase"
    STATIC = "kb.json"


class LocalSnapshot(BaseModel):
    """``{version, savedAt, mode, items}`` as persisted by :class:`~sfmap.local_store.LocalStore`.

    ``version`` is informational only; unknown versions are accepted.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
    )

    version: int = SNAPSHOT_VERSION
    saved_at: datetime | None = Field(default=None, validation_alias=AliasChoices("savedAt", "saved_at"))
    mode: str = ""
    items: list[Place] = Field(default_factory=list)

    @field_validator("version", mode="before")
    @classmethod
    def _coerce_version(cls, value: Any) -> int:
        parsed = safe_int(value)
        return SNAPSHOT_VERSION if parsed is None else parsed

    @field_validator("saved_at", mode="before")
    @classmethod
    def _coerce_saved_at(cls, value: Any) -> datetime | None:
        return parse_timestamp(value)

    @field_validator("mode", mode="before")
    @classmethod
    def _coerce_mode(cls, value: Any) -> str:
        return "" if value is None else str(value)

    @property
    def provenance(self) -> Provenance | None:
        try:
            return Provenance(self.mode)
        except ValueError:
            return None

    def to_payload(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "savedAt": self.saved_at.isoformat() if self.saved_at is not None else None,
            "mode": self.mode,
            "items": [item.to_snapshot_row() for item in self.items],
        }
