"""Change notifications emitted by the reconciler."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from sfmap.models.snapshot import Provenance


class ChangeKind(StrEnum):
    LOADED = "loaded"
    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class DirectoryChange(BaseModel):
    """One reconciliation pass or mutation that changed the in-memory list."""

    model_config = ConfigDict(frozen=True)

    kind: ChangeKind
    provenance: Provenance
    count: int
    place_id: str | None = None
    observed_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
