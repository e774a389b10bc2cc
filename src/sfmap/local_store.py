"""Durable local snapshot of the place list.

The snapshot is the fallback of last resort and a trailing mirror of the
last known-good directory state.  Reads fail soft: anything that cannot be
decoded is reported as "no local data".
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from pydantic import ValidationError

from sfmap._constants import SNAPSHOT_STORAGE_KEY, SNAPSHOT_VERSION
from sfmap.models.place import Place
from sfmap.models.snapshot import LocalSnapshot, Provenance
from sfmap.storage import KeyValueStorage

_logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(UTC)


class LocalStore:
    """Persist/retrieve the versioned place-list snapshot."""

    def __init__(
        self,
        storage: KeyValueStorage,
        *,
        clock: Callable[[], datetime] = _utcnow,
        key: str = SNAPSHOT_STORAGE_KEY,
    ) -> None:
        self._storage = storage
        self._clock = clock
        self._key = key

    def load(self) -> LocalSnapshot | None:
        """Return the stored snapshot, or ``None`` if missing or malformed."""
        try:
            raw = self._storage.get_item(self._key)
        except Exception:
            _logger.warning("Local snapshot read failed", exc_info=True)
            return None
        if not raw:
            return None
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            _logger.debug("Local snapshot is not JSON; ignoring")
            return None
        if not isinstance(data, dict) or not isinstance(data.get("items"), list):
            _logger.debug("Local snapshot has no items array; ignoring")
            return None
        try:
            snapshot = LocalSnapshot.model_validate(data)
        except ValidationError:
            _logger.debug("Local snapshot failed validation; ignoring", exc_info=True)
            return None
        if snapshot.version != SNAPSHOT_VERSION:
            _logger.info("Local snapshot version %s (current %s); reading as-is", snapshot.version, SNAPSHOT_VERSION)
        return snapshot

    def save(self, places: Iterable[Place], provenance: Provenance | str) -> LocalSnapshot:
        """Overwrite the snapshot with *places* in a single storage write."""
        snapshot = LocalSnapshot(
            version=SNAPSHOT_VERSION,
            saved_at=self._clock(),
            mode=str(provenance),
            items=list(places),
        )
        self._storage.set_item(self._key, json.dumps(snapshot.to_payload(), ensure_ascii=False))
        _logger.debug("Local snapshot saved: mode=%s count=%d", snapshot.mode, len(snapshot.items))
        return snapshot

    def clear(self) -> None:
        self._storage.remove_item(self._key)
        _logger.info("Local snapshot cleared")
