"""Bundled static place list, used when neither local nor remote data is available."""

from __future__ import annotations

import importlib.resources
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from sfmap.models.place import Place

_logger = logging.getLogger(__name__)

_PACKAGE = "sfmap.data"
_RESOURCE = "kb.json"


class StaticFallback:
    """Read ``{items: [...]}`` once and serve copies of it afterwards.

    Parameters
    ----------
    path : Path or None
        Alternate document; defaults to the bundled ``sfmap/data/kb.json``.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._items: list[Place] | None = None

    def _read_text(self) -> str:
        if self._path is not None:
            return self._path.read_text(encoding="utf-8")
        return importlib.resources.files(_PACKAGE).joinpath(_RESOURCE).read_text(encoding="utf-8")

    def _parse(self) -> list[Place]:
        try:
            data = json.loads(self._read_text())
        except (OSError, json.JSONDecodeError):
            _logger.error("Static fallback unreadable", exc_info=True)
            return []
        rows = data.get("items") if isinstance(data, dict) else None
        if not isinstance(rows, list):
            _logger.error("Static fallback has no items array")
            return []
        items: list[Place] = []
        for row in rows:
            if not isinstance(row, dict):
                continue
            try:
                items.append(Place.from_row(row))
            except ValidationError:
                _logger.warning("Static fallback row skipped: %s", row.get("id"))
        return items

    def load(self) -> list[Place]:
        if self._items is None:
            self._items = self._parse()
            _logger.info("Static fallback loaded: count=%d", len(self._items))
        return list(self._items)
