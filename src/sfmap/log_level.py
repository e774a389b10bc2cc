"""Persisted log verbosity for the ``sfmap`` logger tree."""

from __future__ import annotations

import logging

from sfmap._constants import LOG_LEVEL_STORAGE_KEY
from sfmap.storage import KeyValueStorage

LOG_LEVELS: dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}
DEFAULT_LOG_LEVEL = "info"

_ROOT_LOGGER = "sfmap"


def load_log_level(storage: KeyValueStorage) -> str:
    """Return the stored verbosity, or ``"info"`` when unset or unknown."""
    value = storage.get_item(LOG_LEVEL_STORAGE_KEY)
    if value in LOG_LEVELS:
        return value
    return DEFAULT_LOG_LEVEL


def apply_log_level(level: str) -> None:
    logging.getLogger(_ROOT_LOGGER).setLevel(LOG_LEVELS[level])


def save_log_level(storage: KeyValueStorage, level: str) -> str:
    """Persist and apply *level*. Raises :class:`ValueError` for unknown names."""
    normalized = level.strip().lower()
    if normalized not in LOG_LEVELS:
        raise ValueError(f"log level must be one of {sorted(LOG_LEVELS)}, got {level!r}")
    storage.set_item(LOG_LEVEL_STORAGE_KEY, normalized)
    apply_log_level(normalized)
    logging.getLogger(_ROOT_LOGGER).info("Log level changed to %s", normalized)
    return normalized
