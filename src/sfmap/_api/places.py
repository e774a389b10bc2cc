"""Supabase PostgREST helpers for the ``places`` collection.

Endpoints:
  - GET    /rest/v1/places?select=*
  - POST   /rest/v1/places                 (body: ``[row]``)
  - PATCH  /rest/v1/places?id=eq.<id>      (body: partial row)
  - DELETE /rest/v1/places?id=eq.<id>
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from sfmap._constants import PLACES_PATH, SUPABASE_ANON_KEY_PREFIX, SUPABASE_HOST_MARKER
from sfmap.config import SfmConfig
from sfmap.exceptions import ConfigurationMissingError, MalformedResponseError
from sfmap.models.place import Place

_logger = logging.getLogger(__name__)


def _base(config: SfmConfig) -> str:
    return config.supabase_url.strip().rstrip("/")


def check_read_config(config: SfmConfig) -> tuple[str, str] | None:
    """Return ``(base_url, anon_key)`` if usable for a read, else log and return ``None``.

    Reads insist on the expected host pattern and token shape so an
    unconfigured client falls through to other sources quietly.
    """
    base = _base(config)
    anon = config.supabase_anon_key.strip()
    if not base or SUPABASE_HOST_MARKER not in base:
        _logger.warning("Supabase URL missing or invalid; skipping remote load")
        return None
    if not anon or not anon.startswith(SUPABASE_ANON_KEY_PREFIX):
        _logger.warning(
            "Supabase anon key missing or invalid (expected a %s... public key); skipping remote load",
            SUPABASE_ANON_KEY_PREFIX,
        )
        return None
    return base, anon


def require_write_config(config: SfmConfig) -> tuple[str, str]:
    """Return ``(base_url, anon_key)`` for a mutating call.

    Raises
    ------
    ConfigurationMissingError
        If either value is empty.
    """
    base = _base(config)
    anon = config.supabase_anon_key.strip()
    if not base or not anon:
        raise ConfigurationMissingError("Supabase configuration missing")
    return base, anon


def build_headers(anon_key: str, *, representation: bool = False) -> dict[str, str]:
    headers = {
        "apikey": anon_key,
        "Authorization": f"Bearer {anon_key}",
    }
    if representation:
        headers["Content-Type"] = "application/json"
        headers["Prefer"] = "return=representation"
    return headers


def list_url(base: str) -> str:
    return f"{base}{PLACES_PATH}?select=*"


def collection_url(base: str) -> str:
    return f"{base}{PLACES_PATH}"


def item_url(base: str, place_id: str) -> str:
    return f"{base}{PLACES_PATH}?id=eq.{quote(str(place_id), safe='')}"


def parse_rows(payload: Any) -> list[Place]:
    """Normalize a list response.

    Raises
    ------
    MalformedResponseError
        If *payload* is not a JSON array.
    """
    if not isinstance(payload, list):
        raise MalformedResponseError(f"expected an array of rows, got {type(payload).__name__}")
    return [Place.from_row(row) for row in payload if isinstance(row, dict)]


def first_row(payload: Any) -> Place | None:
    """First row of a ``return=representation`` response, if any."""
    if isinstance(payload, list) and payload and isinstance(payload[0], dict):
        return Place.from_row(payload[0])
    return None
