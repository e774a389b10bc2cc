"""REST client over the remote place collection.

Every call is an independent exchange using the configuration in effect
at call time; nothing is cached and nothing is retried.
"""

from __future__ import annotations

import json
import logging
import time
from collections.abc import Callable, Mapping
from typing import Any

from sfmap._api import places as _places_api
from sfmap._transport import HttpResponse, Transport
from sfmap.config import SfmConfig
from sfmap.exceptions import MalformedResponseError, RemoteRequestError, SfmTransportError
from sfmap.models.place import Place

_logger = logging.getLogger(__name__)


def _decode_optional(response: HttpResponse) -> Any:
    """Body JSON for a successful mutation; an empty or non-JSON body means "no rows"."""
    if not response.text.strip():
        return None
    try:
        return response.json()
    except json.JSONDecodeError:
        return None


class RemoteStore:
    """List/create/update/delete against ``{supabase_url}/rest/v1/places``."""

    def __init__(self, config: Callable[[], SfmConfig], transport: Transport) -> None:
        self._config = config
        self._transport = transport

    async def list(self) -> list[Place] | None:
        """Fetch every place, or ``None`` when the remote is unusable.

        ``None`` covers "not configured", transport failure, non-2xx
        status, invalid JSON and a non-array body.  Each case logs a
        distinct line so the failure class stays diagnosable.
        """
        resolved = _places_api.check_read_config(self._config())
        if resolved is None:
            return None
        base, anon = resolved
        url = _places_api.list_url(base)
        _logger.info("Fetching remote places: %s", url)

        started = time.monotonic()
        try:
            response = await self._transport.request("GET", url, headers=_places_api.build_headers(anon))
        except SfmTransportError as exc:
            _logger.error("Remote places request failed: %s", exc)
            return None
        _logger.info(
            "Remote places request finished: status=%d cost=%dms",
            response.status,
            round((time.monotonic() - started) * 1000),
        )

        if not response.ok:
            _logger.error("Remote places non-2xx: status=%d body=%s", response.status, response.text[:500])
            return None
        try:
            payload = response.json()
        except json.JSONDecodeError as exc:
            _logger.error("Remote places body is not JSON: %s", exc)
            return None
        try:
            rows = _places_api.parse_rows(payload)
        except MalformedResponseError:
            _logger.error("Remote places body is not an array: %s", json.dumps(payload, ensure_ascii=False)[:500])
            return None

        _logger.info("Remote places count: %d", len(rows))
        return rows

    async def _mutate(
        self,
        method: str,
        url: str,
        anon: str,
        body: Any = None,
    ) -> Any:
        headers = _places_api.build_headers(anon, representation=True)
        try:
            response = await self._transport.request(method, url, headers=headers, json_body=body)
        except SfmTransportError as exc:
            raise RemoteRequestError(str(exc), endpoint=url) from exc
        if not response.ok:
            raise RemoteRequestError(
                response.text or f"HTTP {response.status}",
                status_code=response.status,
                endpoint=url,
                body=response.text,
            )
        return _decode_optional(response)

    async def create(self, place: Place) -> Place:
        """Insert *place*; the row echoed back (with its canonical id) wins when present."""
        base, anon = _places_api.require_write_config(self._config())
        row = place.to_remote_row()
        payload = await self._mutate("POST", _places_api.collection_url(base), anon, [row])
        created = _places_api.first_row(payload)
        return created if created is not None else Place.from_row(row)

    async def update(self, place_id: str, patch: Mapping[str, Any], *, current: Place | None = None) -> Place:
        """Patch one row.

        When the response carries no row, the result is *current* merged
        with *patch* (or the patch alone if *current* is not given).
        """
        base, anon = _places_api.require_write_config(self._config())
        payload = await self._mutate("PATCH", _places_api.item_url(base, place_id), anon, dict(patch))
        updated = _places_api.first_row(payload)
        if updated is not None:
            return updated
        if current is not None:
            return current.merged(patch)
        return Place.from_row({**patch, "id": place_id})

    async def delete(self, place_id: str) -> None:
        base, anon = _places_api.require_write_config(self._config())
        await self._mutate("DELETE", _places_api.item_url(base, place_id), anon)
