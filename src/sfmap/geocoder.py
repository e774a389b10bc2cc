"""Free-text address → coordinates via the AMap geocoding service."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

from sfmap._api import geocode as _geocode_api
from sfmap._constants import GEOCODE_DEFAULT_CITY
from sfmap._redact import redact_url
from sfmap._transport import Transport
from sfmap.config import SfmConfig
from sfmap.exceptions import GeocodeError, SfmTransportError
from sfmap.models.route import Coordinates

_logger = logging.getLogger(__name__)


class Geocoder:
    def __init__(self, config: Callable[[], SfmConfig], transport: Transport) -> None:
        self._config = config
        self._transport = transport

    async def resolve(self, address: str, *, city: str = GEOCODE_DEFAULT_CITY) -> Coordinates:
        """Resolve *address*, always taking the provider's first candidate.

        Raises
        ------
        GeocodeError
            REST key missing, transport failure, provider failure status,
            no candidates, or a location that is not a finite pair.
        """
        rest_key = self._config().amap_rest_key.strip()
        if not rest_key:
            raise GeocodeError("missing rest key")

        url = _geocode_api.build_geocode_url(rest_key, address, city)
        _logger.debug("Geocoding %r via %s", address, redact_url(url))
        try:
            response = await self._transport.request("GET", url)
        except SfmTransportError as exc:
            raise GeocodeError(f"geocode request failed: {exc}") from exc

        try:
            data = response.json()
        except json.JSONDecodeError:
            data = {}

        coords = _geocode_api.parse_geocode(data)
        if coords is None:
            info = _geocode_api.provider_info(data)
            _logger.debug("Geocode failed for %r: status=%s info=%s", address, response.status, info)
            raise GeocodeError(f"geocode failed: {info or 'unknown'}", info=info)

        _logger.info("Geocoded %r → %s", address, coords.as_param())
        return coords
