"""HTTP transport for the place collection and AMap web services."""

from __future__ import annotations

import dataclasses
import json
import logging
from collections.abc import Mapping
from typing import Any, Protocol

import aiohttp

from sfmap._redact import redact_for_log, redact_url
from sfmap.exceptions import SfmTransportError

_logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class HttpResponse:
    """Status and body text of a completed exchange."""

    status: int
    text: str

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body. Raises :class:`json.JSONDecodeError`."""
        return json.loads(self.text)


class Transport(Protocol):
    """Structural transport interface used by the REST modules.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`HttpTransport`) concrete.
    """

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> HttpResponse:
        ...


class HttpTransport:
    """aiohttp-backed transport.

    Returns every completed exchange (any status); only network-level
    failures raise.  Bodies that are not valid in their declared charset are
    decoded with replacement characters and left to the JSON parsers.
    """

    def __init__(self, http_session: aiohttp.ClientSession) -> None:
        self._http = http_session

    async def request(
        self,
        method: str,
        url: str,
        *,
        headers: Mapping[str, str] | None = None,
        json_body: Any = None,
    ) -> HttpResponse:
        data = None if json_body is None else json.dumps(json_body, ensure_ascii=False)
        _logger.debug("%s %s headers=%s", method, redact_url(url), redact_for_log(dict(headers or {})))
        try:
            async with self._http.request(
                method,
                url,
                data=data,
                headers=dict(headers or {}),
            ) as resp:
                text = await resp.text(errors="replace")
                return HttpResponse(status=resp.status, text=text)
        except (aiohttp.ClientError, TimeoutError, ValueError) as exc:
            raise SfmTransportError(f"{method} {redact_url(url)} failed: {exc}", endpoint=url) from exc
