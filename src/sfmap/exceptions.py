"""Custom exception hierarchy for sfmap."""

from __future__ import annotations


class SfmError(Exception):
    """Base exception for all sfmap errors."""


class SfmConfigError(SfmError):
    """Invalid configuration patch or value."""


class ConfigurationMissingError(SfmConfigError):
    """Remote endpoint, credential or provider key absent or malformed.

    Non-fatal on read paths: callers fall back to the next data source
    and only log the condition.
    """


class SfmTransportError(SfmError):
    """HTTP-level failure (network error or non-2xx status)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class RemoteRequestError(SfmTransportError):
    """A mutating call on the remote place collection did not succeed.

    ``body`` carries the raw response text so it can be surfaced to the
    user (truncated).  ``status_code`` is ``None`` for transport failures.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
        body: str = "",
    ) -> None:
        self.body = body
        super().__init__(message, status_code=status_code, endpoint=endpoint)


class MalformedResponseError(SfmError):
    """Response body did not have the expected JSON shape."""


class GeocodeError(SfmError):
    """Address could not be resolved to coordinates."""

    def __init__(self, message: str, *, info: str = "") -> None:
        self.info = info
        super().__init__(message)


class PlanningError(SfmError):
    """Route planning failed (missing input or provider-reported failure)."""

    def __init__(self, message: str, *, info: str = "") -> None:
        self.info = info
        super().__init__(message)


class LocationError(SfmError):
    """Device geolocation unavailable, denied or timed out.

    ``reason`` is the provider's failure text, preserved verbatim so it
    can be classified for the user.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class PlaceValidationError(SfmError):
    """Editor input rejected before any remote call."""


class PlaceNotFoundError(SfmError):
    """No place with the given id in the in-memory directory."""

    def __init__(self, place_id: str) -> None:
        self.place_id = place_id
        super().__init__(f"place not found: {place_id}")
