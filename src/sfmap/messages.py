"""Translate raw failure text into the fixed set of user-facing messages."""

from __future__ import annotations

from enum import StrEnum

from sfmap._constants import SURFACE_MESSAGE_LIMIT
from sfmap.exceptions import LocationError, RemoteRequestError


class ErrorCategory(StrEnum):
    PERMISSION_DENIED = "permission_denied"
    TIMEOUT = "timeout"
    MAP_NOT_READY = "map_not_ready"
    MISSING_COORDINATES = "missing_coordinates"
    INVALID_CREDENTIAL = "invalid_credential"
    UNKNOWN = "unknown"


_MESSAGES: dict[ErrorCategory, str] = {
    ErrorCategory.PERMISSION_DENIED: "定位权限被拒绝，或页面非 HTTPS，无法获取定位",
    ErrorCategory.TIMEOUT: "定位超时，请检查网络后重试",
    ErrorCategory.MAP_NOT_READY: "高德地图未就绪，请检查 Key 或网络",
    ErrorCategory.MISSING_COORDINATES: "该地点没有坐标，无法规划路线",
    ErrorCategory.INVALID_CREDENTIAL: "高德 Key 无效或权限不足",
}
UNKNOWN_MESSAGE = "未知错误"

# Checked in order; first match wins.
_KEYWORDS: tuple[tuple[ErrorCategory, tuple[str, ...]], ...] = (
    (ErrorCategory.PERMISSION_DENIED, ("permission", "denied", "secure origin")),
    (ErrorCategory.TIMEOUT, ("timeout",)),
    (ErrorCategory.MAP_NOT_READY, ("amap not ready",)),
    (ErrorCategory.MISSING_COORDINATES, ("no coordinates", "missing destination coordinates")),
    (ErrorCategory.INVALID_CREDENTIAL, ("invalid_userkey", "key")),
)


def error_text(error: BaseException | str | None) -> str:
    """Raw message of *error* (``reason`` for location failures)."""
    if error is None:
        return ""
    if isinstance(error, str):
        return error
    if isinstance(error, LocationError):
        return error.reason
    return str(error) or type(error).__name__


def classify_error(error: BaseException | str | None) -> ErrorCategory:
    text = error_text(error).lower()
    for category, keywords in _KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return category
    return ErrorCategory.UNKNOWN


def localize_error(error: BaseException | str | None) -> str:
    """Localized message for *error*; unknown failures keep their raw text."""
    raw = error_text(error)
    if not raw:
        return UNKNOWN_MESSAGE
    category = classify_error(raw)
    return _MESSAGES.get(category, raw)


def surface_message(error: BaseException | str, *, limit: int = SURFACE_MESSAGE_LIMIT) -> str:
    """Raw failure text truncated for inline display (write-path errors)."""
    text = error_text(error)
    if isinstance(error, RemoteRequestError) and error.body:
        text = error.body
    return text[:limit]
