"""Normalization helpers.

Centralizes defensive parsing of remote, snapshot and fallback rows.
"""

from __future__ import annotations

import math
from datetime import UTC, datetime
from typing import Any


def safe_float(value: Any) -> float | None:
    """Parse a finite float; ``None`` for blanks, garbage, NaN and infinities."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    try:
        result = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(result):
        return None
    return result


def safe_int(value: Any) -> int | None:
    parsed = safe_float(value)
    if parsed is None:
        return None
    return int(parsed)


def safe_text(value: Any) -> str:
    """Free-text field: falsy values become ``""``."""
    if value is None or value == "":
        return ""
    return str(value)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp; anything unparseable is ``None``."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo is not None else value.replace(tzinfo=UTC)
    if not isinstance(value, str):
        return None
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed


def utcnow_iso() -> str:
    """Current time as an ISO-8601 UTC string (``...Z``), the wire format for ``updated_at``."""
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_coordinate(value: float) -> str:
    """Shortest text for a coordinate (``104.06``, ``1`` rather than ``1.0``)."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
