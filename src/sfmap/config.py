"""Client configuration for sfmap."""

from __future__ import annotations

import dataclasses
import json
import logging
import os
from collections.abc import Mapping
from typing import Any

from sfmap._constants import CONFIG_STORAGE_KEY
from sfmap.exceptions import SfmConfigError
from sfmap.storage import KeyValueStorage

_logger = logging.getLogger(__name__)

# Persisted override keys (camelCase, as written by earlier clients) → field names.
_PERSISTED_KEY_MAP: dict[str, str] = {
    "supabaseUrl": "supabase_url",
    "supabaseAnonKey": "supabase_anon_key",
    "amapKey": "amap_key",
    "amapSecurityJsCode": "amap_security_js_code",
    "amapRestKey": "amap_rest_key",
}
_FIELD_TO_PERSISTED: dict[str, str] = {v: k for k, v in _PERSISTED_KEY_MAP.items()}


@dataclasses.dataclass(frozen=True)
class SfmConfig:
    """Effective runtime settings.

    Parameters
    ----------
    supabase_url : str
        Supabase project URL (``https://<ref>.supabase.co``).  The place
        collection lives under ``/rest/v1/places``.
    supabase_anon_key : str
        Public anon JWT, sent as both ``apikey`` and bearer credential.
    amap_key : str
        AMap JS SDK key (map tiles, device geolocation).
    amap_security_js_code : str
        AMap JS security code paired with ``amap_key``.
    amap_rest_key : str
        AMap web-service key used for geocoding and route planning.
    """

    supabase_url: str = ""
    supabase_anon_key: str = ""
    amap_key: str = ""
    amap_security_js_code: str = ""
    amap_rest_key: str = ""

    @classmethod
    def from_env(cls, **overrides: Any) -> SfmConfig:
        """Create configuration from ``SFM_*`` environment variables.

        Explicit keyword arguments override environment values.
        """
        env = os.environ
        _ENV_CONFIG_MAP = {
            "SFM_SUPABASE_URL": "supabase_url",
            "SFM_SUPABASE_ANON_KEY": "supabase_anon_key",
            "SFM_AMAP_KEY": "amap_key",
            "SFM_AMAP_SECURITY_JS_CODE": "amap_security_js_code",
            "SFM_AMAP_REST_KEY": "amap_rest_key",
        }
        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        config_kwargs.update(overrides)
        return cls(**config_kwargs)

    def to_persisted(self) -> dict[str, str]:
        """Serialize using the persisted camelCase key names."""
        return {_FIELD_TO_PERSISTED[f.name]: getattr(self, f.name) for f in dataclasses.fields(self)}


def _parse_override(raw: str | None) -> dict[str, str] | None:
    """Decode a persisted override, or ``None`` if absent or malformed.

    Any malformed field poisons the whole override.
    """
    if raw is None:
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError:
        _logger.warning("Persisted config is not valid JSON; using defaults")
        return None
    if not isinstance(data, dict):
        _logger.warning("Persisted config is not an object; using defaults")
        return None

    fields: dict[str, str] = {}
    for key, value in data.items():
        field_name = _PERSISTED_KEY_MAP.get(key)
        if field_name is None:
            continue
        if not isinstance(value, str):
            _logger.warning("Persisted config field %s is not a string; using defaults", key)
            return None
        fields[field_name] = value
    return fields


class ConfigResolver:
    """Overlay a persisted partial override onto built-in defaults."""

    def __init__(self, storage: KeyValueStorage, defaults: SfmConfig | None = None) -> None:
        self._storage = storage
        self._defaults = defaults if defaults is not None else SfmConfig()

    @property
    def defaults(self) -> SfmConfig:
        return self._defaults

    def effective(self) -> SfmConfig:
        """Return the effective configuration. Never raises."""
        try:
            raw = self._storage.get_item(CONFIG_STORAGE_KEY)
        except Exception:
            _logger.warning("Config storage read failed; using defaults", exc_info=True)
            return self._defaults
        override = _parse_override(raw)
        if not override:
            return self._defaults
        return dataclasses.replace(self._defaults, **override)

    def save(self, patch: Mapping[str, Any]) -> SfmConfig:
        """Merge *patch* (field names) into the effective config and persist it."""
        unknown = sorted(set(patch) - set(_FIELD_TO_PERSISTED))
        if unknown:
            raise SfmConfigError(f"Unknown configuration fields: {', '.join(unknown)}")
        for key, value in patch.items():
            if not isinstance(value, str):
                raise SfmConfigError(f"Configuration field {key} must be a string")

        merged = dataclasses.replace(self.effective(), **dict(patch))
        self._storage.set_item(CONFIG_STORAGE_KEY, json.dumps(merged.to_persisted(), ensure_ascii=False))
        _logger.info("Configuration saved: %s", ", ".join(sorted(patch)) or "<no changes>")
        return merged

    def reset(self) -> SfmConfig:
        """Drop the persisted override."""
        self._storage.remove_item(CONFIG_STORAGE_KEY)
        return self._defaults
