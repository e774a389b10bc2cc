from __future__ import annotations

from sfmap._redact import redact_for_log, redact_url


def test_redact_for_log_redacts_sensitive_keys() -> None:
    payload = {
        "status": "1",
        "apikey": "eyJsecret",
        "Authorization": "Bearer eyJsecret",
        "config": {"amapRestKey": "rest", "supabase_anon_key": "eyJ"},
        "name": "钟水饺",
    }

    redacted = redact_for_log(payload)
    assert redacted["apikey"] == "<redacted>"
    assert redacted["Authorization"] == "<redacted>"
    assert redacted["config"]["amapRestKey"] == "<redacted>"
    assert redacted["config"]["supabase_anon_key"] == "<redacted>"
    assert redacted["name"] == "钟水饺"


def test_redact_for_log_truncates_long_strings() -> None:
    long_value = "x" * 600
    redacted = redact_for_log({"value": long_value}, max_string=10)
    assert redacted["value"].startswith("x" * 10)
    assert "<truncated>" in redacted["value"]


def test_redact_url_masks_key_query_parameter() -> None:
    url = "https://restapi.amap.com/v3/direction/walking?key=rest-key&origin=1,2&destination=3,4"

    redacted = redact_url(url)

    assert "rest-key" not in redacted
    assert "key=<redacted>" in redacted
    assert "origin=1,2" in redacted


def test_redact_url_leaves_plain_urls_alone() -> None:
    assert redact_url("https://abc.supabase.co/rest/v1/places") == "https://abc.supabase.co/rest/v1/places"
