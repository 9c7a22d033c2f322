import json

import pytest

from calendar_hub.config import Settings, parse_sources
from calendar_hub.errors import ConfigurationError


def test_defaults_without_environment(monkeypatch):
    for name in ("CALENDAR_SOURCES", "CALENDAR_SOURCES_FILE", "DAYS_TO_SHOW", "MAX_RESULTS",
                 "CACHE_BACKEND", "CACHE_TTL_SECONDS", "SOURCE_FETCH_TIMEOUT_SECONDS"):
        monkeypatch.delenv(name, raising=False)
    s = Settings.from_env()
    assert s.days_to_show == 30
    assert s.max_results == 50
    assert s.cache_ttl_seconds == 300
    assert s.cache_backend == "memory"
    assert s.source_fetch_timeout_seconds is None
    assert s.sources[0].id == "en.usa#holiday@group.v.calendar.google.com"


def test_sources_from_env_accept_both_shapes(monkeypatch):
    monkeypatch.delenv("CALENDAR_SOURCES_FILE", raising=False)
    monkeypatch.setenv("CALENDAR_SOURCES", json.dumps([
        {"id": "a@example.com", "name": "Ann", "color": "#111"},
        {"id": "b@example.com", "displayName": "Ben", "colorTag": "#222"},
    ]))
    monkeypatch.setenv("DAYS_TO_SHOW", "14")
    monkeypatch.setenv("SOURCE_FETCH_TIMEOUT_SECONDS", "2.5")
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://a.example, https://b.example")
    s = Settings.from_env()
    assert [(c.id, c.display_name, c.color_tag) for c in s.sources] == [
        ("a@example.com", "Ann", "#111"),
        ("b@example.com", "Ben", "#222"),
    ]
    assert s.days_to_show == 14
    assert s.source_fetch_timeout_seconds == 2.5
    assert s.cors_allow_origins == ("https://a.example", "https://b.example")


def test_sources_file_wins_over_env(monkeypatch, tmp_path):
    path = tmp_path / "calendars.json"
    path.write_text(json.dumps([{"id": "file@example.com", "name": "File"}]), encoding="utf-8")
    monkeypatch.setenv("CALENDAR_SOURCES_FILE", str(path))
    monkeypatch.setenv("CALENDAR_SOURCES", json.dumps([{"id": "env@example.com"}]))
    s = Settings.from_env()
    assert [c.id for c in s.sources] == ["file@example.com"]


def test_duplicate_ids_rejected():
    with pytest.raises(ConfigurationError):
        parse_sources([{"id": "x"}, {"id": "x"}])


def test_source_without_id_rejected():
    with pytest.raises(ConfigurationError):
        parse_sources([{"name": "nameless"}])


def test_non_numeric_int_setting_rejected(monkeypatch):
    monkeypatch.setenv("MAX_RESULTS", "lots")
    with pytest.raises(ConfigurationError):
        Settings.from_env()


def test_malformed_sources_json_rejected(monkeypatch):
    monkeypatch.delenv("CALENDAR_SOURCES_FILE", raising=False)
    monkeypatch.setenv("CALENDAR_SOURCES", "{not json")
    with pytest.raises(ConfigurationError):
        Settings.from_env()
