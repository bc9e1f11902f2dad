from __future__ import annotations

import pytest

from koyomi.config import DEFAULT_MAX_LUNATION_STEPS, load_settings


def test_defaults():
    settings = load_settings()
    assert settings.utc_offset_hours == 9.0
    assert settings.usui_anchor == "civil"
    assert settings.max_lunation_steps == DEFAULT_MAX_LUNATION_STEPS


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("KOYOMI_UTC_OFFSET_HOURS", "-5.5")
    monkeypatch.setenv("KOYOMI_USUI_ANCHOR", "SOLAR")
    monkeypatch.setenv("KOYOMI_MAX_LUNATION_STEPS", "20")
    settings = load_settings()
    assert settings.utc_offset_hours == -5.5
    assert settings.usui_anchor == "solar"
    assert settings.max_lunation_steps == 20


@pytest.mark.parametrize(
    "name, value",
    [
        ("KOYOMI_UTC_OFFSET_HOURS", "nine"),
        ("KOYOMI_UTC_OFFSET_HOURS", "25"),
        ("KOYOMI_UTC_OFFSET_HOURS", "24"),
        ("KOYOMI_UTC_OFFSET_HOURS", "-24"),
        ("KOYOMI_USUI_ANCHOR", "lunar"),
        ("KOYOMI_MAX_LUNATION_STEPS", "0"),
        ("KOYOMI_MAX_LUNATION_STEPS", "many"),
    ],
)
def test_invalid_environment(monkeypatch: pytest.MonkeyPatch, name: str, value: str):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError):
        load_settings()
