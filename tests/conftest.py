from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("KOYOMI_UTC_OFFSET_HOURS", "KOYOMI_USUI_ANCHOR", "KOYOMI_MAX_LUNATION_STEPS"):
        monkeypatch.delenv(name, raising=False)
