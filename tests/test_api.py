from __future__ import annotations

import re
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

import almanac_api
from almanac_api import app
from koyomi.errors import LunationSearchError


@pytest.fixture
def api_client() -> Iterator[TestClient]:
    with TestClient(app) as client:
        yield client


def test_health_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["utc_offset_hours"] == 9.0
    assert payload["usui_anchor"] == "civil"


def test_sun_endpoint_tokyo(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun",
        params={"lat": 35.5494, "lon": 139.7798, "at": "2024-06-21T03:00:00Z"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert re.fullmatch(r"\d{2}:\d{2}", payload["sunrise_utc"])
    assert re.fullmatch(r"\d{2}:\d{2}", payload["sunset_utc"])


def test_sun_endpoint_polar_night(api_client: TestClient) -> None:
    response = api_client.get(
        "/sun",
        params={"lat": 70.0, "lon": 25.0, "at": "2024-12-21T12:00:00Z"},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "polar_night"
    assert payload["sunrise_utc"] is None
    assert payload["sunset_utc"] is None


def test_validation_error(api_client: TestClient) -> None:
    response = api_client.get("/sun", params={"lat": 95, "lon": 0})
    assert response.status_code == 422
    payload = response.json()
    assert payload["code"] == "validation_error"
    assert payload["ok"] is False


def test_moon_endpoint_reference_new_moon(api_client: TestClient) -> None:
    response = api_client.get("/moon", params={"at": "2000-01-06T18:14:00Z"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["age"] < 1.0
    assert payload["phase_index"] == 0
    assert payload["phase_name"] == "新月"
    assert payload["day_name"] == "一日月"


def test_moon_endpoint_defaults_to_now(api_client: TestClient) -> None:
    response = api_client.get("/moon")
    assert response.status_code == 200
    assert 0.0 <= response.json()["fraction"] < 1.0


def test_rokuyo_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/rokuyo", params={"at": "2024-02-10T03:00:00Z", "days": 2})
    assert response.status_code == 200
    payload = response.json()
    assert [day["name"] for day in payload["days"]] == ["先勝", "友引"]
    assert payload["days"][0]["civil_date"] == "2024-02-10"
    assert payload["days"][0]["lunar_month"] == 1
    assert payload["days"][1]["lunar_day"] == 2


def test_rokuyo_endpoint_rejects_zero_days(api_client: TestClient) -> None:
    response = api_client.get("/rokuyo", params={"days": 0})
    assert response.status_code == 422
    assert response.json()["code"] == "validation_error"


def test_almanac_endpoint(api_client: TestClient) -> None:
    response = api_client.get("/almanac", params={"at": "2024-02-10T03:00:00Z"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["day_of_year"] == 41
    assert payload["season"] == "❄️ 冬"
    assert payload["rokuyo"]["name"] == "先勝"
    assert payload["solar_terms"][0]["name"] == "雨水"
    assert payload["solar_terms"][0]["days_until"] == 9
    assert len(payload["airports"]) == 6
    assert payload["julian_date"] == pytest.approx(2460350.625)


def test_search_failure_maps_to_500(api_client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    def fail(*args, **kwargs):
        raise LunationSearchError("New-moon search exceeded 12 steps")

    monkeypatch.setattr(almanac_api, "rokuyo", fail)
    response = api_client.get("/rokuyo", params={"at": "2024-02-10T03:00:00Z"})
    assert response.status_code == 500
    payload = response.json()
    assert payload["ok"] is False
    assert payload["code"] == "http_500"
    assert "12 steps" in payload["error"]


def test_library_value_error_maps_to_400(
    api_client: TestClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    def reject(*args, **kwargs):
        raise ValueError("Unsupported usui anchor: lunar")

    monkeypatch.setattr(almanac_api, "rokuyo", reject)
    response = api_client.get("/rokuyo", params={"at": "2024-02-10T03:00:00Z"})
    assert response.status_code == 400
    payload = response.json()
    assert payload["ok"] is False
    assert payload["code"] == "http_400"
    assert payload["error"] == "Unsupported usui anchor: lunar"


def test_out_of_range_instant_maps_to_400(api_client: TestClient) -> None:
    response = api_client.get("/rokuyo", params={"at": "9999-12-31T20:00:00Z"})
    assert response.status_code == 400
    assert response.json()["code"] == "http_400"
