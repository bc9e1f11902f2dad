"""FastAPI application exposing the almanac engine."""

from __future__ import annotations

import json
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Annotated, Callable, Optional, TypeVar

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from koyomi.astro import SunTimes, local_date, sun_status, sunrise_sunset, to_julian_date
from koyomi.config import Settings, load_settings
from koyomi.errors import AlmanacError
from koyomi.lunar import lunar_day_name, moon_phase
from koyomi.lunisolar import RokuyoDay, rokuyo
from koyomi.sekki import airport_sun_table, day_of_year, season, upcoming_solar_terms, week_number
from models import (
    AirportSun,
    AlmanacResponse,
    ErrorResponse,
    HealthResponse,
    InstantQueryParams,
    MoonResponse,
    RokuyoEntry,
    RokuyoQueryParams,
    RokuyoResponse,
    SolarTermEntry,
    SunQueryParams,
    SunResponse,
)

logging.basicConfig(level=logging.INFO, format="%(message)s")
LOGGER = logging.getLogger("almanac-api")

APP_DESCRIPTION = "Lunar phase, sunrise/sunset and Rokuyo for the operations dashboard"

T = TypeVar("T")

SETTINGS: Optional[Settings] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    global SETTINGS
    try:
        SETTINGS = load_settings()
    except ValueError as exc:
        LOGGER.error(json.dumps({"event": "settings_invalid", "error": str(exc)}))
        raise
    LOGGER.info(
        json.dumps(
            {
                "event": "startup",
                "utc_offset_hours": SETTINGS.utc_offset_hours,
                "usui_anchor": SETTINGS.usui_anchor,
            }
        )
    )
    yield


app = FastAPI(
    title="Koyomi Almanac API",
    description=APP_DESCRIPTION,
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _settings() -> Settings:
    return SETTINGS if SETTINGS is not None else load_settings()


def _format_clock(sun: Optional[SunTimes]) -> tuple[Optional[str], Optional[str]]:
    if sun is None:
        return None, None
    return sun.format()


def _error_response(status_code: int, code: str, message: str) -> JSONResponse:
    payload = ErrorResponse(code=code, error=message)
    LOGGER.error(json.dumps({"event": "error", "code": code, "message": message}))
    return JSONResponse(status_code=status_code, content=payload.model_dump())


def _compute(func: Callable[[], T]) -> T:
    """Run a library call, translating its failures into HTTP errors."""

    try:
        return func()
    except (ValueError, OverflowError) as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except AlmanacError as exc:
        raise HTTPException(status_code=500, detail=str(exc))


def _log_request(event: str, start_time: float, **fields: object) -> None:
    duration_ms = (time.perf_counter() - start_time) * 1000.0
    LOGGER.info(json.dumps({"event": event, **fields, "duration_ms": round(duration_ms, 3)}))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    messages = ", ".join(error["msg"] for error in exc.errors())
    return _error_response(422, "validation_error", messages)


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    detail = exc.detail
    if isinstance(detail, dict):
        message = detail.get("error") or detail.get("message") or str(detail)
    elif isinstance(detail, list):
        message = ", ".join(str(item) for item in detail)
    else:
        message = str(detail)
    return _error_response(exc.status_code, f"http_{exc.status_code}", message)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    LOGGER.exception("Unhandled exception", exc_info=exc)
    return _error_response(500, "internal_error", "Unhandled server error")


def _moon_response(at: datetime) -> MoonResponse:
    phase = moon_phase(at)
    return MoonResponse(
        at=at,
        julian_date=round(to_julian_date(at), 5),
        age=round(phase.age, 1),
        fraction=phase.fraction,
        phase_index=phase.index,
        phase_name=phase.name,
        emoji=phase.emoji,
        day_name=lunar_day_name(phase.age),
    )


def _rokuyo_entry(day: RokuyoDay, at: datetime, utc_offset_hours: float) -> RokuyoEntry:
    return RokuyoEntry(
        civil_date=local_date(at, utc_offset_hours),
        index=day.index,
        name=day.name,
        romanization=day.romanization,
        description=day.description,
        lunar_month=day.lunar_month,
        lunar_day=day.lunar_day,
    )


def _resolve_rokuyo(at: datetime, settings: Settings) -> RokuyoEntry:
    day = rokuyo(
        at,
        settings.utc_offset_hours,
        settings.usui_anchor,
        settings.max_lunation_steps,
    )
    return _rokuyo_entry(day, at, settings.utc_offset_hours)


@app.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    settings = _settings()
    return HealthResponse(
        ok=True,
        utc_offset_hours=settings.utc_offset_hours,
        usui_anchor=settings.usui_anchor,
    )


@app.get("/moon", response_model=MoonResponse, responses={422: {"model": ErrorResponse}})
def moon_endpoint(params: Annotated[InstantQueryParams, Query()]) -> MoonResponse:
    start_time = time.perf_counter()
    at = params.instant()
    response = _compute(lambda: _moon_response(at))
    _log_request("moon", start_time, at=at.isoformat(), age=response.age)
    return response


@app.get(
    "/sun",
    response_model=SunResponse,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
)
def sun_endpoint(params: Annotated[SunQueryParams, Query()]) -> SunResponse:
    start_time = time.perf_counter()
    at = params.instant()
    sun = _compute(lambda: sunrise_sunset(at, params.lat, params.lon))
    status = "ok" if sun is not None else _compute(lambda: sun_status(at, params.lat, params.lon))
    sunrise, sunset = _format_clock(sun)

    response = SunResponse(
        status=status,
        at=at,
        latitude=params.lat,
        longitude=params.lon,
        sunrise_utc=sunrise,
        sunset_utc=sunset,
    )
    _log_request(
        "sun",
        start_time,
        lat=params.lat,
        lon=params.lon,
        at=at.isoformat(),
        status=status,
    )
    return response


@app.get(
    "/rokuyo",
    response_model=RokuyoResponse,
    responses={422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def rokuyo_endpoint(params: Annotated[RokuyoQueryParams, Query()]) -> RokuyoResponse:
    start_time = time.perf_counter()
    settings = _settings()
    at = params.instant()
    days = [
        _compute(lambda when=at + timedelta(days=offset): _resolve_rokuyo(when, settings))
        for offset in range(params.days)
    ]
    _log_request("rokuyo", start_time, at=at.isoformat(), days=params.days, first=days[0].name)
    return RokuyoResponse(at=at, utc_offset_hours=settings.utc_offset_hours, days=days)


@app.get(
    "/almanac",
    response_model=AlmanacResponse,
    responses={422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
def almanac_endpoint(params: Annotated[InstantQueryParams, Query()]) -> AlmanacResponse:
    start_time = time.perf_counter()
    settings = _settings()
    offset = settings.utc_offset_hours
    at = params.instant()

    def build() -> AlmanacResponse:
        airports = []
        for airport, sun in airport_sun_table(at):
            sunrise, sunset = _format_clock(sun)
            airports.append(
                AirportSun(icao=airport.icao, name=airport.name, sunrise_utc=sunrise, sunset_utc=sunset)
            )
        return AlmanacResponse(
            at=at,
            julian_date=round(to_julian_date(at), 5),
            day_of_year=day_of_year(at, offset),
            week_number=week_number(at, offset),
            season=season(local_date(at, offset).month),
            moon=_moon_response(at),
            rokuyo=_resolve_rokuyo(at, settings),
            solar_terms=[
                SolarTermEntry(name=term.name, when=term.when, days_until=term.days_until)
                for term in upcoming_solar_terms(at, 3, offset)
            ],
            airports=airports,
        )

    response = _compute(build)
    _log_request("almanac", start_time, at=at.isoformat(), rokuyo=response.rokuyo.name)
    return response
