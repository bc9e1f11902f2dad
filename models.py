"""Pydantic models for API requests and responses."""

from __future__ import annotations

from datetime import UTC, date, datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return value
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class InstantQueryParams(BaseModel):
    """Validated ``at`` parameter shared by the almanac endpoints."""

    at: Optional[datetime] = Field(
        None,
        description="Instant to evaluate (ISO-8601, naive values read as UTC); defaults to now",
    )

    @field_validator("at")
    @classmethod
    def normalize_at(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    def instant(self) -> datetime:
        return self.at or datetime.now(UTC)


class SunQueryParams(InstantQueryParams):
    """Validated query parameters for the ``/sun`` endpoint."""

    lat: float = Field(..., ge=-90.0, le=90.0, description="Latitude in degrees")
    lon: float = Field(..., ge=-180.0, le=180.0, description="Longitude in degrees (east positive)")


class RokuyoQueryParams(InstantQueryParams):
    days: int = Field(1, ge=1, le=31, description="Number of consecutive days to resolve")


class MoonResponse(BaseModel):
    """Lunar age and phase bucket."""

    ok: bool = True
    at: datetime
    julian_date: float
    age: float = Field(..., description="Days since the mean new moon, one decimal")
    fraction: float = Field(..., ge=0.0, lt=1.0)
    phase_index: int = Field(..., ge=0, le=8)
    phase_name: str
    emoji: str
    day_name: str


class SunResponse(BaseModel):
    """Sunrise/sunset payload; both times are null for polar day or night."""

    ok: bool = True
    status: Literal["ok", "polar_day", "polar_night"]
    at: datetime
    latitude: float
    longitude: float
    sunrise_utc: Optional[str] = Field(None, description="Sunrise, UTC HH:MM")
    sunset_utc: Optional[str] = Field(None, description="Sunset, UTC HH:MM")


class RokuyoEntry(BaseModel):
    civil_date: date = Field(..., description="Local civil date")
    index: int = Field(..., ge=0, le=5)
    name: str
    romanization: str
    description: str
    lunar_month: int = Field(..., ge=1, le=12)
    lunar_day: int = Field(..., ge=1)


class RokuyoResponse(BaseModel):
    ok: bool = True
    at: datetime
    utc_offset_hours: float
    days: List[RokuyoEntry]


class SolarTermEntry(BaseModel):
    name: str
    when: date
    days_until: int


class AirportSun(BaseModel):
    icao: str
    name: str
    sunrise_utc: Optional[str] = None
    sunset_utc: Optional[str] = None


class AlmanacResponse(BaseModel):
    """Everything the dashboard's almanac strip shows for one instant."""

    ok: bool = True
    at: datetime
    julian_date: float
    day_of_year: int
    week_number: int
    season: str
    moon: MoonResponse
    rokuyo: RokuyoEntry
    solar_terms: List[SolarTermEntry]
    airports: List[AirportSun]


class HealthResponse(BaseModel):
    """Health-check response."""

    ok: bool = True
    utc_offset_hours: float
    usui_anchor: str


class ErrorResponse(BaseModel):
    """Error payload."""

    ok: bool = False
    code: str
    error: str
