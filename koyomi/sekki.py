"""The 24 solar terms as a civil-date table, and small calendar helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple

from .astro import SunTimes, local_date, sunrise_sunset
from .config import load_settings

__all__ = [
    "SolarTerm",
    "UpcomingTerm",
    "Airport",
    "SOLAR_TERMS",
    "AIRPORTS",
    "upcoming_solar_terms",
    "day_of_year",
    "week_number",
    "season",
    "airport_sun_table",
]


@dataclass(frozen=True)
class SolarTerm:
    name: str
    month: int
    day: int


@dataclass(frozen=True)
class UpcomingTerm:
    name: str
    when: date
    days_until: int


@dataclass(frozen=True)
class Airport:
    icao: str
    name: str
    lat: float
    lon: float


# Approximate civil dates; the true terms move by a day or so between years.
SOLAR_TERMS: Tuple[SolarTerm, ...] = (
    SolarTerm("小寒", 1, 6),
    SolarTerm("大寒", 1, 20),
    SolarTerm("立春", 2, 4),
    SolarTerm("雨水", 2, 19),
    SolarTerm("啓蟄", 3, 6),
    SolarTerm("春分", 3, 21),
    SolarTerm("清明", 4, 5),
    SolarTerm("穀雨", 4, 20),
    SolarTerm("立夏", 5, 6),
    SolarTerm("小満", 5, 21),
    SolarTerm("芒種", 6, 6),
    SolarTerm("夏至", 6, 21),
    SolarTerm("小暑", 7, 7),
    SolarTerm("大暑", 7, 23),
    SolarTerm("立秋", 8, 7),
    SolarTerm("処暑", 8, 23),
    SolarTerm("白露", 9, 8),
    SolarTerm("秋分", 9, 23),
    SolarTerm("寒露", 10, 8),
    SolarTerm("霜降", 10, 23),
    SolarTerm("立冬", 11, 7),
    SolarTerm("小雪", 11, 22),
    SolarTerm("大雪", 12, 7),
    SolarTerm("冬至", 12, 22),
)

AIRPORTS: Tuple[Airport, ...] = (
    Airport("RJCC", "新千歳", 42.7752, 141.6920),
    Airport("RJAA", "成田", 35.7647, 140.3864),
    Airport("RJTT", "羽田", 35.5494, 139.7798),
    Airport("RJBB", "関西", 34.4347, 135.2440),
    Airport("RJFF", "福岡", 33.5853, 130.4508),
    Airport("ROAH", "那覇", 26.1958, 127.6461),
)


def _offset(utc_offset_hours: Optional[float]) -> float:
    if utc_offset_hours is None:
        return load_settings().utc_offset_hours
    return utc_offset_hours


def upcoming_solar_terms(
    instant: datetime,
    count: int = 3,
    utc_offset_hours: Optional[float] = None,
) -> List[UpcomingTerm]:
    """Next *count* solar terms on or after the local date of *instant*."""

    if count < 1:
        raise ValueError("count must be at least 1")
    today = local_date(instant, _offset(utc_offset_hours))
    candidates: List[UpcomingTerm] = []
    for year in (today.year, today.year + 1):
        for term in SOLAR_TERMS:
            when = date(year, term.month, term.day)
            if when >= today:
                candidates.append(UpcomingTerm(term.name, when, (when - today).days))
    candidates.sort(key=lambda item: item.when)
    return candidates[:count]


def day_of_year(instant: datetime, utc_offset_hours: Optional[float] = None) -> int:
    return local_date(instant, _offset(utc_offset_hours)).timetuple().tm_yday


def week_number(instant: datetime, utc_offset_hours: Optional[float] = None) -> int:
    """Sunday-based week of the year; the week holding January 1 is week 1."""

    today = local_date(instant, _offset(utc_offset_hours))
    jan1 = date(today.year, 1, 1)
    # isoweekday(): Monday=1 .. Sunday=7; fold Sunday to 0.
    first_weekday = jan1.isoweekday() % 7
    return math.ceil(((today - jan1).days + first_weekday + 1) / 7)


def season(month: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"Month out of range: {month}")
    if month <= 2 or month == 12:
        return "❄️ 冬"
    if month <= 5:
        return "🌸 春"
    if month <= 8:
        return "☀️ 夏"
    return "🍂 秋"


def airport_sun_table(instant: datetime) -> List[Tuple[Airport, Optional[SunTimes]]]:
    """Sunrise/sunset at each reference airport; ``None`` entries mean no rise/set."""

    return [(airport, sunrise_sunset(instant, airport.lat, airport.lon)) for airport in AIRPORTS]
