"""Lunar month/day resolution and the six-day Rokuyo cycle.

Lunar months are bounded by new moons expressed as local civil dates. The
first month of the lunar year is the one containing the solar term usui
(rain water). By default usui is taken as February 19 of the civil year, a
fixed-date approximation of the 330° solar-longitude crossing that can be off
by a day in some years; ``anchor="solar"`` uses the computed crossing instead.

Leap months are not modelled: in years with thirteen lunations the month
number wraps past twelve.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from .astro import (
    calendar_julian_date,
    find_solar_longitude,
    julian_date_to_datetime,
    local_date,
)
from .config import (
    DEFAULT_MAX_LUNATION_STEPS,
    DEFAULT_USUI_ANCHOR,
    DEFAULT_UTC_OFFSET_HOURS,
    load_settings,
    validate_anchor,
    validate_offset,
)
from .ephemeris import lunation_estimate, new_moon_local_date
from .errors import LunationSearchError

__all__ = [
    "LunarDate",
    "RokuyoDay",
    "ROKUYO_NAMES",
    "find_lunation",
    "usui_date",
    "lunar_new_year_lunation",
    "lunar_date",
    "rokuyo",
    "rokuyo_from_lunar_date",
    "rokuyo_week",
]

LOGGER = logging.getLogger(__name__)

USUI_LONGITUDE_DEG = 330.0
USUI_CIVIL_MONTH_DAY = (2, 19)

ROKUYO_NAMES: Tuple[str, ...] = ("大安", "赤口", "先勝", "友引", "先負", "仏滅")
ROKUYO_ROMANIZED: Tuple[str, ...] = (
    "Taian",
    "Shakku",
    "Sensho",
    "Tomobiki",
    "Senbu",
    "Butsumetsu",
)
ROKUYO_DESCRIPTIONS: Tuple[str, ...] = (
    "大吉日・万事良し",
    "正午のみ吉",
    "午前中が吉",
    "朝夕は吉、昼は凶",
    "午後が吉",
    "万事凶・慎む日",
)


@dataclass(frozen=True)
class LunarDate:
    """Lunar month and day, with the lunation that opens the month."""

    month: int
    day: int
    lunation: int
    new_moon: date


@dataclass(frozen=True)
class RokuyoDay:
    index: int
    name: str
    romanization: str
    description: str
    lunar_month: int
    lunar_day: int


def _resolve(
    utc_offset_hours: Optional[float],
    anchor: Optional[str],
    max_steps: Optional[int],
) -> Tuple[float, str, int]:
    if utc_offset_hours is None or anchor is None or max_steps is None:
        settings = load_settings()
        utc_offset_hours = settings.utc_offset_hours if utc_offset_hours is None else utc_offset_hours
        anchor = settings.usui_anchor if anchor is None else anchor
        max_steps = settings.max_lunation_steps if max_steps is None else max_steps
    return validate_offset(utc_offset_hours), validate_anchor(anchor), max_steps


def _step_guard(steps: int, max_steps: int, target: date, k: int) -> None:
    if steps > max_steps:
        LOGGER.error(
            json.dumps(
                {
                    "event": "lunation_search_failed",
                    "target": target.isoformat(),
                    "lunation": k,
                    "steps": steps,
                }
            )
        )
        raise LunationSearchError(
            f"New-moon search for {target.isoformat()} exceeded {max_steps} steps (k={k})"
        )


def find_lunation(
    today: date,
    utc_offset_hours: float,
    estimate: Optional[int] = None,
    max_steps: int = DEFAULT_MAX_LUNATION_STEPS,
) -> int:
    """Return *k* such that ``nm(k) <= today < nm(k + 1)`` in local dates.

    The search walks from *estimate* (or :func:`lunation_estimate`) one
    lunation at a time.

    Raises
    ------
    LunationSearchError
        If more than *max_steps* moves are needed.
    """

    k = lunation_estimate(today.year, today.month) if estimate is None else estimate
    steps = 0
    while new_moon_local_date(k, utc_offset_hours) > today:
        k -= 1
        steps += 1
        _step_guard(steps, max_steps, today, k)
    while new_moon_local_date(k + 1, utc_offset_hours) <= today:
        k += 1
        steps += 1
        _step_guard(steps, max_steps, today, k)
    return k


def usui_date(
    year: int,
    anchor: str = DEFAULT_USUI_ANCHOR,
    utc_offset_hours: float = DEFAULT_UTC_OFFSET_HOURS,
) -> date:
    """Local civil date of the solar term usui in *year*."""

    if validate_anchor(anchor) == "civil":
        return date(year, *USUI_CIVIL_MONTH_DAY)
    jd = find_solar_longitude(
        USUI_LONGITUDE_DEG,
        calendar_julian_date(date(year, 2, 12)),
        calendar_julian_date(date(year, 2, 26)),
    )
    return (julian_date_to_datetime(jd) + timedelta(hours=utc_offset_hours)).date()


def lunar_new_year_lunation(
    year: int,
    utc_offset_hours: float = DEFAULT_UTC_OFFSET_HOURS,
    anchor: str = DEFAULT_USUI_ANCHOR,
    max_steps: int = DEFAULT_MAX_LUNATION_STEPS,
) -> int:
    """Lunation opening the month that contains usui of *year*.

    That is the lunation immediately preceding the first new moon falling
    strictly after usui.
    """

    usui = usui_date(year, anchor, utc_offset_hours)
    # Mid-February guess.
    k = lunation_estimate(year, 2.5)
    steps = 0
    while new_moon_local_date(k - 1, utc_offset_hours) > usui:
        k -= 1
        steps += 1
        _step_guard(steps, max_steps, usui, k)
    while new_moon_local_date(k, utc_offset_hours) <= usui:
        k += 1
        steps += 1
        _step_guard(steps, max_steps, usui, k)
    return k - 1


def lunar_date(
    instant: datetime,
    utc_offset_hours: Optional[float] = None,
    anchor: Optional[str] = None,
    max_steps: Optional[int] = None,
) -> LunarDate:
    """Resolve the lunar month and day of *instant* in local civil time."""

    offset, anchor, max_steps = _resolve(utc_offset_hours, anchor, max_steps)
    today = local_date(instant, offset)
    k = find_lunation(today, offset, max_steps=max_steps)
    new_moon = new_moon_local_date(k, offset)
    day = math.floor(calendar_julian_date(today) - calendar_julian_date(new_moon)) + 1

    month = k - lunar_new_year_lunation(today.year, offset, anchor, max_steps) + 1
    if month <= 0:
        month = k - lunar_new_year_lunation(today.year - 1, offset, anchor, max_steps) + 1
    if month > 12:
        LOGGER.debug(
            json.dumps({"event": "lunar_month_wrapped", "date": today.isoformat(), "month": month})
        )
        month -= 12
    if month < 1:
        # Only reachable when the new-year anchor disagrees with the bracket search.
        LOGGER.warning(
            json.dumps(
                {
                    "event": "lunar_month_clamped",
                    "date": today.isoformat(),
                    "lunation": k,
                    "month": month,
                }
            )
        )
        month = 1
    return LunarDate(month=month, day=day, lunation=k, new_moon=new_moon)


def rokuyo_from_lunar_date(lunar: LunarDate) -> RokuyoDay:
    index = (lunar.month + lunar.day) % 6
    return RokuyoDay(
        index=index,
        name=ROKUYO_NAMES[index],
        romanization=ROKUYO_ROMANIZED[index],
        description=ROKUYO_DESCRIPTIONS[index],
        lunar_month=lunar.month,
        lunar_day=lunar.day,
    )


def rokuyo(
    instant: datetime,
    utc_offset_hours: Optional[float] = None,
    anchor: Optional[str] = None,
    max_steps: Optional[int] = None,
) -> RokuyoDay:
    """Rokuyo of the local civil day containing *instant*.

    Parameters
    ----------
    instant:
        Timezone-aware datetime.
    utc_offset_hours, anchor, max_steps:
        Overrides for :class:`koyomi.config.Settings`.

    Returns
    -------
    RokuyoDay
        ``index = (lunar_month + lunar_day) % 6`` into the fixed table
        大安, 赤口, 先勝, 友引, 先負, 仏滅.
    """

    return rokuyo_from_lunar_date(lunar_date(instant, utc_offset_hours, anchor, max_steps))


def rokuyo_week(
    instant: datetime,
    days: int = 7,
    utc_offset_hours: Optional[float] = None,
    anchor: Optional[str] = None,
    max_steps: Optional[int] = None,
) -> List[RokuyoDay]:
    """Rokuyo for *days* consecutive days starting at *instant*."""

    if days < 1:
        raise ValueError("days must be at least 1")
    return [
        rokuyo(instant + timedelta(days=offset), utc_offset_hours, anchor, max_steps)
        for offset in range(days)
    ]
