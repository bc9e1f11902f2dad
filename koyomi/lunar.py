"""Lunar age, phase buckets and traditional day names."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Tuple

from .astro import to_julian_date

__all__ = ["MoonPhase", "SYNODIC_MONTH_DAYS", "moon_phase", "lunar_day_name"]

SYNODIC_MONTH_DAYS = 29.53058868
REFERENCE_NEW_MOON_JD = 2451549.5  # 2000-01-06 00:00 UTC

# Nine entries: the last bucket wraps back to new moon.
PHASE_EMOJI: Tuple[str, ...] = ("🌑", "🌒", "🌓", "🌔", "🌕", "🌖", "🌗", "🌘", "🌑")
PHASE_NAMES: Tuple[str, ...] = (
    "新月",
    "三日月",
    "上弦",
    "十三夜",
    "満月",
    "十六夜",
    "下弦",
    "有明",
    "新月",
)

LUNAR_DAY_NAMES: Dict[int, str] = {
    0: "朔",
    1: "一日月",
    2: "二日月",
    3: "三日月",
    4: "四日月",
    5: "五日月",
    6: "六日月",
    7: "七夕月",
    8: "八日月",
    9: "九日月",
    10: "十日月",
    11: "十一日月",
    12: "十二日月",
    13: "十三夜",
    14: "十四日月",
    15: "十五夜",
    16: "十六夜",
    17: "立待月",
    18: "居待月",
    19: "寝待月",
    20: "更待月",
    21: "二十一夜",
    22: "二十二夜",
    23: "二十三夜",
    24: "二十四夜",
    25: "二十五夜",
    26: "二十六夜",
    27: "二十七夜",
    28: "二十八夜",
    29: "二十九夜",
}


@dataclass(frozen=True)
class MoonPhase:
    """Lunar age in days and its display bucket."""

    age: float
    index: int
    name: str
    emoji: str
    fraction: float


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def moon_phase(instant: datetime) -> MoonPhase:
    """Return the lunar age and phase bucket at *instant*.

    Age is measured from the mean new moon of 2000-01-06 using a fixed
    synodic month, so it drifts from the true moon by up to about a day.
    """

    cycles = (to_julian_date(instant) - REFERENCE_NEW_MOON_JD) / SYNODIC_MONTH_DAYS
    fraction = cycles - math.floor(cycles)
    age = fraction * SYNODIC_MONTH_DAYS
    # Floating-point rounding can land exactly on the period; fold it back.
    if age >= SYNODIC_MONTH_DAYS:
        age, fraction = 0.0, 0.0
    index = _round_half_up(fraction * 8) % 9
    return MoonPhase(
        age=age,
        index=index,
        name=PHASE_NAMES[index],
        emoji=PHASE_EMOJI[index],
        fraction=fraction,
    )


def lunar_day_name(age: float) -> str:
    """Poetic name for the night at lunar *age* (e.g. 十五夜, 立待月)."""

    day = _round_half_up(round(age, 1))
    return LUNAR_DAY_NAMES.get(day, f"{day}日月")
