from __future__ import annotations

from datetime import UTC, datetime, timedelta

import numpy as np
import pytest

from koyomi.astro import julian_date_to_datetime
from koyomi.lunar import (
    PHASE_EMOJI,
    PHASE_NAMES,
    REFERENCE_NEW_MOON_JD,
    SYNODIC_MONTH_DAYS,
    lunar_day_name,
    moon_phase,
)


def _at_fraction(fraction: float) -> datetime:
    return julian_date_to_datetime(REFERENCE_NEW_MOON_JD + fraction * SYNODIC_MONTH_DAYS)


def test_reference_new_moon_has_near_zero_age():
    phase = moon_phase(datetime(2000, 1, 6, 18, 14, tzinfo=UTC))
    assert phase.age < 1.0
    assert phase.index == 0
    assert phase.name == "新月"
    assert phase.emoji == "🌑"


def test_fraction_matches_age():
    phase = moon_phase(datetime(2024, 5, 1, tzinfo=UTC))
    assert 0.0 <= phase.fraction < 1.0
    assert 0.0 <= phase.age < SYNODIC_MONTH_DAYS
    assert phase.fraction == pytest.approx(phase.age / SYNODIC_MONTH_DAYS)


def test_phase_repeats_after_one_synodic_month():
    start = datetime(1995, 1, 1, tzinfo=UTC)
    for hours in np.linspace(0, 40 * 365 * 24, 97):
        instant = start + timedelta(hours=float(hours))
        later = instant + timedelta(days=SYNODIC_MONTH_DAYS)
        first, second = moon_phase(instant).fraction, moon_phase(later).fraction
        assert 0.0 <= first < 1.0
        diff = abs(first - second)
        assert min(diff, 1.0 - diff) < 1e-6


def test_full_moon_bucket():
    phase = moon_phase(_at_fraction(0.5))
    assert phase.index == 4
    assert phase.name == "満月"
    assert phase.emoji == "🌕"


def test_last_bucket_wraps_to_new_moon():
    phase = moon_phase(_at_fraction(0.97))
    assert phase.index == 8
    assert phase.name == PHASE_NAMES[0]
    assert phase.emoji == PHASE_EMOJI[0]


def test_phase_index_bounds():
    start = datetime(2024, 1, 1, tzinfo=UTC)
    indices = {moon_phase(start + timedelta(hours=6 * step)).index for step in range(4 * 60)}
    assert indices == set(range(9))


def test_before_reference_epoch():
    phase = moon_phase(datetime(1969, 7, 20, 20, 17, tzinfo=UTC))
    assert 0.0 <= phase.fraction < 1.0
    assert 0.0 <= phase.index <= 8


@pytest.mark.parametrize(
    "age, expected",
    [
        (0.0, "朔"),
        (0.4, "朔"),
        (2.49, "三日月"),
        (7.0, "七夕月"),
        (14.6, "十五夜"),
        (17.2, "立待月"),
        (29.4, "二十九夜"),
        (29.5, "30日月"),
    ],
)
def test_lunar_day_name(age: float, expected: str):
    assert lunar_day_name(age) == expected
