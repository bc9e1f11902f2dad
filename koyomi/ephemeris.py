"""Mean new moons by lunation index (Meeus, *Astronomical Algorithms* ch. 49)."""

from __future__ import annotations

import math
from datetime import date

import erfa
import numpy as np

__all__ = ["new_moon_jde", "new_moon_local_date", "lunation_estimate"]

LUNATIONS_PER_CENTURY = 1236.85
LUNATIONS_PER_YEAR = 12.3685

# Periodic terms, in the order of NEW_MOON_ARGUMENTS below.
NEW_MOON_COEFFICIENTS = np.array([-0.40720, 0.17241, 0.01608, 0.01039, 0.00739])


def _new_moon_arguments(k: int) -> np.ndarray:
    """Return ``[M', M, 2M', 2F, M' - M]`` in radians for lunation *k*."""

    sun_anomaly = 2.5534 + 29.10535670 * k
    moon_anomaly = 201.5643 + 385.81693528 * k
    latitude_arg = 160.7108 + 390.67050284 * k
    return np.radians(
        [
            moon_anomaly,
            sun_anomaly,
            2.0 * moon_anomaly,
            2.0 * latitude_arg,
            moon_anomaly - sun_anomaly,
        ]
    )


def new_moon_jde(k: int) -> float:
    """Julian Ephemeris Date of new moon number *k*.

    ``k = 0`` is the new moon of 2000-01-06; negative values count backwards.
    No ΔT correction is applied, so the result is used directly as a UT
    Julian Date.
    """

    t = k / LUNATIONS_PER_CENTURY
    jde = 2451550.09766 + 29.530588861 * k + 0.00015437 * t**2 - 0.000000150 * t**3
    return float(jde + NEW_MOON_COEFFICIENTS @ np.sin(_new_moon_arguments(k)))


def new_moon_local_date(k: int, utc_offset_hours: float) -> date:
    """Civil date of new moon *k* at a fixed UTC offset."""

    year, month, day, _ = erfa.jd2cal(new_moon_jde(k), utc_offset_hours / 24.0)
    return date(int(year), int(month), int(day))


def lunation_estimate(year: int, month: float) -> int:
    """First guess for the lunation in progress during *year*/*month*."""

    return math.floor((year + (month - 1) / 12.0 - 2000) * LUNATIONS_PER_YEAR) + 1
