"""Julian dates, low-order solar position, and sunrise/sunset times."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta, timezone
from typing import Optional

import erfa

from .errors import SolarTermSearchError

__all__ = [
    "SunTimes",
    "to_julian_date",
    "julian_date_to_datetime",
    "calendar_julian_date",
    "local_date",
    "solar_ecliptic_longitude",
    "solar_declination",
    "find_solar_longitude",
    "sunrise_sunset",
    "sun_status",
]

UNIX_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
UNIX_EPOCH_JD = 2440587.5
J2000_JD = erfa.DJ00  # 2451545.0, 2000-01-01T12:00 TT.

OBLIQUITY_DEG = 23.4397
# Apparent altitude of the solar centre at rise/set: refraction plus semi-diameter.
HORIZON_ALTITUDE_DEG = -0.8333
PERIHELION_LONGITUDE_DEG = 102.9372


@dataclass(frozen=True)
class SunTimes:
    """Sunrise and sunset as UTC clock times truncated to the minute."""

    rise: time
    set: time
    status: str = "ok"

    def format(self) -> tuple[str, str]:
        return self.rise.strftime("%H:%M"), self.set.strftime("%H:%M")


def _require_aware(instant: datetime) -> datetime:
    if instant.tzinfo is None:
        raise ValueError("datetime must be timezone-aware (UTC)")
    return instant.astimezone(UTC)


def _validate_coordinates(lat: float, lon: float) -> None:
    if not (math.isfinite(lat) and math.isfinite(lon)):
        raise ValueError("Coordinates must be finite numbers")
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"Latitude out of range: {lat}")
    if not -180.0 <= lon <= 180.0:
        raise ValueError(f"Longitude out of range: {lon}")


def to_julian_date(instant: datetime) -> float:
    """Return the Julian Date of a timezone-aware *instant*.

    The day boundary sits at noon UTC, so midnight UTC has a ``.5`` fraction.
    """

    elapsed = _require_aware(instant) - UNIX_EPOCH
    return elapsed.total_seconds() / erfa.DAYSEC + UNIX_EPOCH_JD


def julian_date_to_datetime(jd: float) -> datetime:
    """Inverse of :func:`to_julian_date`, as a UTC datetime."""

    return UNIX_EPOCH + timedelta(days=jd - UNIX_EPOCH_JD)


def calendar_julian_date(day: date) -> float:
    """Julian Date at 00:00 of the civil (proleptic Gregorian) *day*."""

    djm0, djm = erfa.cal2jd(day.year, day.month, day.day)
    return float(djm0) + float(djm)


def local_date(instant: datetime, utc_offset_hours: float) -> date:
    """Civil date of *instant* at a fixed UTC offset."""

    offset = timezone(timedelta(hours=utc_offset_hours))
    return _require_aware(instant).astimezone(offset).date()


def _transit_mean_anomaly(days: float) -> float:
    return (357.5291 + 0.98560028 * days) % 360.0


def equation_of_center(mean_anomaly_deg: float) -> float:
    m = math.radians(mean_anomaly_deg)
    return 1.9148 * math.sin(m) + 0.02 * math.sin(2.0 * m) + 0.0003 * math.sin(3.0 * m)


def _transit_ecliptic_longitude(mean_anomaly_deg: float) -> float:
    # Perihelion held at its J2000 longitude; good enough for rise/set to the minute.
    center = equation_of_center(mean_anomaly_deg)
    return (mean_anomaly_deg + center + 180.0 + PERIHELION_LONGITUDE_DEG) % 360.0


def solar_ecliptic_longitude(jd: float) -> float:
    """Approximate apparent ecliptic longitude of the sun in degrees ``[0, 360)``.

    Uses the low-precision series of the Astronomical Almanac (about 0.01°
    between 1950 and 2050).

    Parameters
    ----------
    jd:
        Julian Date (UT is adequate at this precision).
    """

    days = jd - J2000_JD
    mean_longitude = 280.460 + 0.9856474 * days
    g = math.radians((357.528 + 0.9856003 * days) % 360.0)
    return (mean_longitude + 1.915 * math.sin(g) + 0.020 * math.sin(2.0 * g)) % 360.0


def solar_declination(jd: float) -> float:
    """Solar declination in degrees for the Julian Date *jd*."""

    longitude = math.radians(solar_ecliptic_longitude(jd))
    return math.degrees(math.asin(math.sin(longitude) * math.sin(math.radians(OBLIQUITY_DEG))))


def _longitude_offset(jd: float, target_deg: float) -> float:
    """Signed distance ``λ(jd) - target`` wrapped into ``[-180, 180)``."""

    return (solar_ecliptic_longitude(jd) - target_deg + 180.0) % 360.0 - 180.0


def find_solar_longitude(
    target_deg: float,
    jd_start: float,
    jd_end: float,
    max_iterations: int = 60,
) -> float:
    """Locate the Julian Date at which the sun reaches *target_deg* via bisection.

    Raises
    ------
    SolarTermSearchError
        If the longitude does not cross *target_deg* between the two bounds.
    """

    low_jd, high_jd = jd_start, jd_end
    low_val = _longitude_offset(low_jd, target_deg)
    high_val = _longitude_offset(high_jd, target_deg)
    if low_val == 0:
        return low_jd
    if not low_val < 0 <= high_val:
        raise SolarTermSearchError(
            f"Solar longitude {target_deg} not bracketed by JD {jd_start}..{jd_end}"
        )
    for _ in range(max_iterations):
        mid_jd = (low_jd + high_jd) / 2.0
        mid_val = _longitude_offset(mid_jd, target_deg)
        # One second is far below the approximation's own error.
        if high_jd - low_jd <= 1.0 / erfa.DAYSEC:
            return mid_jd
        if mid_val < 0:
            low_jd = mid_jd
        else:
            high_jd = mid_jd
    return (low_jd + high_jd) / 2.0


def _hour_angle_terms(instant: datetime, lat: float, lon: float) -> tuple[float, float]:
    """Return ``(cos H0, Jtransit)`` for the solar day containing *instant*."""

    _validate_coordinates(lat, lon)
    jd = to_julian_date(instant)
    n = math.floor(jd - J2000_JD + 0.0008)
    j_star = n - lon / 360.0

    mean_anomaly = _transit_mean_anomaly(j_star)
    longitude = _transit_ecliptic_longitude(mean_anomaly)
    m_rad = math.radians(mean_anomaly)
    lam_rad = math.radians(longitude)
    j_transit = J2000_JD + j_star + 0.0053 * math.sin(m_rad) - 0.0069 * math.sin(2.0 * lam_rad)

    sin_dec = math.sin(lam_rad) * math.sin(math.radians(OBLIQUITY_DEG))
    cos_dec = math.cos(math.asin(sin_dec))
    lat_rad = math.radians(lat)
    cos_h0 = (math.sin(math.radians(HORIZON_ALTITUDE_DEG)) - math.sin(lat_rad) * sin_dec) / (
        math.cos(lat_rad) * cos_dec
    )
    return cos_h0, j_transit


def _clock_time(jd: float) -> time:
    return julian_date_to_datetime(jd).time().replace(second=0, microsecond=0)


def sunrise_sunset(instant: datetime, lat: float, lon: float) -> Optional[SunTimes]:
    """Compute sunrise and sunset for the solar day of *instant*.

    Parameters
    ----------
    instant:
        Timezone-aware datetime selecting the day.
    lat, lon:
        Geographic coordinates in degrees (east-positive longitude).

    Returns
    -------
    SunTimes or None
        UTC clock times; ``None`` when the sun does not cross the horizon
        (polar day or polar night). The times may belong to a different UTC
        calendar day than *instant*.
    """

    cos_h0, j_transit = _hour_angle_terms(instant, lat, lon)
    if cos_h0 < -1.0 or cos_h0 > 1.0:
        return None
    h0 = math.degrees(math.acos(cos_h0))
    return SunTimes(
        rise=_clock_time(j_transit - h0 / 360.0),
        set=_clock_time(j_transit + h0 / 360.0),
    )


def sun_status(instant: datetime, lat: float, lon: float) -> str:
    """Classify the day as ``"ok"``, ``"polar_day"`` or ``"polar_night"``."""

    cos_h0, _ = _hour_angle_terms(instant, lat, lon)
    if cos_h0 < -1.0:
        return "polar_day"
    if cos_h0 > 1.0:
        return "polar_night"
    return "ok"
