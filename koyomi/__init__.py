"""Japanese almanac engine: lunar phase, sunrise/sunset and Rokuyo."""

from .astro import (
    SunTimes,
    solar_declination,
    solar_ecliptic_longitude,
    sun_status,
    sunrise_sunset,
    to_julian_date,
)
from .ephemeris import new_moon_jde, new_moon_local_date
from .errors import AlmanacError, LunationSearchError, SolarTermSearchError
from .lunar import MoonPhase, lunar_day_name, moon_phase
from .lunisolar import LunarDate, RokuyoDay, lunar_date, rokuyo, rokuyo_week
from .sekki import upcoming_solar_terms

__all__ = [
    "AlmanacError",
    "LunarDate",
    "LunationSearchError",
    "MoonPhase",
    "RokuyoDay",
    "SolarTermSearchError",
    "SunTimes",
    "lunar_date",
    "lunar_day_name",
    "moon_phase",
    "new_moon_jde",
    "new_moon_local_date",
    "rokuyo",
    "rokuyo_week",
    "solar_declination",
    "solar_ecliptic_longitude",
    "sun_status",
    "sunrise_sunset",
    "to_julian_date",
    "upcoming_solar_terms",
]
