"""Exceptions raised by the almanac engine."""


class AlmanacError(RuntimeError):
    """Base class for almanac computation failures."""


class LunationSearchError(AlmanacError):
    """Raised when a new-moon bracket search exceeds its step limit."""


class SolarTermSearchError(AlmanacError):
    """Raised when a solar-longitude crossing cannot be bracketed."""
