"""Environment-driven settings for the almanac engine."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_UTC_OFFSET_HOURS = 9.0  # JST
DEFAULT_USUI_ANCHOR = "civil"
DEFAULT_MAX_LUNATION_STEPS = 12

USUI_ANCHORS = ("civil", "solar")


@dataclass(frozen=True)
class Settings:
    """Resolved configuration values."""

    utc_offset_hours: float = DEFAULT_UTC_OFFSET_HOURS
    usui_anchor: str = DEFAULT_USUI_ANCHOR
    max_lunation_steps: int = DEFAULT_MAX_LUNATION_STEPS


def validate_anchor(anchor: str) -> str:
    if anchor not in USUI_ANCHORS:
        raise ValueError(f"Unsupported usui anchor: {anchor}")
    return anchor


def validate_offset(offset_hours: float) -> float:
    if not -24.0 < offset_hours < 24.0:
        raise ValueError("utc offset must be strictly between -24 and 24 hours")
    return offset_hours


def load_settings() -> Settings:
    """Read settings from ``KOYOMI_*`` environment variables.

    Raises
    ------
    ValueError
        If a variable is present but cannot be parsed or is out of range.
    """

    raw_offset = os.environ.get("KOYOMI_UTC_OFFSET_HOURS")
    raw_anchor = os.environ.get("KOYOMI_USUI_ANCHOR")
    raw_steps = os.environ.get("KOYOMI_MAX_LUNATION_STEPS")

    offset = DEFAULT_UTC_OFFSET_HOURS
    if raw_offset:
        try:
            offset = float(raw_offset)
        except ValueError as exc:
            raise ValueError(f"Invalid KOYOMI_UTC_OFFSET_HOURS: {raw_offset}") from exc
    validate_offset(offset)

    anchor = validate_anchor(raw_anchor.strip().lower()) if raw_anchor else DEFAULT_USUI_ANCHOR

    steps = DEFAULT_MAX_LUNATION_STEPS
    if raw_steps:
        try:
            steps = int(raw_steps)
        except ValueError as exc:
            raise ValueError(f"Invalid KOYOMI_MAX_LUNATION_STEPS: {raw_steps}") from exc
        if steps < 1:
            raise ValueError("KOYOMI_MAX_LUNATION_STEPS must be at least 1")

    return Settings(utc_offset_hours=offset, usui_anchor=anchor, max_lunation_steps=steps)
