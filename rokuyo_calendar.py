"""Monthly Rokuyo report.

Usage:
    python rokuyo_calendar.py [YYYY-MM | YYYY-MM:YYYY-MM | YYYY-MM,YYYY-MM,...]
                              [--offset HOURS] [--anchor civil|solar]
"""

from __future__ import annotations

import argparse
import sys
from datetime import UTC, date, datetime, timedelta
from typing import List, Optional, Sequence, Tuple

from koyomi.config import USUI_ANCHORS, load_settings
from koyomi.errors import AlmanacError
from koyomi.lunisolar import lunar_date, rokuyo_from_lunar_date

WEEKDAYS = ("月", "火", "水", "木", "金", "土", "日")

Month = Tuple[int, int]


def _parse_month(text: str) -> Month:
    try:
        year_str, month_str = text.split("-", 1)
        year, month = int(year_str), int(month_str)
    except ValueError as exc:
        raise ValueError(f"月の指定が不正です: {text!r} (YYYY-MM)") from exc
    if not 1 <= month <= 12:
        raise ValueError(f"月の指定が不正です: {text!r}")
    return year, month


def _next_month(year: int, month: int) -> Month:
    return (year + 1, 1) if month == 12 else (year, month + 1)


def parse_month_arguments(arg: str) -> List[Month]:
    """Parse a single month, a ``start:end`` range, or a comma-separated list."""

    parts = [p.strip() for p in arg.split(",") if p.strip()]
    if not parts:
        raise ValueError("月の指定が空です")

    months: List[Month] = []
    for part in parts:
        if ":" in part:
            start_str, end_str = part.split(":", 1)
            current, end = _parse_month(start_str), _parse_month(end_str)
            if end < current:
                raise ValueError(f"範囲 {part} の終了月が開始月より前です")
            while current <= end:
                months.append(current)
                current = _next_month(*current)
        else:
            months.append(_parse_month(part))

    # Drop duplicates, keep input order.
    seen = set()
    ordered: List[Month] = []
    for month in months:
        if month not in seen:
            ordered.append(month)
            seen.add(month)
    return ordered


def month_rows(year: int, month: int, utc_offset_hours: float, anchor: str) -> List[str]:
    """One formatted line per civil day of *year*/*month*."""

    rows: List[str] = []
    day = date(year, month, 1)
    while day.month == month:
        # Local noon keeps the instant inside the civil day for any offset.
        instant = datetime(day.year, day.month, day.day, 12, tzinfo=UTC) - timedelta(
            hours=utc_offset_hours
        )
        lunar = lunar_date(instant, utc_offset_hours, anchor)
        entry = rokuyo_from_lunar_date(lunar)
        rows.append(
            f"{day.isoformat()} ({WEEKDAYS[day.weekday()]})  "
            f"旧暦 {lunar.month:>2}/{lunar.day:<2}  {entry.name} {entry.romanization}"
        )
        day += timedelta(days=1)
    return rows


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Print lunar dates and Rokuyo by month")
    parser.add_argument("months", nargs="?", default=None, help="YYYY-MM, range or list")
    parser.add_argument("--offset", type=float, default=None, help="UTC offset in hours")
    parser.add_argument("--anchor", choices=USUI_ANCHORS, default=None, help="usui anchor")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    ns = build_parser().parse_args(argv)
    settings = load_settings()
    offset = settings.utc_offset_hours if ns.offset is None else ns.offset
    anchor = ns.anchor or settings.usui_anchor

    if ns.months is None:
        now = datetime.now(UTC) + timedelta(hours=offset)
        months = [(now.year, now.month)]
    else:
        try:
            months = parse_month_arguments(ns.months)
        except ValueError as exc:
            print(f"引数が不正です: {exc}", file=sys.stderr)
            return 1

    for idx, (year, month) in enumerate(months):
        if idx:
            print("\n" + "=" * 72 + "\n")
        print(f"{year}年{month}月  (UTC{offset:+g})")
        print("-" * 72)
        try:
            rows = month_rows(year, month, offset, anchor)
        except (ValueError, AlmanacError) as exc:
            print(f"計算に失敗しました: {exc}", file=sys.stderr)
            return 1
        for row in rows:
            print(row)
    return 0


if __name__ == "__main__":
    sys.exit(main())
