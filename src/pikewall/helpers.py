"""Presentation helpers — period lookup, countdowns, and arrow/emoji mappings."""

import math
from collections.abc import Sequence
from datetime import datetime, timedelta

from pikewall.models import GoldenHours, NextPeriod, Period, PressureTrend

GOLDEN_HOUR = timedelta(hours=2)

# Wind-from convention: a north wind (0°) blows toward the south, hence ↓.
_WIND_ARROWS = ("↓", "↙", "←", "↖", "↑", "↗", "→", "↘")

_PRESSURE_ARROWS = {
    PressureTrend.RISING.value: "↗",
    PressureTrend.FALLING.value: "↘",
    PressureTrend.STABLE.value: "→",
}


def start_of_day(when: datetime) -> datetime:
    """Local midnight of the calendar day containing `when`, same timezone."""
    midnight = when.replace(hour=0, minute=0, second=0, microsecond=0)
    tz = when.tzinfo
    if hasattr(tz, "localize"):
        # pytz zones carry one fixed offset per instance; re-localize for DST days
        midnight = tz.localize(midnight.replace(tzinfo=None))
    return midnight


def next_period(periods: Sequence[Period], now: datetime) -> NextPeriod | None:
    """Return the first ongoing period, else the first upcoming one.

    Periods are scanned in order and the scan stops at the first match, so the
    sequence must be chronological. Returns None when every period is over.
    """
    for period in periods:
        if period.start <= now <= period.end:
            return NextPeriod(period=period, status="ongoing")
        if period.start > now:
            return NextPeriod(period=period, status="upcoming")
    return None


def format_countdown(now: datetime, target: datetime) -> str:
    """Human countdown such as "in 2h15", "in 45min", "in 3h", or "past"."""
    diff = target - now
    if diff < timedelta(0):
        return "past"

    total_minutes = math.floor(diff.total_seconds() / 60)
    hours, minutes = divmod(total_minutes, 60)

    if hours == 0:
        return f"in {minutes}min"
    if minutes == 0:
        return f"in {hours}h"
    return f"in {hours}h{minutes:02d}"


def format_time(dt: datetime) -> str:
    """Clock time as "14h30", or "14h" on the hour."""
    if dt.minute == 0:
        return f"{dt.hour}h"
    return f"{dt.hour}h{dt.minute:02d}"


def format_hour(dt: datetime) -> str:
    return f"{dt.hour}h"


def format_period(upcoming: NextPeriod | None, now: datetime) -> tuple[str, str]:
    """(start time, countdown) pair for a solunar period line."""
    if upcoming is None:
        return "—", ""
    start = format_time(upcoming.period.start)
    if upcoming.status == "ongoing":
        return start, "Ongoing"
    return start, format_countdown(now, upcoming.period.start)


def golden_hours(sunrise: datetime, sunset: datetime) -> GoldenHours:
    """Morning window [sunrise, sunrise+2h] and evening window [sunset-2h, sunset]."""
    return GoldenHours(
        morning_start=sunrise,
        morning_end=sunrise + GOLDEN_HOUR,
        evening_start=sunset - GOLDEN_HOUR,
        evening_end=sunset,
    )


def wind_arrow(degrees: float) -> str:
    """Arrow for a meteorological wind direction.

    Arrow k covers [45k - 45°, 45k°) with k taken modulo 8: [315°, 360°) shows ↓,
    [0°, 45°) shows ↙, [90°, 135°) shows ↖, and so on.
    """
    normalized = degrees % 360
    index = math.floor((normalized + 22.5) / 45 + 0.5) % 8
    return _WIND_ARROWS[index]


def pressure_trend_arrow(trend: PressureTrend | str) -> str:
    value = trend.value if isinstance(trend, PressureTrend) else trend
    return _PRESSURE_ARROWS.get(value, "→")


def weather_emoji(code: int) -> str:
    """WMO weather code (Open-Meteo) to emoji."""
    if code == 0:
        return "☀️"
    if code == 1:
        return "🌤"
    if code == 2:
        return "⛅"
    if code == 3:
        return "☁️"
    if code in (45, 48):
        return "🌫"
    # Drizzle, freezing drizzle, rain, freezing rain
    if 51 <= code <= 57 or 61 <= code <= 67:
        return "🌧"
    # Snow fall and snow grains
    if 71 <= code <= 75 or code == 77:
        return "🌨"
    if 80 <= code <= 82:
        return "🌧"
    if code in (85, 86):
        return "🌨"
    if code in (95, 96, 99):
        return "⛈"
    return "☁️"
