"""Pike activity index — weather and solunar factors scored on a 0-5 scale.

Rules run in a fixed order from a neutral base of 2. Every fired rule adds its
delta to the score, but only the first one names the main factor, so the order
of ``_RULES`` is part of the result.
"""

import math
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from datetime import datetime

from pikewall.helpers import golden_hours
from pikewall.models import (
    ActivityResult,
    Adjustment,
    Period,
    PressureTrend,
    SolunarSnapshot,
    WeatherSnapshot,
)

BASE_SCORE = 2
MIN_SCORE = 0
MAX_SCORE = 5
NEUTRAL_FACTOR = "Neutral conditions"

# Indexed by clamped score
SCORE_TABLE: tuple[tuple[str, str], ...] = (
    ("Poor", "#dc2626"),
    ("Low", "#ef4444"),
    ("Medium", "#f97316"),
    ("Good", "#fbbf24"),
    ("Very good", "#84cc16"),
    ("Excellent", "#22c55e"),
)

_PRESSURE_RULES: dict[str, tuple[int, str]] = {
    PressureTrend.STABLE.value: (2, "Stable pressure"),
    PressureTrend.RISING.value: (1, "Rising pressure"),
    PressureTrend.FALLING.value: (-1, "Falling pressure"),
}


@dataclass(frozen=True)
class _Inputs:
    weather: WeatherSnapshot
    solunar: SolunarSnapshot
    now: datetime


def minutes_until_period(
    periods: Sequence[Period], now: datetime
) -> tuple[float, bool]:
    """(whole minutes until the next period, whether one is ongoing).

    The first period in order that is ongoing or still ahead decides; finished
    periods are skipped. Returns (inf, False) when none is left.
    """
    for period in periods:
        if period.start <= now <= period.end:
            return 0, True
        if period.start > now:
            return math.floor((period.start - now).total_seconds() / 60), False
    return math.inf, False


def golden_hour_type(
    now: datetime, sunrise: datetime | None, sunset: datetime | None
) -> str | None:
    """Which golden hour `now` falls in: "morning", "evening" or None.

    Morning is checked first and wins if both windows match.
    """
    if sunrise is None or sunset is None:
        return None
    windows = golden_hours(sunrise, sunset)
    if windows.morning_start <= now <= windows.morning_end:
        return "morning"
    if windows.evening_start <= now <= windows.evening_end:
        return "evening"
    return None


def _pressure_rule(inputs: _Inputs) -> Adjustment | None:
    trend = inputs.weather.pressure_trend
    key = trend.value if isinstance(trend, PressureTrend) else trend
    if key not in _PRESSURE_RULES:
        return None
    delta, label = _PRESSURE_RULES[key]
    return Adjustment(kind="pressure", delta=delta, label=label)


def _solunar_rule(inputs: _Inputs) -> Adjustment | None:
    major_minutes, major_ongoing = minutes_until_period(inputs.solunar.major, inputs.now)
    if major_ongoing or major_minutes <= 30:
        return Adjustment(kind="solunar", delta=2, label="Major period")
    if major_minutes <= 120:
        return Adjustment(kind="solunar", delta=1, label="Major period approaching")

    minor_minutes, minor_ongoing = minutes_until_period(inputs.solunar.minor, inputs.now)
    if minor_ongoing or minor_minutes <= 30:
        return Adjustment(kind="solunar", delta=1, label="Minor period")
    return None


def _golden_hour_rule(inputs: _Inputs) -> Adjustment | None:
    sun = inputs.solunar.sun
    kind = golden_hour_type(inputs.now, sun.rise, sun.set)
    if kind == "morning":
        return Adjustment(kind="golden_hour", delta=1, label="Morning golden hour")
    if kind == "evening":
        return Adjustment(kind="golden_hour", delta=1, label="Evening golden hour")
    return None


def _wind_rule(inputs: _Inputs) -> Adjustment | None:
    speed = inputs.weather.current.wind_speed
    if 8 <= speed <= 20:
        return Adjustment(kind="wind", delta=1, label="Favorable wind")
    if speed > 30:
        return Adjustment(kind="wind", delta=-1, label="Wind too strong")
    return None


def _cloud_rule(inputs: _Inputs) -> Adjustment | None:
    if inputs.weather.current.cloud_cover > 70:
        return Adjustment(kind="cloud", delta=1, label="Overcast")
    return None


_RULES: tuple[Callable[[_Inputs], Adjustment | None], ...] = (
    _pressure_rule,
    _solunar_rule,
    _golden_hour_rule,
    _wind_rule,
    _cloud_rule,
)


def compute_activity(
    weather: WeatherSnapshot, solunar: SolunarSnapshot, now: datetime
) -> ActivityResult:
    """Score pike activity for the instant `now`.

    Args:
        weather: Current conditions with a precomputed pressure trend.
        solunar: Solunar snapshot for the day of `now`.
        now: Timezone-aware instant the score applies to.

    Returns:
        ActivityResult with the clamped score, its label and color, the first
        contributing factor and every rule that fired.
    """
    inputs = _Inputs(weather=weather, solunar=solunar, now=now)
    adjustments = tuple(
        adjustment for adjustment in (rule(inputs) for rule in _RULES) if adjustment is not None
    )

    raw = BASE_SCORE + sum(a.delta for a in adjustments)
    score = max(MIN_SCORE, min(MAX_SCORE, raw))
    label, color = SCORE_TABLE[score]

    return ActivityResult(
        score=score,
        label=label,
        main_factor=adjustments[0].label if adjustments else NEUTRAL_FACTOR,
        color=color,
        is_golden_hour=any(a.kind == "golden_hour" for a in adjustments),
        adjustments=adjustments,
    )
