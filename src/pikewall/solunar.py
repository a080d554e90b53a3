"""Solunar engine — moon phase naming, lunar transit search, and major/minor activity periods."""

import math
from collections.abc import Callable
from datetime import datetime, timedelta

from pikewall.astronomy import AstronomicalProvider, skyfield_provider
from pikewall.helpers import start_of_day
from pikewall.models import MoonSnapshot, Period, SolunarSnapshot, SunSnapshot

MAJOR_WINDOW = timedelta(minutes=120)
MINOR_WINDOW = timedelta(minutes=60)
NADIR_OFFSET = timedelta(hours=12)

_COARSE_STEP_MINUTES = 10
_REFINE_SPAN_MINUTES = 10

# Upper bounds (exclusive) of each phase sector; everything from 0.9375 wraps back to new moon.
_PHASE_SECTORS: tuple[tuple[float, str], ...] = (
    (0.0625, "New Moon"),
    (0.1875, "Waxing Crescent"),
    (0.3125, "First Quarter"),
    (0.4375, "Waxing Gibbous"),
    (0.5625, "Full Moon"),
    (0.6875, "Waning Gibbous"),
    (0.8125, "Last Quarter"),
    (0.9375, "Waning Crescent"),
)


def moon_phase_name(phase: float) -> str:
    """Map a phase fraction (0 = new, 0.5 = full) to one of eight phase names.

    The phase is wrapped into [0, 1) first, so 1.25 and -0.75 both read as
    First Quarter.
    """
    normalized = phase % 1.0
    for upper, name in _PHASE_SECTORS:
        if normalized < upper:
            return name
    return "New Moon"


def find_transit(
    day_start: datetime, altitude: Callable[[datetime], float]
) -> datetime | None:
    """Locate the instant of maximum lunar altitude within one day.

    Samples the whole day every 10 minutes, then re-samples every minute over
    ±10 minutes around the best coarse sample. Comparisons are strict, so the
    first sample reaching the maximum wins.

    Args:
        day_start: Local midnight of the reference day.
        altitude: Altitude sampler in degrees, callable at any instant.

    Returns:
        The transit instant, or None when no sample was comparable
        (e.g. the sampler only produced NaN).
    """
    best = -math.inf
    transit: datetime | None = None
    for minutes in range(0, 24 * 60, _COARSE_STEP_MINUTES):
        instant = day_start + timedelta(minutes=minutes)
        value = altitude(instant)
        if value > best:
            best = value
            transit = instant

    if transit is None:
        return None

    best = -math.inf
    refined = transit
    for offset in range(-_REFINE_SPAN_MINUTES, _REFINE_SPAN_MINUTES + 1):
        instant = transit + timedelta(minutes=offset)
        value = altitude(instant)
        if value > best:
            best = value
            refined = instant
    return refined


def centered_window(center: datetime, duration: timedelta, kind: str) -> Period:
    half = duration / 2
    return Period(start=center - half, end=center + half, kind=kind)


def major_periods(transit: datetime | None) -> tuple[Period, ...]:
    """Two-hour windows around the transit and the nadir (transit + 12h)."""
    if transit is None:
        return ()
    periods = (
        centered_window(transit, MAJOR_WINDOW, "transit"),
        centered_window(transit + NADIR_OFFSET, MAJOR_WINDOW, "nadir"),
    )
    return _chronological(periods)


def minor_periods(
    moonrise: datetime | None, moonset: datetime | None
) -> tuple[Period, ...]:
    """One-hour windows around moonrise and moonset, for whichever occur."""
    periods: list[Period] = []
    if moonrise is not None:
        periods.append(centered_window(moonrise, MINOR_WINDOW, "moonrise"))
    if moonset is not None:
        periods.append(centered_window(moonset, MINOR_WINDOW, "moonset"))
    return _chronological(periods)


def _chronological(periods) -> tuple[Period, ...]:
    # sorted() is stable: equal starts keep transit/nadir, moonrise/moonset order
    return tuple(sorted(periods, key=lambda p: p.start))


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_solunar(
    lat: float,
    lng: float,
    when: datetime,
    provider: AstronomicalProvider | None = None,
) -> SolunarSnapshot:
    """Compute moon, sun and solunar periods for the local day containing `when`.

    Args:
        lat: Latitude (decimal degrees).
        lng: Longitude (decimal degrees).
        when: Timezone-aware reference instant; its local calendar day is used.
        provider: Astronomical data source. Defaults to the skyfield provider.

    Returns:
        SolunarSnapshot. Missing astronomical events (polar sun, circumpolar
        moon, no transit) show up as None fields and empty period tuples.
    """
    astro = (provider or skyfield_provider)(lat, lng, when)

    moon = MoonSnapshot(
        phase=astro.moon_phase,
        phase_name=moon_phase_name(astro.moon_phase),
        illumination=_round_half_up(astro.moon_fraction * 100),
        rise=astro.moonrise,
        set=astro.moonset,
    )
    sun = SunSnapshot(rise=astro.sunrise, set=astro.sunset)

    transit = find_transit(start_of_day(when), astro.moon_altitude)

    return SolunarSnapshot(
        moon=moon,
        sun=sun,
        major=major_periods(transit),
        minor=minor_periods(astro.moonrise, astro.moonset),
    )
