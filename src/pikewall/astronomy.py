"""Astronomical provider — sun and moon events from the skyfield ephemeris."""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta
from functools import lru_cache

from skyfield import almanac
from skyfield.api import Loader, wgs84

from pikewall import config
from pikewall.helpers import start_of_day
from pikewall.models import AstroDay

logger = logging.getLogger(__name__)

# Any callable with this signature can stand in for the skyfield provider.
AstronomicalProvider = Callable[[float, float, datetime], AstroDay]

_SUN_HORIZON_DEGREES = -0.8333  # Refraction + solar semi-diameter


@lru_cache(maxsize=1)
def _load():
    """Load the timescale and DE421 ephemeris once, caching files under resources/."""
    loader = Loader(str(config.RESOURCES_DIR))
    logger.debug("Loading de421.bsp from %s", config.RESOURCES_DIR)
    return loader.timescale(), loader("de421.bsp")


def _first_event(finder, observer, body, t0, t1, tz, **kwargs) -> datetime | None:
    """First real horizon crossing in [t0, t1), or None.

    skyfield flags grazing results (body never actually crossing the horizon)
    with False; those are discarded.
    """
    times, flags = finder(observer, body, t0, t1, **kwargs)
    for t, real in zip(times, flags):
        if real:
            return t.astimezone(tz)
    return None


def skyfield_provider(lat: float, lng: float, when: datetime) -> AstroDay:
    """Compute sun and moon data for the local day containing `when`.

    Args:
        lat: Latitude (decimal degrees).
        lng: Longitude (decimal degrees).
        when: Timezone-aware reference instant. Moon phase and illumination are
            taken at this instant; rise/set events are searched from local
            midnight over the following 24 hours.

    Returns:
        AstroDay. Events that do not happen that day (polar sun, circumpolar
        moon) are None.
    """
    ts, eph = _load()
    tz = when.tzinfo
    earth, sun, moon = eph["earth"], eph["sun"], eph["moon"]
    observer = earth + wgs84.latlon(latitude_degrees=lat, longitude_degrees=lng)

    day_start = start_of_day(when)
    t0 = ts.from_datetime(day_start)
    t1 = ts.from_datetime(day_start + timedelta(days=1))
    t_now = ts.from_datetime(when)

    sunrise = _first_event(
        almanac.find_risings, observer, sun, t0, t1, tz,
        horizon_degrees=_SUN_HORIZON_DEGREES,
    )
    sunset = _first_event(
        almanac.find_settings, observer, sun, t0, t1, tz,
        horizon_degrees=_SUN_HORIZON_DEGREES,
    )
    moonrise = _first_event(almanac.find_risings, observer, moon, t0, t1, tz)
    moonset = _first_event(almanac.find_settings, observer, moon, t0, t1, tz)

    if sunrise is None or sunset is None:
        logger.debug("No sunrise/sunset at lat=%s lng=%s on %s", lat, lng, day_start.date())

    def moon_altitude(instant: datetime) -> float:
        alt, _, _ = observer.at(ts.from_datetime(instant)).observe(moon).apparent().altaz()
        return float(alt.degrees)

    return AstroDay(
        sunrise=sunrise,
        sunset=sunset,
        moon_fraction=float(almanac.fraction_illuminated(eph, "moon", t_now)),
        moon_phase=float(almanac.moon_phase(eph, t_now).degrees) / 360.0,
        moonrise=moonrise,
        moonset=moonset,
        moon_altitude=moon_altitude,
    )
