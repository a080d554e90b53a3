"""Pipeline layer — geocoding, timezone lookup, and the weather/solunar/activity run."""

import logging
from dataclasses import replace
from datetime import datetime

import httpx
from pytz import timezone, utc
from timezonefinder import TimezoneFinder

from pikewall.activity import compute_activity
from pikewall.astronomy import AstronomicalProvider
from pikewall.config import DEFAULT_HTTP_TIMEOUT
from pikewall.models import ObserverContext, QueryInput, WallpaperData
from pikewall.solunar import compute_solunar
from pikewall.weather import fetch_water_temperature, fetch_weather

logger = logging.getLogger(__name__)

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"
_USER_AGENT = "PikeWall/1.0 (lock-screen fishing wallpaper)"

_tf = TimezoneFinder()


class GeocodingError(Exception):
    """Geocoder call failure or unusable location."""


def geocode_address(
    address: str,
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
) -> tuple[float, float, str]:
    """Nominatim (OpenStreetMap) geocoder.

    Returns:
        (lat, lng, display_name) of the best match.

    Raises:
        GeocodingError: On HTTP failure or when nothing matches.
    """
    params = {"q": address, "format": "json", "limit": 1}
    http = client or httpx.Client(timeout=timeout)
    try:
        resp = http.get(NOMINATIM_URL, params=params, headers={"User-Agent": _USER_AGENT})
        resp.raise_for_status()
        results = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise GeocodingError(f"Nominatim error: {exc}") from exc
    finally:
        if client is None:
            http.close()
    if not results:
        raise GeocodingError(f"Address not found: {address}")
    r = results[0]
    return float(r["lat"]), float(r["lon"]), r["display_name"]


def resolve_context(
    query: QueryInput, client: httpx.Client | None = None
) -> ObserverContext:
    """Resolve a QueryInput to coordinates, timezone and header labels.

    Explicit coordinates win over the address. (0, 0) is treated as "no
    location given".

    Raises:
        GeocodingError: When no usable location can be determined.
    """
    name = query.name
    region = query.region or ""

    if query.lat is not None and query.lng is not None:
        lat, lng = query.lat, query.lng
    elif query.address:
        lat, lng, display = geocode_address(query.address, client=client)
        if name is None:
            name, _, rest = display.partition(",")
            region = region or rest.strip()
    else:
        raise GeocodingError("Either lat/lon or an address is required")

    if lat == 0 and lng == 0:
        raise GeocodingError("Either lat/lon or an address is required")
    if not (-90 <= lat <= 90 and -180 <= lng <= 180):
        raise GeocodingError(f"Coordinates out of range: lat={lat}, lng={lng}")

    tz_str = _tf.timezone_at(lat=lat, lng=lng)
    if tz_str is None:
        raise GeocodingError(f"Timezone not found: lat={lat}, lng={lng}")

    return ObserverContext(
        lat=lat, lng=lng, tz_name=tz_str, name=name or "Position", region=region
    )


def run(
    query: QueryInput,
    now: datetime | None = None,
    provider: AstronomicalProvider | None = None,
    client: httpx.Client | None = None,
) -> WallpaperData:
    """Top-level entry point: takes a QueryInput and returns a WallpaperData.

    Args:
        query: User input (coordinates or address, header labels).
        now: Instant to compute for. Defaults to the current time. Naive values
            are read as local time at the location.
        provider: Astronomical data source, skyfield when None.
        client: Shared HTTP client for geocoding and weather calls.

    Returns:
        Fully computed WallpaperData.

    Raises:
        GeocodingError: When the location cannot be resolved.
        WeatherError: When the forecast cannot be fetched.
    """
    context = resolve_context(query, client=client)
    local_tz = timezone(context.tz_name)
    if now is None:
        now = datetime.now(utc).astimezone(local_tz)
    elif now.tzinfo is None:
        now = local_tz.localize(now)
    else:
        now = now.astimezone(local_tz)

    weather = fetch_weather(context.lat, context.lng, now, client=client)
    water = fetch_water_temperature(context.lat, context.lng, client=client)
    if water is not None:
        weather = replace(weather, water_temperature=water)

    solunar = compute_solunar(context.lat, context.lng, now, provider=provider)
    activity = compute_activity(weather, solunar, now)
    logger.debug(
        "%s: score=%s (%s), pressure=%s",
        context.name, activity.score, activity.main_factor, weather.pressure_trend,
    )

    return WallpaperData(
        context=context, now=now, weather=weather, solunar=solunar, activity=activity
    )
