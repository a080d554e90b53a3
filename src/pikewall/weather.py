"""Weather layer — Open-Meteo forecast and marine clients, pressure trend classification."""

import logging
from collections.abc import Sequence
from datetime import datetime

import httpx
from pytz import timezone

from pikewall.config import DEFAULT_HTTP_TIMEOUT
from pikewall.models import CurrentWeather, HourlyForecast, PressureTrend, WeatherSnapshot

logger = logging.getLogger(__name__)

FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
MARINE_URL = "https://marine-api.open-meteo.com/v1/marine"

PRESSURE_THRESHOLD_HPA = 1.0
PRESSURE_LOOKBACK_HOURS = 3
FORECAST_HOURS = 3

_CURRENT_FIELDS = (
    "temperature_2m",
    "apparent_temperature",
    "wind_speed_10m",
    "wind_direction_10m",
    "wind_gusts_10m",
    "pressure_msl",
    "cloud_cover",
    "precipitation",
    "weather_code",
)
_HOURLY_FIELDS = (
    "temperature_2m",
    "precipitation_probability",
    "precipitation",
    "wind_speed_10m",
    "wind_gusts_10m",
    "wind_direction_10m",
    "weather_code",
    "pressure_msl",  # Pressure trend history
)


class WeatherError(Exception):
    """Weather provider call failure."""


def pressure_trend(
    current: float, history: Sequence[float | None], current_index: int
) -> PressureTrend:
    """Classify the pressure change over the last three hourly samples.

    Args:
        current: Current mean sea level pressure (hPa).
        history: Hourly pressure series the current index points into.
        current_index: Index of the current hour in `history`.

    Returns:
        RISING above +1 hPa, FALLING below -1 hPa, STABLE otherwise. Missing
        history (index out of range, null or zero sample) is STABLE.
    """
    past_index = current_index - PRESSURE_LOOKBACK_HOURS
    if past_index < 0 or past_index >= len(history) or not history[past_index]:
        return PressureTrend.STABLE

    difference = current - history[past_index]
    if difference > PRESSURE_THRESHOLD_HPA:
        return PressureTrend.RISING
    if difference < -PRESSURE_THRESHOLD_HPA:
        return PressureTrend.FALLING
    return PressureTrend.STABLE


def find_current_hour_index(times: Sequence[str], now: datetime) -> int:
    """Index of the hourly slot for the current hour, 0 if absent.

    `times` are Open-Meteo local ISO strings ("2024-01-15T14:00"); `now` must
    already be in the same timezone.
    """
    prefix = now.strftime("%Y-%m-%dT%H")
    for index, value in enumerate(times):
        if value.startswith(prefix):
            return index
    return 0


def _parse_hourly(hourly: dict, index: int, tz) -> HourlyForecast:
    return HourlyForecast(
        time=tz.localize(datetime.fromisoformat(hourly["time"][index])),
        temperature=hourly["temperature_2m"][index],
        precipitation_probability=hourly["precipitation_probability"][index] or 0,
        precipitation=hourly["precipitation"][index] or 0.0,
        wind_speed=hourly["wind_speed_10m"][index],
        wind_gusts=hourly["wind_gusts_10m"][index],
        wind_direction=hourly["wind_direction_10m"][index],
        weather_code=int(hourly["weather_code"][index]),
    )


def parse_forecast(data: dict, now: datetime) -> WeatherSnapshot:
    """Turn an Open-Meteo forecast payload into a WeatherSnapshot.

    Args:
        data: Decoded JSON response (requested with timezone=auto).
        now: Current instant, any timezone.

    Returns:
        WeatherSnapshot with the next three hourly slots and the pressure trend.

    Raises:
        WeatherError: When the payload lacks an expected field.
    """
    try:
        tz = timezone(data.get("timezone", "UTC"))
        current = data["current"]
        hourly = data["hourly"]
        times = hourly["time"]
        index = find_current_hour_index(times, now.astimezone(tz))

        forecasts = tuple(
            _parse_hourly(hourly, i, tz)
            for i in range(index + 1, index + 1 + FORECAST_HOURS)
            if i < len(times)
        )

        return WeatherSnapshot(
            current=CurrentWeather(
                temperature=current["temperature_2m"],
                feels_like=current["apparent_temperature"],
                wind_speed=current["wind_speed_10m"],
                wind_direction=current["wind_direction_10m"],
                wind_gusts=current["wind_gusts_10m"],
                pressure=current["pressure_msl"],
                cloud_cover=current["cloud_cover"],
                precipitation=current["precipitation"],
                weather_code=int(current["weather_code"]),
            ),
            hourly=forecasts,
            pressure_trend=pressure_trend(
                current["pressure_msl"], hourly["pressure_msl"], index
            ),
        )
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise WeatherError(f"Unexpected Open-Meteo payload: {exc!r}") from exc


def fetch_weather(
    lat: float,
    lng: float,
    now: datetime,
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
) -> WeatherSnapshot:
    """Fetch current conditions and the short-term forecast from Open-Meteo.

    Raises:
        WeatherError: On HTTP failure or an unexpected payload.
    """
    params = {
        "latitude": lat,
        "longitude": lng,
        "current": ",".join(_CURRENT_FIELDS),
        "hourly": ",".join(_HOURLY_FIELDS),
        "timezone": "auto",
    }
    http = client or httpx.Client(timeout=timeout)
    try:
        logger.debug("Fetching Open-Meteo forecast for lat=%s lng=%s", lat, lng)
        resp = http.get(FORECAST_URL, params=params)
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        raise WeatherError(f"Weather fetch failed: {exc}") from exc
    finally:
        if client is None:
            http.close()
    return parse_forecast(data, now)


def fetch_water_temperature(
    lat: float,
    lng: float,
    client: httpx.Client | None = None,
    timeout: float = DEFAULT_HTTP_TIMEOUT,
) -> float | None:
    """Water temperature (°C) from the Open-Meteo marine API.

    Returns None when the marine model has no value for the location (inland
    lakes) or the call fails.
    """
    params = {"latitude": lat, "longitude": lng, "current": "water_temperature"}
    http = client or httpx.Client(timeout=timeout)
    try:
        resp = http.get(MARINE_URL, params=params)
        if resp.is_error:
            logger.debug("Marine API returned %s for lat=%s lng=%s", resp.status_code, lat, lng)
            return None
        value = (resp.json().get("current") or {}).get("water_temperature")
    except (httpx.HTTPError, ValueError, AttributeError) as exc:
        logger.debug("Marine API unavailable: %s", exc)
        return None
    finally:
        if client is None:
            http.close()
    return float(value) if value is not None else None
