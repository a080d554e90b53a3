"""Shared fixtures: synthetic astronomy and weather builders, no network or ephemeris."""

from datetime import datetime, timedelta

import pytest
from pytz import timezone

from pikewall.models import (
    AstroDay,
    CurrentWeather,
    HourlyForecast,
    MoonSnapshot,
    Period,
    PressureTrend,
    SolunarSnapshot,
    SunSnapshot,
    WeatherSnapshot,
)

PARIS = timezone("Europe/Paris")


def at(hour: int, minute: int = 0, second: int = 0, day: int = 15) -> datetime:
    """Aware Paris instant on 2024-06-<day>."""
    return PARIS.localize(datetime(2024, 6, day, hour, minute, second))


def synthetic_provider(
    transit: datetime | None,
    moonrise: datetime | None = None,
    moonset: datetime | None = None,
    sunrise: datetime | None = None,
    sunset: datetime | None = None,
    fraction: float = 0.5,
    phase: float = 0.25,
):
    """Astronomical provider whose moon altitude peaks exactly at `transit`.

    With transit=None the altitude is NaN everywhere, so no maximum exists.
    """

    def altitude(instant: datetime) -> float:
        if transit is None:
            return float("nan")
        return 60.0 - abs((instant - transit).total_seconds()) / 600

    def provider(lat: float, lng: float, when: datetime) -> AstroDay:
        return AstroDay(
            sunrise=sunrise,
            sunset=sunset,
            moon_fraction=fraction,
            moon_phase=phase,
            moonrise=moonrise,
            moonset=moonset,
            moon_altitude=altitude,
        )

    return provider


@pytest.fixture
def make_weather():
    def _make(
        trend=PressureTrend.STABLE,
        wind_speed: float = 25.0,
        cloud_cover: float = 50.0,
        pressure: float = 1015.0,
    ) -> WeatherSnapshot:
        current = CurrentWeather(
            temperature=16.0,
            feels_like=14.5,
            wind_speed=wind_speed,
            wind_direction=225.0,
            wind_gusts=wind_speed + 10,
            pressure=pressure,
            cloud_cover=cloud_cover,
            precipitation=0.0,
            weather_code=3,
        )
        hourly = tuple(
            HourlyForecast(
                time=at(13 + i),
                temperature=17.0 + i,
                precipitation_probability=10.0 * i,
                precipitation=0.2 * i,
                wind_speed=12.0,
                wind_gusts=20.0,
                wind_direction=270.0,
                weather_code=61 if i else 2,
            )
            for i in range(3)
        )
        return WeatherSnapshot(current=current, hourly=hourly, pressure_trend=trend)

    return _make


@pytest.fixture
def make_solunar():
    def _make(
        major: tuple[Period, ...] = (),
        minor: tuple[Period, ...] = (),
        sunrise: datetime | None = None,
        sunset: datetime | None = None,
        polar: bool = False,
    ) -> SolunarSnapshot:
        moon = MoonSnapshot(
            phase=0.5, phase_name="Full Moon", illumination=100, rise=None, set=None
        )
        return SolunarSnapshot(
            moon=moon,
            sun=SunSnapshot(rise=None, set=None)
            if polar
            else SunSnapshot(rise=sunrise or at(6), set=sunset or at(21)),
            major=major,
            minor=minor,
        )

    return _make


def window(center: datetime, minutes: int, kind: str) -> Period:
    half = timedelta(minutes=minutes / 2)
    return Period(start=center - half, end=center + half, kind=kind)


def forecast_payload(pressures: list[float] | None = None) -> dict:
    """Open-Meteo forecast response for 2024-06-15, Europe/Paris."""
    times = [f"2024-06-15T{h:02d}:00" for h in range(24)]
    pressures = pressures or [1010.0 + 0.5 * h for h in range(24)]
    return {
        "timezone": "Europe/Paris",
        "current": {
            "time": "2024-06-15T10:15",
            "temperature_2m": 18.4,
            "apparent_temperature": 17.1,
            "wind_speed_10m": 14.0,
            "wind_direction_10m": 250,
            "wind_gusts_10m": 27.0,
            "pressure_msl": pressures[10],
            "cloud_cover": 85,
            "precipitation": 0.0,
            "weather_code": 3,
        },
        "hourly": {
            "time": times,
            "temperature_2m": [12.0 + 0.5 * h for h in range(24)],
            "precipitation_probability": [5 * (h % 4) for h in range(24)],
            "precipitation": [0.1 * (h % 3) for h in range(24)],
            "wind_speed_10m": [10.0] * 24,
            "wind_gusts_10m": [20.0] * 24,
            "wind_direction_10m": [240] * 24,
            "weather_code": [61] * 24,
            "pressure_msl": pressures,
        },
    }
