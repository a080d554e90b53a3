"""Data model definitions — explicit boundaries between input, compute, and render layers."""

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


@dataclass(frozen=True)
class QueryInput:
    """Raw user input. Not yet validated."""

    address: str | None = None  # Free-form address, geocoded when lat/lng are absent
    lat: float | None = None  # Latitude (decimal degrees)
    lng: float | None = None  # Longitude (decimal degrees)
    name: str | None = None  # Display name for the wallpaper header
    region: str | None = None  # Secondary header line


@dataclass(frozen=True)
class ObserverContext:
    """Resolved location. Input to weather and solunar computation."""

    lat: float  # Latitude (decimal degrees)
    lng: float  # Longitude (decimal degrees)
    tz_name: str  # IANA timezone ("Europe/Paris")
    name: str  # Header line
    region: str  # Sub-header line (may be empty)


@dataclass(frozen=True)
class AstroDay:
    """Sun and moon data for one local day, as supplied by an astronomical provider."""

    sunrise: datetime | None  # None during polar day/night
    sunset: datetime | None
    moon_fraction: float  # Illuminated fraction of the disk (0-1)
    moon_phase: float  # Phase fraction (0 = new, 0.5 = full)
    moonrise: datetime | None  # None when the moon is circumpolar or never rises
    moonset: datetime | None
    moon_altitude: Callable[[datetime], float]  # Apparent altitude (degrees) at any instant


@dataclass(frozen=True)
class MoonSnapshot:
    phase: float  # 0-1 (0 = new moon, 0.5 = full moon)
    phase_name: str
    illumination: int  # Percentage 0-100
    rise: datetime | None
    set: datetime | None


@dataclass(frozen=True)
class SunSnapshot:
    rise: datetime | None
    set: datetime | None


@dataclass(frozen=True)
class Period:
    """A solunar activity window. Major: transit/nadir. Minor: moonrise/moonset."""

    start: datetime
    end: datetime
    kind: str  # "transit", "nadir", "moonrise" or "moonset"

    @property
    def is_major(self) -> bool:
        return self.kind in ("transit", "nadir")


@dataclass(frozen=True)
class SolunarSnapshot:
    moon: MoonSnapshot
    sun: SunSnapshot
    major: tuple[Period, ...]  # Chronological by start
    minor: tuple[Period, ...]  # Chronological by start


@dataclass(frozen=True)
class GoldenHours:
    morning_start: datetime  # Sunrise
    morning_end: datetime  # Sunrise + 2h
    evening_start: datetime  # Sunset - 2h
    evening_end: datetime  # Sunset


@dataclass(frozen=True)
class NextPeriod:
    period: Period
    status: str  # "ongoing" or "upcoming"


class PressureTrend(str, Enum):
    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


@dataclass(frozen=True)
class CurrentWeather:
    temperature: float  # °C
    feels_like: float  # °C
    wind_speed: float  # km/h
    wind_direction: float  # Degrees the wind blows from
    wind_gusts: float  # km/h
    pressure: float  # hPa, mean sea level
    cloud_cover: float  # %
    precipitation: float  # mm
    weather_code: int  # WMO code


@dataclass(frozen=True)
class HourlyForecast:
    time: datetime  # Local time of the slot
    temperature: float
    precipitation_probability: float
    precipitation: float  # mm
    wind_speed: float  # km/h
    wind_gusts: float  # km/h
    wind_direction: float
    weather_code: int


@dataclass(frozen=True)
class WeatherSnapshot:
    current: CurrentWeather
    hourly: tuple[HourlyForecast, ...]  # Next hours after the current one
    pressure_trend: PressureTrend | str  # Unrecognized strings are tolerated by the scorer
    water_temperature: float | None = None  # °C, marine API only


@dataclass(frozen=True)
class Adjustment:
    """One fired scoring rule."""

    kind: str  # "pressure", "solunar", "golden_hour", "wind" or "cloud"
    delta: int
    label: str


@dataclass(frozen=True)
class ActivityResult:
    score: int  # 0-5
    label: str  # "Excellent", "Very good", ...
    main_factor: str  # Label of the first rule that fired
    color: str  # Hex color of the label
    is_golden_hour: bool
    adjustments: tuple[Adjustment, ...] = ()


@dataclass(frozen=True)
class WallpaperData:
    """The sole input to renderers. Fully computed state."""

    context: ObserverContext
    now: datetime  # Aware, in the location's timezone
    weather: WeatherSnapshot
    solunar: SolunarSnapshot
    activity: ActivityResult
