"""Project paths and environment-driven settings.

Entry points call ``load_dotenv()`` before ``load_settings()`` so a local
``.env`` can provide the defaults below.
"""

import os
from dataclasses import dataclass
from pathlib import Path

_ROOT = Path(__file__).parent.parent.parent
RESOURCES_DIR = _ROOT / "resources"  # skyfield ephemeris cache
RESULTS_DIR = _ROOT / "results"  # default wallpaper output folder

DEFAULT_HTTP_TIMEOUT = 10.0


@dataclass(frozen=True)
class Settings:
    lat: float | None  # Default location when the CLI gets none
    lng: float | None
    name: str
    region: str
    http_timeout: float  # Seconds, for Open-Meteo and Nominatim


def _float_env(key: str) -> float | None:
    raw = os.environ.get(key, "").strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be a number, got {raw!r}") from exc


def load_settings() -> Settings:
    """Read PIKEWALL_* environment variables into a Settings object.

    Raises:
        ValueError: When a numeric variable does not parse.
    """
    timeout = _float_env("PIKEWALL_HTTP_TIMEOUT")
    return Settings(
        lat=_float_env("PIKEWALL_LAT"),
        lng=_float_env("PIKEWALL_LON"),
        name=os.environ.get("PIKEWALL_NAME", ""),
        region=os.environ.get("PIKEWALL_REGION", ""),
        http_timeout=timeout if timeout is not None else DEFAULT_HTTP_TIMEOUT,
    )
