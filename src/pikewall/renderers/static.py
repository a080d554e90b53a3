"""Matplotlib static PNG renderer for the lock-screen wallpaper."""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.colors import LinearSegmentedColormap
from matplotlib.figure import Figure
from matplotlib.lines import Line2D
from matplotlib.patches import Circle, Wedge

from pikewall.config import RESULTS_DIR
from pikewall.helpers import (
    format_hour,
    format_period,
    format_time,
    golden_hours,
    next_period,
    pressure_trend_arrow,
    weather_emoji,
    wind_arrow,
)
from pikewall.models import WallpaperData

# iPhone 15 Pro Max lock screen
WIDTH_PX = 1290
HEIGHT_PX = 2796
_DPI = 100

# Top of the screen is left free for the system clock; the layout ends above the bottom 7%
_SAFE_TOP = 0.25
_LEFT = 0.08
_RIGHT = 0.92

_FONT = "DejaVu Sans Mono"
_BG = LinearSegmentedColormap.from_list(
    "pikewall_bg", ["#0d1926", "#0f1d2f", "#0a1628", "#0d1b2a"]
)
_TEXT = "#fcfcfc"
_TEXT_SECONDARY = "#d0d0d0"
_TEXT_MUTED = "#94a3b8"
_TEXT_DIM = "#64748b"
_ACCENT_BLUE = "#7dd3fc"
_ACCENT_YELLOW = "#fbbf24"
_DIVIDER = "#1e293b"
_MOON_DARK = "#1e293b"
_MOON_LIGHT = "#e2e8f0"


def _section(fig: Figure, y: float, title: str) -> None:
    fig.text(_LEFT, y, title, color=_TEXT_MUTED, fontsize=30, fontweight="bold", family=_FONT)
    fig.add_artist(
        Line2D([_LEFT + 0.22, _RIGHT], [y + 0.004, y + 0.004], color=_DIVIDER, linewidth=2)
    )


def _text(fig: Figure, x: float, y: float, s: str, size: int, color: str = _TEXT, **kwargs):
    fig.text(x, y, s, color=color, fontsize=size, family=_FONT, **kwargs)


def _draw_moon(fig: Figure, x: float, y: float, illumination: int) -> None:
    """Moon disk with a lit wedge proportional to the illumination."""
    ax = fig.add_axes((x, y, 0.1, 0.1 * WIDTH_PX / HEIGHT_PX))
    ax.set_xlim(-1, 1)
    ax.set_ylim(-1, 1)
    ax.axis("off")
    ax.add_patch(Circle((0, 0), 0.95, color=_MOON_DARK))
    if illumination >= 100:
        ax.add_patch(Circle((0, 0), 0.95, color=_MOON_LIGHT))
    elif illumination > 0:
        ax.add_patch(Wedge((0, 0), 0.95, 90, 90 + 360 * illumination / 100, color=_MOON_LIGHT))


def render_wallpaper(data: WallpaperData) -> Figure:
    """Render WallpaperData as a lock-screen sized matplotlib figure.

    Args:
        data: Fully computed weather, solunar and activity data.

    Returns:
        matplotlib Figure object.
    """
    fig = plt.figure(figsize=(WIDTH_PX / _DPI, HEIGHT_PX / _DPI), dpi=_DPI)

    bg = fig.add_axes((0, 0, 1, 1))
    gradient = np.linspace(0, 1, 256).reshape(-1, 1)
    bg.imshow(gradient, aspect="auto", cmap=_BG, extent=(0, 1, 0, 1))
    bg.axis("off")

    ctx, now = data.context, data.now
    weather, solunar, activity = data.weather, data.solunar, data.activity
    current = weather.current

    y = 1 - _SAFE_TOP
    _text(fig, _LEFT, y, ctx.name.upper(), 52, fontweight="bold")
    if ctx.region:
        _text(fig, _LEFT, y - 0.022, ctx.region, 30, _TEXT_MUTED)

    # Current conditions
    y -= 0.075
    _text(fig, _LEFT, y, f"{current.temperature:.0f}°", 120, fontweight="bold")
    _text(fig, _LEFT + 0.36, y + 0.02, weather_emoji(current.weather_code), 80)
    _text(fig, _LEFT + 0.55, y + 0.03, f"feels {current.feels_like:.0f}°", 32, _TEXT_SECONDARY)
    if weather.water_temperature is not None:
        _text(fig, _LEFT + 0.55, y + 0.008, f"water {weather.water_temperature:.0f}°", 32, _ACCENT_BLUE)

    y -= 0.035
    _text(
        fig, _LEFT, y,
        f"{wind_arrow(current.wind_direction)} {current.wind_speed:.0f} km/h"
        f"  gusts {current.wind_gusts:.0f}",
        32, _TEXT_SECONDARY,
    )
    y -= 0.022
    _text(
        fig, _LEFT, y,
        f"{current.pressure:.0f} hPa {pressure_trend_arrow(weather.pressure_trend)}"
        f"   clouds {current.cloud_cover:.0f}%",
        32, _TEXT_SECONDARY,
    )

    # Next hours
    y -= 0.045
    _section(fig, y, "NEXT HOURS")
    y -= 0.035
    column = (_RIGHT - _LEFT) / 3
    for i, hour in enumerate(weather.hourly):
        x = _LEFT + i * column
        _text(fig, x, y, format_hour(hour.time), 30, _TEXT_MUTED)
        _text(fig, x, y - 0.022, f"{weather_emoji(hour.weather_code)} {hour.temperature:.0f}°", 36)
        rain = f"{hour.precipitation_probability:.0f}%  {hour.precipitation:.1f}mm"
        _text(fig, x, y - 0.042, rain, 24, _TEXT_DIM)

    # Moon
    y -= 0.08
    _section(fig, y, "MOON")
    y -= 0.045
    moon = solunar.moon
    _draw_moon(fig, _LEFT, y - 0.012, moon.illumination)
    _text(fig, _LEFT + 0.14, y + 0.02, moon.phase_name, 36)
    rise = format_time(moon.rise) if moon.rise else "—"
    moonset = format_time(moon.set) if moon.set else "—"
    _text(fig, _LEFT + 0.14, y - 0.005, f"{moon.illumination}%  ↑ {rise}  ↓ {moonset}", 28, _TEXT_MUTED)

    # Solunar
    y -= 0.06
    _section(fig, y, "SOLUNAR")
    for label, periods in (("Major", solunar.major), ("Minor", solunar.minor)):
        y -= 0.03
        start, countdown = format_period(next_period(periods, now), now)
        _text(fig, _LEFT, y, label, 32, _TEXT_MUTED)
        _text(fig, _LEFT + 0.25, y, start, 36)
        _text(fig, _LEFT + 0.5, y, countdown, 32, _ACCENT_BLUE)

    # Sun
    y -= 0.055
    _section(fig, y, "SUN")
    y -= 0.03
    sun = solunar.sun
    if sun.rise is not None and sun.set is not None:
        windows = golden_hours(sun.rise, sun.set)
        _text(fig, _LEFT, y, f"↑ {format_time(sun.rise)}   ↓ {format_time(sun.set)}", 32)
        _text(
            fig, _LEFT, y - 0.024,
            f"golden {format_time(windows.morning_start)}-{format_time(windows.morning_end)}"
            f"  {format_time(windows.evening_start)}-{format_time(windows.evening_end)}",
            26, _ACCENT_YELLOW,
        )
    else:
        _text(fig, _LEFT, y, "no sunrise / sunset today", 30, _TEXT_MUTED)

    # Pike activity
    y -= 0.06
    _section(fig, y, "PIKE ACTIVITY")
    y -= 0.04
    stars = "●" * activity.score + "○" * (5 - activity.score)
    _text(fig, _LEFT, y, stars, 48, activity.color)
    _text(fig, _LEFT + 0.4, y + 0.004, activity.label, 40, activity.color, fontweight="bold")
    golden = "  ✦ golden hour" if activity.is_golden_hour else ""
    _text(fig, _LEFT, y - 0.026, f"{activity.main_factor}{golden}", 28, _TEXT_SECONDARY)

    return fig


def save_wallpaper(data: WallpaperData, output_path: Path | None = None) -> Path:
    """Save WallpaperData as a PNG file.

    Args:
        data: Fully computed wallpaper data.
        output_path: Destination path. Auto-generated under results/ if None.

    Returns:
        Path to the saved file.
    """
    if output_path is None:
        when_str = data.now.strftime("%Y_%m_%d_%H_%M")
        filename = f"{data.context.name}__{when_str}.png".replace(" ", "_").replace("/", "_")
        output_path = RESULTS_DIR / filename

    output_path.parent.mkdir(parents=True, exist_ok=True)
    fig = render_wallpaper(data)
    fig.savefig(output_path, dpi=_DPI)
    plt.close(fig)
    return output_path
