"""Tests for the PNG renderer and the command-line entry point."""

import pytest
from conftest import at, window

from pikewall import wallpaper
from pikewall.activity import compute_activity
from pikewall.compute import GeocodingError
from pikewall.models import ObserverContext, WallpaperData
from pikewall.renderers.static import save_wallpaper
from pikewall.weather import WeatherError

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"


@pytest.fixture
def wallpaper_data(make_weather, make_solunar):
    def _make(polar: bool = False) -> WallpaperData:
        now = at(10, 20)
        weather = make_weather(wind_speed=14, cloud_cover=85)
        solunar = make_solunar(
            major=(window(at(10, 30), 120, "transit"), window(at(22, 30), 120, "nadir")),
            minor=(window(at(16), 60, "moonrise"),),
            polar=polar,
        )
        return WallpaperData(
            context=ObserverContext(
                lat=48.8566, lng=2.3522, tz_name="Europe/Paris", name="Paris", region="Seine"
            ),
            now=now,
            weather=weather,
            solunar=solunar,
            activity=compute_activity(weather, solunar, now),
        )

    return _make


class TestRenderer:
    def test_writes_png(self, wallpaper_data, tmp_path):
        path = save_wallpaper(wallpaper_data(), tmp_path / "out" / "paris.png")
        assert path.exists()
        assert path.read_bytes()[:8] == PNG_MAGIC

    def test_polar_day_renders(self, wallpaper_data, tmp_path):
        path = save_wallpaper(wallpaper_data(polar=True), tmp_path / "polar.png")
        assert path.read_bytes()[:8] == PNG_MAGIC


class TestCli:
    @pytest.fixture(autouse=True)
    def _clean_env(self, monkeypatch):
        for key in (
            "PIKEWALL_LAT", "PIKEWALL_LON", "PIKEWALL_NAME", "PIKEWALL_REGION", "PIKEWALL_HTTP_TIMEOUT"
        ):
            monkeypatch.delenv(key, raising=False)
        monkeypatch.setattr(wallpaper, "load_dotenv", lambda: None)

    def test_renders_to_output(self, wallpaper_data, tmp_path, monkeypatch, capsys):
        seen = {}

        def fake_run(query, now=None, client=None):
            seen["query"] = query
            return wallpaper_data()

        monkeypatch.setattr(wallpaper, "run", fake_run)
        output = tmp_path / "wall.png"
        code = wallpaper.main(["--lat", "45.9", "--lon", "6.13", "--name", "Annecy", "--output", str(output)])

        assert code == 0
        assert output.exists()
        assert f"Saved: {output}" in capsys.readouterr().out
        assert (seen["query"].lat, seen["query"].lng, seen["query"].name) == (45.9, 6.13, "Annecy")

    def test_location_defaults_from_environment(self, wallpaper_data, tmp_path, monkeypatch):
        monkeypatch.setenv("PIKEWALL_LAT", "47.2")
        monkeypatch.setenv("PIKEWALL_LON", "-1.55")
        monkeypatch.setenv("PIKEWALL_NAME", "Nantes")
        seen = {}

        def fake_run(query, now=None, client=None):
            seen["query"] = query
            return wallpaper_data()

        monkeypatch.setattr(wallpaper, "run", fake_run)
        assert wallpaper.main(["--output", str(tmp_path / "w.png")]) == 0
        assert (seen["query"].lat, seen["query"].lng, seen["query"].name) == (47.2, -1.55, "Nantes")

    def test_location_error_exit_code(self, monkeypatch):
        def fake_run(query, now=None, client=None):
            raise GeocodingError("Either lat/lon or an address is required")

        monkeypatch.setattr(wallpaper, "run", fake_run)
        assert wallpaper.main([]) == 2

    def test_weather_error_exit_code(self, monkeypatch):
        def fake_run(query, now=None, client=None):
            raise WeatherError("Weather fetch failed")

        monkeypatch.setattr(wallpaper, "run", fake_run)
        assert wallpaper.main(["--lat", "45.9", "--lon", "6.13"]) == 1

    def test_bad_numeric_setting(self, monkeypatch):
        monkeypatch.setenv("PIKEWALL_HTTP_TIMEOUT", "soon")
        assert wallpaper.main([]) == 2
