"""Tests for the Open-Meteo layer: pressure trend, hour lookup, payload mapping."""

from datetime import datetime

import httpx
import pytest
from conftest import at, forecast_payload
from pytz import utc

from pikewall.models import PressureTrend
from pikewall.weather import (
    WeatherError,
    fetch_water_temperature,
    fetch_weather,
    find_current_hour_index,
    parse_forecast,
    pressure_trend,
)


# ---------------------------------------------------------------------------
# Pressure trend
# ---------------------------------------------------------------------------
class TestPressureTrend:
    HISTORY = [1012.0, 1011.0, 1010.0, 1009.5, 1010.0]

    def test_rising(self):
        assert pressure_trend(1012.5, self.HISTORY, 4) == PressureTrend.RISING

    def test_falling(self):
        assert pressure_trend(1009.0, self.HISTORY, 3) == PressureTrend.FALLING

    def test_exactly_one_hpa_is_stable(self):
        assert pressure_trend(1012.0, self.HISTORY, 4) == PressureTrend.STABLE
        assert pressure_trend(1010.0, self.HISTORY, 4) == PressureTrend.STABLE

    def test_insufficient_history_is_stable(self):
        assert pressure_trend(1030.0, self.HISTORY, 2) == PressureTrend.STABLE
        assert pressure_trend(1030.0, [], 0) == PressureTrend.STABLE

    def test_missing_sample_is_stable(self):
        assert pressure_trend(1030.0, [None, 1010.0, 1010.0, 1010.0], 3) == PressureTrend.STABLE
        assert pressure_trend(1030.0, [0.0, 1010.0, 1010.0, 1010.0], 3) == PressureTrend.STABLE

    def test_index_past_history_is_stable(self):
        assert pressure_trend(1030.0, [1000.0], 10) == PressureTrend.STABLE


# ---------------------------------------------------------------------------
# Payload mapping
# ---------------------------------------------------------------------------
class TestParseForecast:
    def test_current_hour_index(self):
        times = ["2024-06-15T09:00", "2024-06-15T10:00", "2024-06-15T11:00"]
        assert find_current_hour_index(times, at(10, 42)) == 1
        assert find_current_hour_index(times, at(20)) == 0

    def test_maps_payload(self):
        snapshot = parse_forecast(forecast_payload(), at(10, 20))

        assert snapshot.current.temperature == 18.4
        assert snapshot.current.cloud_cover == 85
        assert snapshot.current.weather_code == 3
        assert [h.time.hour for h in snapshot.hourly] == [11, 12, 13]
        assert snapshot.hourly[0].temperature == 17.5
        assert snapshot.hourly[0].time == at(11)
        # 1015.0 now vs 1013.5 three hours earlier
        assert snapshot.pressure_trend == PressureTrend.RISING
        assert snapshot.water_temperature is None

    def test_now_converted_to_payload_timezone(self):
        """08:20 UTC is 10:20 in Paris in June."""
        now = utc.localize(datetime(2024, 6, 15, 8, 20))
        snapshot = parse_forecast(forecast_payload(), now)
        assert snapshot.hourly[0].time.hour == 11

    def test_forecast_truncated_at_end_of_series(self):
        snapshot = parse_forecast(forecast_payload(), at(22, 10))
        assert [h.time.hour for h in snapshot.hourly] == [23]

    def test_falling_pressure(self):
        pressures = [1020.0 - 0.6 * h for h in range(24)]
        snapshot = parse_forecast(forecast_payload(pressures), at(10))
        assert snapshot.pressure_trend == PressureTrend.FALLING

    def test_missing_field_raises(self):
        payload = forecast_payload()
        del payload["current"]["pressure_msl"]
        with pytest.raises(WeatherError):
            parse_forecast(payload, at(10))


# ---------------------------------------------------------------------------
# HTTP clients
# ---------------------------------------------------------------------------
class TestFetch:
    def test_fetch_weather(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen.update(request.url.params)
            return httpx.Response(200, json=forecast_payload())

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            snapshot = fetch_weather(48.85, 2.35, at(10, 5), client=client)

        assert seen["timezone"] == "auto"
        assert "pressure_msl" in seen["hourly"]
        assert seen["latitude"] == "48.85"
        assert snapshot.current.wind_speed == 14.0

    def test_http_error_wrapped(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(500))
        with httpx.Client(transport=transport) as client:
            with pytest.raises(WeatherError) as excinfo:
                fetch_weather(48.85, 2.35, at(10), client=client)
        assert isinstance(excinfo.value.__cause__, httpx.HTTPStatusError)

    def test_water_temperature(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"current": {"water_temperature": 14.2}})
        )
        with httpx.Client(transport=transport) as client:
            assert fetch_water_temperature(43.3, 5.4, client=client) == 14.2

    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(400, json={"error": True, "reason": "No data"}),
            httpx.Response(200, json={"current": {"water_temperature": None}}),
            httpx.Response(200, json={}),
            httpx.Response(200, text="not json"),
        ],
    )
    def test_water_temperature_unavailable(self, response):
        transport = httpx.MockTransport(lambda request: response)
        with httpx.Client(transport=transport) as client:
            assert fetch_water_temperature(45.9, 6.1, client=client) is None

    def test_water_temperature_network_error(self):
        def handler(request):
            raise httpx.ConnectError("unreachable", request=request)

        with httpx.Client(transport=httpx.MockTransport(handler)) as client:
            assert fetch_water_temperature(45.9, 6.1, client=client) is None
