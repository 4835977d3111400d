"""Shared fixtures: OpenWeather sample payloads and a scriptable provider."""
import threading

import pytest

from weather_provider import WeatherProviderBase

# 2024-05-24 00:00 UTC, i.e. 2024-05-23 19:00 at UTC-5
FORECAST_START = 1716508800
CHICAGO_OFFSET = -18000


def make_current(**overrides):
    """Sample OpenWeather /weather response (imperial units)."""
    data = {
        "coord": {"lon": -87.65, "lat": 41.85},
        "weather": [
            {
                "id": 803,
                "main": "Clouds",
                "description": "broken clouds",
                "icon": "04d"
            }
        ],
        "base": "stations",
        "main": {
            "temp": 68.4,
            "feels_like": 67.9,
            "pressure": 1014,
            "humidity": 64
        },
        "visibility": 10000,
        "wind": {"speed": 9.2, "deg": 220},
        "clouds": {"all": 75},
        "dt": FORECAST_START,
        "sys": {"country": "US"},
        "timezone": CHICAGO_OFFSET,
        "name": "Chicago",
        "cod": 200
    }
    data.update(overrides)
    return data


def make_forecast(count=40, start=FORECAST_START, timezone=CHICAGO_OFFSET):
    """Sample OpenWeather /forecast response: ``count`` steps, 3 hours apart."""
    steps = []
    for i in range(count):
        steps.append({
            "dt": start + i * 3 * 3600,
            "main": {"temp": 50.0 + i, "humidity": 40 + i},
            "weather": [{"main": "Rain" if i % 2 else "Clear", "description": f"step {i}", "icon": "10d"}],
            "wind": {"speed": 5.0 + i},
            "pop": (i % 5) / 10,
        })
    return {
        "cod": "200",
        "cnt": count,
        "list": steps,
        "city": {"name": "Chicago", "country": "US", "timezone": timezone},
    }


class FakeProvider(WeatherProviderBase):
    """In-memory provider that records calls and can be told to fail."""

    def __init__(self, current=None, forecast=None, error=None):
        self.current = current if current is not None else make_current()
        self.forecast = forecast if forecast is not None else make_forecast()
        self.error = error
        self.calls = []
        self._lock = threading.Lock()

    def _record(self, call):
        with self._lock:
            self.calls.append(call)
        if self.error is not None:
            raise self.error

    def get_current(self, lat, lon):
        self._record(("current", lat, lon))
        return self.current

    def get_current_by_postal_code(self, postal_code):
        self._record(("current_zip", postal_code))
        return self.current

    def get_forecast(self, lat, lon):
        self._record(("forecast", lat, lon))
        return self.forecast


class FakeClock:
    """Manually advanced replacement for time.time."""

    def __init__(self, now=1_700_000_000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def sample_current():
    return make_current()


@pytest.fixture
def sample_forecast():
    return make_forecast()


@pytest.fixture
def fake_provider():
    return FakeProvider()


@pytest.fixture
def clock():
    return FakeClock()
