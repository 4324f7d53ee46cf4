"""
Common test fixtures and configuration.
"""

import pytest

from watchcache.models.weather import DailyForecast, Forecast, WeatherSnapshot
from watchcache.services.snapshot_store import SnapshotStore


@pytest.fixture
def current_document():
    """Body of the current conditions endpoint."""
    return {
        "coord": {"lon": -111.6585, "lat": 40.2338},
        "weather": [{"id": 800, "main": "Clear", "description": "clear sky"}],
        "main": {"temp": 21.5, "feels_like": 20.9, "humidity": 34},
        "dt": 1700000000,
        "name": "Provo",
    }


@pytest.fixture
def onecall_document():
    """Body of the one-call endpoint with 6 hourly and 3 daily entries."""
    start = 1700000000
    return {
        "lat": 40.2338,
        "lon": -111.6585,
        "current": {
            "dt": start,
            "temp": 18.25,
            "humidity": 40,
            "weather": [{"id": 801}],
        },
        "hourly": [
            {
                "dt": start + hour * 3600,
                "temp": 18.0 + hour,
                "humidity": 40 + hour,
                "weather": [{"id": 800 + hour}],
            }
            for hour in range(6)
        ],
        "daily": [
            {
                "dt": start + day * 86400,
                "temp": {"day": 20.0 + day, "min": 10.0 + day, "max": 25.0 + day},
                "humidity": 30 + day,
                "weather": [{"id": 500 + day}],
            }
            for day in range(3)
        ],
    }


@pytest.fixture
def populated_snapshot():
    """A snapshot that looks like it came from a full refresh."""
    return WeatherSnapshot(
        current=Forecast(timestamp=1000, temperature=15.0, humidity=50.0, condition_code=800),
        hourly=tuple(
            Forecast(timestamp=1000 + i * 3600, temperature=15.0 + i, humidity=50.0, condition_code=800)
            for i in range(3)
        ),
        daily=(
            DailyForecast(
                timestamp=1000,
                temperature=17.0,
                temp_min=9.0,
                temp_max=22.0,
                humidity=45.0,
                condition_code=500,
            ),
        ),
    )


@pytest.fixture
def store():
    """Empty snapshot store."""
    return SnapshotStore()
