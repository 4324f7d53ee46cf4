"""
Tests for the HTTP routes.
"""

import struct
from datetime import datetime, UTC
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from watchcache.main import app
from watchcache.models.responses import RefreshStatus
from watchcache.models.weather import DailyForecast, Forecast, WeatherSnapshot
from watchcache.services.snapshot_store import SnapshotStore
from watchcache.utils.dependencies import get_refresh_scheduler, get_snapshot_store


@pytest.fixture
def client_for():
    """Build a TestClient serving the given store and scheduler."""

    def build(store, scheduler=None):
        app.dependency_overrides[get_snapshot_store] = lambda: store
        app.dependency_overrides[get_refresh_scheduler] = lambda: scheduler
        return TestClient(app)

    yield build
    app.dependency_overrides.clear()


def far_future_snapshot(refreshed_at=None):
    """Snapshot whose hourly entries are all still upcoming."""
    start = int(datetime.now(UTC).timestamp()) + 3600
    return WeatherSnapshot(
        current=Forecast(timestamp=start - 3600, temperature=5.0, humidity=60.0, condition_code=600),
        hourly=tuple(Forecast(timestamp=start + i * 3600, condition_code=700 + i) for i in range(6)),
        daily=tuple(DailyForecast(timestamp=start + i * 86400) for i in range(2)),
        refreshed_at=refreshed_at,
    )


class TestWatchUpdate:
    """Test cases for GET /wu."""

    def test_returns_binary_payload(self, client_for):
        client = client_for(SnapshotStore(far_future_snapshot()))

        response = client.get("/wu")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/octet-stream"
        assert len(response.content) == 10 + 4 * 10 + 2 * 18
        assert response.content[:10] == struct.pack("<ffH", 5.0, 60.0, 600)
        assert struct.unpack_from("<ffH", response.content, 10)[2] == 700

    def test_serves_empty_snapshot_before_first_refresh(self, client_for):
        client = client_for(SnapshotStore())

        response = client.get("/wu")

        assert response.status_code == 200
        assert response.content == b"\x00" * 10

    def test_past_hours_are_dropped(self, client_for):
        snapshot = WeatherSnapshot(
            hourly=(Forecast(timestamp=1, condition_code=1), Forecast(timestamp=2, condition_code=2))
        )
        client = client_for(SnapshotStore(snapshot))

        response = client.get("/wu")

        assert len(response.content) == 10

    def test_request_tracking_headers(self, client_for):
        client = client_for(SnapshotStore())

        response = client.get("/wu")

        assert response.headers["X-Request-ID"].startswith("req_")
        assert "X-Process-Time" in response.headers


class TestHealth:
    """Test cases for GET /health."""

    def test_starting_before_first_refresh(self, client_for):
        client = client_for(SnapshotStore())

        response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "starting"
        assert body["snapshot"]["refreshed_at"] is None
        assert body["snapshot"]["hourly_entries"] == 0
        assert body["refresh"]["running"] is False

    def test_healthy_after_refresh(self, client_for):
        refreshed_at = datetime.now(UTC)
        scheduler = MagicMock()
        scheduler.status.return_value = RefreshStatus(
            running=True, total_ticks=3, failed_ticks=1, last_kind="current", last_error=None
        )
        client = client_for(SnapshotStore(far_future_snapshot(refreshed_at)), scheduler)

        response = client.get("/health")

        body = response.json()
        assert body["status"] == "healthy"
        assert body["snapshot"]["refreshed_at"] == refreshed_at.isoformat()
        assert body["snapshot"]["hourly_entries"] == 6
        assert body["snapshot"]["daily_entries"] == 2
        assert body["refresh"]["total_ticks"] == 3
        assert body["refresh"]["failed_ticks"] == 1
        assert body["refresh"]["last_kind"] == "current"
