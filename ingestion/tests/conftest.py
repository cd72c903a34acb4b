"""Pytest configuration and shared fixtures."""

import asyncio
from typing import Any, Dict, List, Optional, Tuple

import pytest
from fastapi.testclient import TestClient

from dtconn_relay.config import Settings, get_settings
from dtconn_relay.errors import UpstreamInsertError
from dtconn_relay.main import app
from dtconn_relay.models import WarehouseRow
from dtconn_relay.validators import compute_signature
from dtconn_relay.warehouse import get_warehouse

SECRET = "test-signing-secret"

ENV = {
    "PROJECT_ID": "test-project",
    "DATASET": "monitoring",
    "TABLE": "events",
    "SIGNATURE": SECRET,
}


class FakeWarehouse:
    """Records every insert instead of calling BigQuery."""

    def __init__(self, fail: bool = False, delay: float = 0.0):
        self.fail = fail
        self.delay = delay
        self.calls: List[Tuple[WarehouseRow, str]] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    async def insert_row(self, row: WarehouseRow, insert_id: str) -> None:
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.fail:
                raise UpstreamInsertError("insert rejected")
            self.calls.append((row, insert_id))
        finally:
            self.in_flight -= 1


def make_body(event_id: str = "evt-1", **overrides: Any) -> Dict[str, Any]:
    """Build a valid POST /dtconn body."""
    event = {
        "eventId": event_id,
        "targetName": "checkout-service",
        "eventType": "PROBLEM_OPEN",
        "timestamp": "2024-05-01T12:00:00Z",
        "data": {"n": 1},
    }
    event.update(overrides.pop("event", {}))
    body = {"event": event, "labels": {"env": "prod"}}
    body.update(overrides)
    return body


def signed_headers(secret: str = SECRET, claims: Optional[Dict[str, Any]] = None) -> Dict[str, str]:
    return {"x-dt-signature": compute_signature(secret, claims)}


@pytest.fixture
def settings() -> Settings:
    """Create test configuration."""
    return Settings(
        project_id=ENV["PROJECT_ID"],
        dataset=ENV["DATASET"],
        table=ENV["TABLE"],
        signature=SECRET,
    )


@pytest.fixture
def relay_env(monkeypatch):
    """Expose test configuration through the environment."""
    for key, value in ENV.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    yield ENV
    get_settings.cache_clear()


@pytest.fixture
def fake_warehouse() -> FakeWarehouse:
    return FakeWarehouse()


@pytest.fixture
def override_dependencies(settings, fake_warehouse):
    """Swap settings and the warehouse for the app's dependencies."""
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_warehouse] = lambda: fake_warehouse
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def client(override_dependencies) -> TestClient:
    # Not entered as a context manager, so the lifespan (real BigQuery) never runs
    return TestClient(app)
