"""Shared test fixtures."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from yt2samp.app import app


@pytest.fixture
def coordinator() -> MagicMock:
    """Stand-in PipelineCoordinator installed on app.state (lifespan does not run)."""
    mock = MagicMock()
    app.state.coordinator = mock
    yield mock
    del app.state.coordinator


@pytest.fixture
def client() -> TestClient:
    """Create a TestClient for the FastAPI app."""
    return TestClient(app)


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()
