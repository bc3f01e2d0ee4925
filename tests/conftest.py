"""Pytest configuration and shared fixtures."""

import pytest
from fastapi.testclient import TestClient

from pdfqr.core.config import Settings
from pdfqr.main import create_app


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock(start=1000.0)


@pytest.fixture
def config():
    """Settings isolated from the developer's .env file."""
    return Settings(
        _env_file=None,
        ENV="test",
        ACCESS_PASSWORD="",
        ARTIFACT_SINK="local",
        ARTIFACT_RETENTION_LIMIT=3,
        MAX_UPLOAD_MB=4,
        MAX_CHUNK_MB=1,
        SESSION_TTL_SECONDS=900,
        PUBLIC_BASE_URL="",
    )


@pytest.fixture
def app(config):
    """Fresh application with its own stores for each test."""
    return create_app(config)


@pytest.fixture
def client(app):
    """Create test client."""
    return TestClient(app)
