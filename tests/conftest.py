"""Pytest configuration and fixtures shared across all test modules.

Environment variables are set before any ``portal`` import so that the
settings object is built for the test run.
"""

import os

# CRITICAL: Set these before any imports that might load settings
os.environ["APP_ENV"] = "testing"
os.environ.setdefault("APP_API_KEY_REQUIRED", "true")
os.environ.setdefault("APP_API_KEYS", "test-api-key-123,test-api-key-456")
os.environ.setdefault("APP_BACKEND_MODE", "memory")
os.environ.setdefault("APP_RATE_LIMIT_MAX_REQUESTS", "1000")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from fastapi.testclient import TestClient

from portal.adapters.data_access.factory import reset_data_access
from portal.core.rate_limit import reset_rate_limiter


@pytest.fixture(autouse=True)
def _fresh_state():
    """Every test starts with empty stores and empty rate limit windows."""
    reset_data_access()
    reset_rate_limiter()
    yield
    reset_data_access()
    reset_rate_limiter()


@pytest.fixture
def app():
    from portal.core.app_factory import create_app

    return create_app()


@pytest.fixture
def client(app) -> TestClient:
    return TestClient(app)


@pytest.fixture
def api_key_headers() -> dict[str, str]:
    return {"X-API-Key": "test-api-key-123"}
