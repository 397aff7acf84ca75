"""Pytest configuration and fixtures."""

import os

import pytest

# Set test environment
os.environ["APP_ENV"] = "development"
os.environ["DEBUG_ENABLED"] = "false"

from unlock_automation.config import Settings  # noqa: E402
from unlock_automation.errors import SessionOpenError  # noqa: E402

from tests.fakes import (  # noqa: E402
    STATUS_URL,
    UNLOCK_URL,
    FakePortalPage,
    FakeSessionManager,
    build_status_portal,
    build_unlock_portal,
)


@pytest.fixture
def test_settings(tmp_path):
    """Settings pointed at the fake portal with tiny time budgets."""
    return Settings(
        unlock_url=UNLOCK_URL,
        status_url=STATUS_URL,
        selector_timeout=300,
        step_settle_ms=0,
        debug_enabled=False,
        screenshot_dir=str(tmp_path / "screenshots"),
        _env_file=None,
    )


@pytest.fixture
def unlock_portal():
    """Factory for fake unlock portals."""
    return build_unlock_portal


@pytest.fixture
def status_portal():
    """Factory for fake status portals."""
    return build_status_portal


@pytest.fixture
def fake_sessions():
    """Factory for session managers serving a given page."""

    def _create(page: FakePortalPage | None = None, open_error: Exception | None = None):
        return FakeSessionManager(page, open_error=open_error)

    return _create


@pytest.fixture
def failing_sessions():
    """Session manager whose page can never be opened."""
    return FakeSessionManager(open_error=SessionOpenError("Failed to open browser page: boom"))


@pytest.fixture
def sample_submission_data():
    """Valid unlock request without a carrier number."""
    return {
        "imei": "353012345678901",
        "first_name": "Juan",
        "last_name": "Pérez",
        "email": "juan@example.com",
    }
