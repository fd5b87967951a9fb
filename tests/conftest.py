"""Pytest fixtures for JCI Connect tests."""

import logging
from datetime import datetime, timezone

import pytest

from jci_connect.config import ZoomConfig
from jci_connect.models import Category, Meeting
from jci_connect.storage import SqliteMeetingStore
from jci_connect.timezone import AppClock

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

APP_TZ = "Asia/Kuala_Lumpur"

# Monday 2025-03-10 09:15 in Kuala Lumpur (UTC+8)
FIXED_NOW = datetime(2025, 3, 10, 1, 15, tzinfo=timezone.utc)

CONFIG_ENV_VARS = [
    "USE_ZOOM_API",
    "ZOOM_ACCOUNT_ID",
    "ZOOM_CLIENT_ID",
    "ZOOM_CLIENT_SECRET",
    "ZOOM_TIMEZONE",
    "ZOOM_REGISTRATION_TYPE",
    "STORAGE_BACKEND",
    "SQLITE_PATH",
    "POSTGRES_HOST",
    "POSTGRES_PORT",
    "POSTGRES_DATABASE",
    "POSTGRES_USER",
    "POSTGRES_PASSWORD",
    "GEMINI_API_KEY",
    "API_KEY",
    "APP_TIMEZONE",
    "WEB_HOST",
    "WEB_PORT",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Remove configuration environment variables for the duration of a test."""
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def clock():
    """App clock pinned to Monday 2025-03-10 09:15 Kuala Lumpur time."""
    return AppClock(APP_TZ, now_fn=lambda: FIXED_NOW)


@pytest.fixture
def make_meeting():
    """Factory for meetings with sensible defaults."""

    def _make(meeting_id: str = "m1", **overrides) -> Meeting:
        values = {
            "id": meeting_id,
            "title": f"Meeting {meeting_id}",
            "date": "2025-03-10",
            "start_time": "09:00",
            "duration_minutes": 60,
            "category": Category.PROJECT,
        }
        values.update(overrides)
        return Meeting(**values)

    return _make


@pytest.fixture
def sample_meetings(make_meeting):
    """A small week of meetings around the pinned clock."""
    return [
        make_meeting("board", title="Board sync", start_time="09:00", category=Category.BOARD),
        make_meeting(
            "training",
            title="Public speaking",
            date="2025-03-12",
            start_time="19:30",
            duration_minutes=90,
            category=Category.TRAINING,
        ),
        make_meeting(
            "social",
            title="Networking night",
            date="2025-03-16",
            start_time="20:00",
            category=Category.SOCIAL,
        ),
        make_meeting("past", title="Kickoff", date="2025-03-03", start_time="08:00"),
    ]


@pytest.fixture
def sqlite_store(tmp_path):
    """Initialized SQLite meeting store in a temporary directory."""
    store = SqliteMeetingStore(str(tmp_path / "meetings.db"))
    store.initialize()
    return store


@pytest.fixture
def zoom_config():
    """Zoom configuration with complete (fake) credentials."""
    return ZoomConfig(
        enabled=True,
        account_id="acct-123",
        client_id="client-id",
        client_secret="client-secret",
        timezone=APP_TZ,
    )
