"""Pytest configuration and fixtures for HomeWizard Cleaner tests."""

from unittest.mock import AsyncMock, Mock

import httpx
import pytest

from custom_components.homewizard_cleaner.models import CleanerDevice

from .helpers import DEVICE_ENDPOINT


@pytest.fixture
def sample_device() -> CleanerDevice:
    """Fixture providing a paired cleaner."""
    return CleanerDevice(
        identifier="abc123",
        name="Living Room Cleaner",
        endpoint=DEVICE_ENDPOINT,
    )


@pytest.fixture
def mock_session() -> Mock:
    """Create a mock HTTP session."""
    return Mock(spec=httpx.AsyncClient)


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    return Mock()


@pytest.fixture
def mock_config_entry() -> Mock:
    """Create a config entry with scheduled polling disabled.

    Tests drive polls themselves through async_refresh.
    """
    entry = Mock()
    entry.entry_id = "entry1"
    entry.pref_disable_polling = True
    return entry


@pytest.fixture
def mock_credentials() -> Mock:
    """Create credentials with an email and password."""
    credentials = Mock()
    credentials.email = "test@example.com"
    credentials.password = "password123"
    return credentials


@pytest.fixture
def mock_storage() -> Mock:
    """Create an empty per-device store."""
    storage = Mock()
    storage.async_load = AsyncMock(return_value=None)
    storage.async_delay_save = Mock()
    return storage


@pytest.fixture
def sample_token_response() -> dict:
    """Fixture providing a sample token exchange response."""
    return {"token": "T1"}


@pytest.fixture
def sample_devices_response() -> dict:
    """Fixture providing a sample device listing with one cleaner.

    Returns:
        A dictionary representing a devices API response.

    """
    return {
        "devices": [
            {
                "type": "cleaner",
                "name": "Living Room Cleaner",
                "identifier": "abc123",
                "endpoint": DEVICE_ENDPOINT,
            },
            {
                "type": "watermeter",
                "name": "Water Meter",
                "identifier": "wm1",
                "endpoint": "https://example.com/wm1",
            },
        ],
    }


@pytest.fixture
def sample_status_response() -> dict:
    """Fixture providing a sample status response."""
    return {"battery_percentage": 80, "status": "charging"}
