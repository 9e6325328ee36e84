"""Tests for the HomeWizard Cleaner Config Flow."""

from collections.abc import Iterator
from unittest.mock import AsyncMock, Mock, patch

import pytest
from homeassistant.const import CONF_EMAIL, CONF_PASSWORD
from homeassistant.data_entry_flow import FlowResultType

from custom_components.homewizard_cleaner import api
from custom_components.homewizard_cleaner.config_flow import (
    HomeWizardCleanerConfigFlow,
)
from custom_components.homewizard_cleaner.const import (
    CONF_DEVICES,
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_UNKNOWN,
)
from custom_components.homewizard_cleaner.models import CleanerDevice

GET_CLIENT = "custom_components.homewizard_cleaner.config_flow.get_async_client"
GET_DEVICES = "custom_components.homewizard_cleaner.config_flow.api.async_get_devices"

USER_INPUT = {
    CONF_EMAIL: "Test@Example.com",
    CONF_PASSWORD: "password123",
}


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance."""
    return Mock()


@pytest.fixture
def flow(mock_hass: Mock) -> HomeWizardCleanerConfigFlow:
    """Create a HomeWizardCleanerConfigFlow instance for testing."""
    flow_instance = HomeWizardCleanerConfigFlow()
    flow_instance.hass = mock_hass
    flow_instance.async_set_unique_id = AsyncMock()
    flow_instance._abort_if_unique_id_configured = Mock()
    flow_instance.async_create_entry = Mock(
        return_value={"type": FlowResultType.CREATE_ENTRY},
    )
    flow_instance.async_show_form = Mock(return_value={"type": FlowResultType.FORM})
    flow_instance.async_abort = Mock(return_value={"type": FlowResultType.ABORT})
    flow_instance.async_update_reload_and_abort = Mock(
        return_value={"type": FlowResultType.ABORT},
    )
    return flow_instance


@pytest.fixture
def reauth_entry() -> Mock:
    """Create the config entry being re-authenticated."""
    entry = Mock()
    entry.data = {CONF_EMAIL: "test@example.com", CONF_PASSWORD: "old_password"}
    return entry


@pytest.fixture
def mock_client() -> Iterator[Mock]:
    """Patch the shared Home Assistant HTTP client."""
    client = Mock()
    with patch(GET_CLIENT, return_value=client):
        yield client


class TestHomeWizardCleanerConfigFlowAsyncStepUser:
    """Tests for async_step_user method."""

    @pytest.mark.asyncio
    async def test_async_step_user_shows_form_when_no_input(
        self,
        flow: HomeWizardCleanerConfigFlow,
    ) -> None:
        """Test that async_step_user shows form when no input provided."""
        result = await flow.async_step_user()
        flow.async_show_form.assert_called_once()
        assert flow.async_show_form.call_args[1]["step_id"] == "user"
        assert result["type"] == FlowResultType.FORM

    @pytest.mark.asyncio
    async def test_async_step_user_creates_entry_with_paired_cleaners(
        self,
        flow: HomeWizardCleanerConfigFlow,
        mock_client: Mock,
        sample_device: CleanerDevice,
    ) -> None:
        """Test that async_step_user stores credentials and cleaners."""
        with patch(
            GET_DEVICES, AsyncMock(return_value=[sample_device])
        ) as mock_get_devices:
            result = await flow.async_step_user(USER_INPUT)

        mock_get_devices.assert_awaited_once_with(
            mock_client, "Test@Example.com", "password123"
        )
        flow.async_set_unique_id.assert_called_once_with("test@example.com")
        flow._abort_if_unique_id_configured.assert_called_once()
        call_args = flow.async_create_entry.call_args
        assert call_args[1]["title"] == "HomeWizard Cleaner (Test@Example.com)"
        assert call_args[1]["data"] == {
            CONF_EMAIL: "Test@Example.com",
            CONF_PASSWORD: "password123",
            CONF_DEVICES: [sample_device.as_dict()],
        }
        assert result["type"] == FlowResultType.CREATE_ENTRY

    @pytest.mark.asyncio
    async def test_async_step_user_aborts_without_cleaners(
        self,
        flow: HomeWizardCleanerConfigFlow,
        mock_client: Mock,
    ) -> None:
        """Test that an account without cleaners aborts the flow."""
        with patch(GET_DEVICES, AsyncMock(return_value=[])):
            result = await flow.async_step_user(USER_INPUT)
        flow.async_abort.assert_called_once_with(reason="no_devices_found")
        flow.async_create_entry.assert_not_called()
        assert result["type"] == FlowResultType.ABORT

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (api.CleanerApiAuthError("Authentication error"), ERROR_INVALID_AUTH),
            (api.CleanerApiConnectionError("Connection refused"), ERROR_CANNOT_CONNECT),
            (api.CleanerApiUnexpectedStatusError("Request failed: 500"), ERROR_API_ERROR),
            (RuntimeError("boom"), ERROR_UNKNOWN),
        ],
    )
    async def test_async_step_user_shows_error(
        self,
        flow: HomeWizardCleanerConfigFlow,
        mock_client: Mock,
        error: Exception,
        expected: str,
    ) -> None:
        """Test that API failures are mapped to form errors."""
        with patch(GET_DEVICES, AsyncMock(side_effect=error)):
            result = await flow.async_step_user(USER_INPUT)
        call_args = flow.async_show_form.call_args
        assert call_args[1]["errors"]["base"] == expected
        flow.async_set_unique_id.assert_not_called()
        flow.async_create_entry.assert_not_called()
        assert result["type"] == FlowResultType.FORM


class TestHomeWizardCleanerConfigFlowReauth:
    """Tests for the re-authentication steps."""

    @pytest.mark.asyncio
    async def test_async_step_reauth_shows_confirm_form(
        self,
        flow: HomeWizardCleanerConfigFlow,
        reauth_entry: Mock,
    ) -> None:
        """Test that reauth asks for a new password."""
        flow._get_reauth_entry = Mock(return_value=reauth_entry)
        result = await flow.async_step_reauth(reauth_entry.data)
        call_args = flow.async_show_form.call_args
        assert call_args[1]["step_id"] == "reauth_confirm"
        assert call_args[1]["description_placeholders"] == {
            CONF_EMAIL: "test@example.com"
        }
        assert result["type"] == FlowResultType.FORM

    @pytest.mark.asyncio
    async def test_async_step_reauth_confirm_updates_password(
        self,
        flow: HomeWizardCleanerConfigFlow,
        reauth_entry: Mock,
        mock_client: Mock,
        sample_device: CleanerDevice,
    ) -> None:
        """Test that an accepted password is stored and the entry reloaded."""
        flow._get_reauth_entry = Mock(return_value=reauth_entry)
        with patch(
            GET_DEVICES, AsyncMock(return_value=[sample_device])
        ) as mock_get_devices:
            result = await flow.async_step_reauth_confirm(
                {CONF_PASSWORD: "new_password"}
            )
        mock_get_devices.assert_awaited_once_with(
            mock_client, "test@example.com", "new_password"
        )
        flow.async_update_reload_and_abort.assert_called_once_with(
            reauth_entry, data_updates={CONF_PASSWORD: "new_password"}
        )
        assert result["type"] == FlowResultType.ABORT

    @pytest.mark.asyncio
    async def test_async_step_reauth_confirm_shows_error_on_rejection(
        self,
        flow: HomeWizardCleanerConfigFlow,
        reauth_entry: Mock,
        mock_client: Mock,
    ) -> None:
        """Test that a rejected password keeps the form open."""
        flow._get_reauth_entry = Mock(return_value=reauth_entry)
        with patch(
            GET_DEVICES,
            AsyncMock(side_effect=api.CleanerApiAuthError("Authentication error")),
        ):
            result = await flow.async_step_reauth_confirm(
                {CONF_PASSWORD: "still_wrong"}
            )
        call_args = flow.async_show_form.call_args
        assert call_args[1]["errors"]["base"] == ERROR_INVALID_AUTH
        flow.async_update_reload_and_abort.assert_not_called()
        assert result["type"] == FlowResultType.FORM
