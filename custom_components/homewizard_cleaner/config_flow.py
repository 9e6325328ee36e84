"""
Configuration flow for HomeWizard Cleaner integration.

This module handles pairing of the cleaners linked to a HomeWizard account
and re-authentication when the stored password stops working.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.const import CONF_EMAIL, CONF_PASSWORD
from homeassistant.helpers.httpx_client import get_async_client

from . import api
from .const import (
    APP_NAME,
    CONF_DEVICES,
    DOMAIN,
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_INVALID_AUTH,
    ERROR_UNKNOWN,
)
from .models import CleanerDevice

_LOGGER = logging.getLogger(__name__)


class HomeWizardCleanerConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for HomeWizard Cleaner integration."""

    VERSION = 1

    async def _async_fetch_devices(
        self, email: str, password: str
    ) -> tuple[list[CleanerDevice], dict[str, str]]:
        """
        Validate credentials by listing the account's cleaners.

        Args:
            email: Account email address.
            password: Account password.

        Returns:
            The discovered cleaners and a form error mapping, empty on success.

        """
        errors: dict[str, str] = {}
        devices: list[CleanerDevice] = []
        try:
            session = get_async_client(self.hass)
            devices = await api.async_get_devices(session, email, password)
            _LOGGER.info("Successfully authenticated with HomeWizard API")
        except api.CleanerApiAuthError as err:
            _LOGGER.warning("Authentication failed (%s): %s", ERROR_INVALID_AUTH, err)
            errors["base"] = ERROR_INVALID_AUTH
        except api.CleanerApiConnectionError:
            _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
            errors["base"] = ERROR_CANNOT_CONNECT
        except api.CleanerApiClientError:
            _LOGGER.exception("API client error (%s)", ERROR_API_ERROR)
            errors["base"] = ERROR_API_ERROR
        except Exception:
            _LOGGER.exception(
                "Unexpected error during authentication (%s)", ERROR_UNKNOWN
            )
            errors["base"] = ERROR_UNKNOWN
        return devices, errors

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: User input data containing email and password.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            email = user_input[CONF_EMAIL]
            password = user_input[CONF_PASSWORD]
            devices, errors = await self._async_fetch_devices(email, password)

            if not errors:
                await self.async_set_unique_id(email.lower())
                self._abort_if_unique_id_configured()

                if not devices:
                    return self.async_abort(reason="no_devices_found")

                return self.async_create_entry(
                    title=f"{APP_NAME} ({email})",
                    data={
                        CONF_EMAIL: email,
                        CONF_PASSWORD: password,
                        CONF_DEVICES: [device.as_dict() for device in devices],
                    },
                )

        return self.async_show_form(
            step_id="user",
            data_schema=vol.Schema(
                {
                    vol.Required(CONF_EMAIL): str,
                    vol.Required(CONF_PASSWORD): str,
                }
            ),
            errors=errors,
        )

    async def async_step_reauth(
        self, entry_data: Mapping[str, Any]
    ) -> ConfigFlowResult:
        """Start re-authentication after the stored credentials were rejected."""
        return await self.async_step_reauth_confirm()

    async def async_step_reauth_confirm(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """Ask for a new password and store it when the API accepts it."""
        errors: dict[str, str] = {}
        reauth_entry = self._get_reauth_entry()
        email = reauth_entry.data[CONF_EMAIL]

        if user_input is not None:
            password = user_input[CONF_PASSWORD]
            _, errors = await self._async_fetch_devices(email, password)
            if not errors:
                return self.async_update_reload_and_abort(
                    reauth_entry, data_updates={CONF_PASSWORD: password}
                )

        return self.async_show_form(
            step_id="reauth_confirm",
            data_schema=vol.Schema({vol.Required(CONF_PASSWORD): str}),
            description_placeholders={CONF_EMAIL: email},
            errors=errors,
        )
