"""Dock and start actions for HomeWizard Cleaner.

The actions mirror the dock and start buttons: both resolve to the same
vendor command, so triggering either path has the same effect.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import voluptuous as vol
from homeassistant.const import ATTR_DEVICE_ID
from homeassistant.core import HomeAssistant, ServiceCall, callback
from homeassistant.exceptions import HomeAssistantError, ServiceValidationError
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers import device_registry as dr

from .api import CleanerApiClientError
from .const import DOMAIN, SERVICE_DOCK, SERVICE_START

if TYPE_CHECKING:
    from .session import CleanerDeviceSession

_LOGGER = logging.getLogger(__name__)

SERVICE_SCHEMA = vol.Schema({vol.Required(ATTR_DEVICE_ID): cv.string})


def find_session(hass: HomeAssistant, identifier: str) -> CleanerDeviceSession | None:
    """Return the session of a paired cleaner across all config entries."""
    for entry_data in hass.data.get(DOMAIN, {}).values():
        session = entry_data["sessions"].get(identifier)
        if session is not None:
            return session
    return None


def find_session_for_device(
    hass: HomeAssistant, device_id: str
) -> CleanerDeviceSession | None:
    """Return the session behind a device registry entry."""
    device_entry = dr.async_get(hass).async_get(device_id)
    if device_entry is None:
        return None
    for domain, identifier in device_entry.identifiers:
        if domain == DOMAIN:
            return find_session(hass, identifier)
    return None


async def async_handle_action(hass: HomeAssistant, call: ServiceCall) -> None:
    """Run a dock or start action on the targeted cleaner.

    Raises:
        ServiceValidationError: If the device is not a paired cleaner.
        HomeAssistantError: If the command could not be sent.

    """
    device_id = call.data[ATTR_DEVICE_ID]
    session = find_session_for_device(hass, device_id)
    if session is None:
        error_msg = f"Device {device_id} is not a paired HomeWizard Cleaner"
        raise ServiceValidationError(error_msg)

    _LOGGER.debug("Running action %s on %s", call.service, session.device.name)
    try:
        await session.async_run_action(call.service)
    except CleanerApiClientError as err:
        error_msg = f"Could not {call.service} {session.device.name}: {err}"
        raise HomeAssistantError(error_msg) from err


@callback
def async_setup_services(hass: HomeAssistant) -> None:
    """Register the dock and start actions."""

    async def _async_handle(call: ServiceCall) -> None:
        await async_handle_action(hass, call)

    for service in (SERVICE_DOCK, SERVICE_START):
        hass.services.async_register(
            DOMAIN, service, _async_handle, schema=SERVICE_SCHEMA
        )
