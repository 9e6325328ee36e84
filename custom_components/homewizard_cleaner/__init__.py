from __future__ import annotations

import logging

from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant
from homeassistant.helpers import config_validation as cv
from homeassistant.helpers.device_registry import DeviceEntry
from homeassistant.helpers.storage import Store
from homeassistant.helpers.typing import ConfigType

from .api import CleanerApiCredentialsError, create_session_client
from .auth import ConfigEntryCredentials
from .capabilities import CapabilityRegistry
from .const import CONF_DEVICES, DOMAIN, STORAGE_VERSION
from .models import CleanerDevice
from .services import async_setup_services
from .session import CleanerDeviceSession

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.BUTTON, Platform.SENSOR]

CONFIG_SCHEMA = cv.config_entry_only_config_schema(DOMAIN)


async def async_setup(hass: HomeAssistant, config: ConfigType) -> bool:
    async_setup_services(hass)
    return True


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info(
        "Setting up HomeWizard Cleaner integration for entry %s", entry.entry_id
    )

    devices = [CleanerDevice.from_dict(data) for data in entry.data.get(CONF_DEVICES, [])]
    if not devices:
        _LOGGER.error("No paired cleaners in configuration for entry %s", entry.entry_id)
        return False

    client = create_session_client(hass)
    credentials = ConfigEntryCredentials(entry)
    sessions: dict[str, CleanerDeviceSession] = {}

    for device in devices:
        session = CleanerDeviceSession(
            hass,
            entry,
            client,
            device,
            credentials,
            CapabilityRegistry(),
            Store(hass, STORAGE_VERSION, f"{DOMAIN}.{device.identifier}"),
        )
        # A failed start leaves the session registered with unavailable entities
        if not await session.async_init():
            _LOGGER.warning(
                "Cleaner %s could not be initialized: %s",
                device.name,
                session.unavailable_reason,
            )
        sessions[device.identifier] = session

    if any(
        isinstance(session.init_error, CleanerApiCredentialsError)
        for session in sessions.values()
    ):
        _LOGGER.warning("Stored credentials rejected for entry %s", entry.entry_id)
        entry.async_start_reauth(hass)

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {"sessions": sessions}
    _LOGGER.debug("Stored data for entry %s: %d cleaners", entry.entry_id, len(sessions))

    try:
        await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    except Exception as err:
        _LOGGER.error("Failed to setup platforms for entry %s: %s", entry.entry_id, err)
        await _async_shutdown_sessions(sessions)
        hass.data[DOMAIN].pop(entry.entry_id)
        return False

    _LOGGER.info(
        "Successfully setup HomeWizard Cleaner integration for entry %s",
        entry.entry_id,
    )
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info(
        "Unloading HomeWizard Cleaner integration for entry %s", entry.entry_id
    )

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if not unload_ok:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)
        return False

    entry_data = hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
    if entry_data is not None:
        await _async_shutdown_sessions(entry_data["sessions"])
        _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)

    return True


async def async_remove_config_entry_device(
    hass: HomeAssistant, entry: ConfigEntry, device_entry: DeviceEntry
) -> bool:
    """Stop the session of a cleaner the user deleted."""
    sessions = hass.data.get(DOMAIN, {}).get(entry.entry_id, {}).get("sessions", {})
    removed = {
        identifier
        for domain, identifier in device_entry.identifiers
        if domain == DOMAIN
    }
    for identifier in removed:
        session = sessions.pop(identifier, None)
        if session is not None:
            await session.async_shutdown()
            _LOGGER.info("Removed cleaner %s", session.device.name)

    # Drop the pairing so a reload does not bring the cleaner back
    devices = [
        data
        for data in entry.data.get(CONF_DEVICES, [])
        if data.get("identifier") not in removed
    ]
    hass.config_entries.async_update_entry(
        entry, data={**entry.data, CONF_DEVICES: devices}
    )
    return True


async def _async_shutdown_sessions(sessions: dict[str, CleanerDeviceSession]) -> None:
    for session in sessions.values():
        await session.async_shutdown()
