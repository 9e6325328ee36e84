"""Buttons to dock or start a HomeWizard Cleaner."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from homeassistant.components.button import ButtonEntity
from homeassistant.exceptions import HomeAssistantError

from .api import CleanerApiClientError
from .const import CAPABILITY_DOCK, CAPABILITY_START, DOMAIN
from .entity import CleanerEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

_LOGGER = logging.getLogger(__name__)

BUTTON_ICONS = {
    CAPABILITY_DOCK: "mdi:home-import-outline",
    CAPABILITY_START: "mdi:play",
}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up dock and start buttons for every paired cleaner."""
    sessions = hass.data[DOMAIN][entry.entry_id]["sessions"]
    async_add_entities(
        CleanerCommandButton(session, capability)
        for session in sessions.values()
        for capability in BUTTON_ICONS
    )


class CleanerCommandButton(CleanerEntity, ButtonEntity):
    """Button writing True to a command capability."""

    @property
    def icon(self) -> str:
        return BUTTON_ICONS[self._capability]

    async def async_press(self) -> None:
        """Send the command bound to the capability.

        Raises:
            HomeAssistantError: If the command could not be sent.

        """
        try:
            await self._session.async_write_capability(self._capability, True)
        except CleanerApiClientError as err:
            error_msg = f"Could not {self._capability} {self._session.device.name}: {err}"
            raise HomeAssistantError(error_msg) from err
