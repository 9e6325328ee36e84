"""Shared entity base for the HomeWizard Cleaner integration."""

from __future__ import annotations

from homeassistant.helpers.device_registry import DeviceInfo
from homeassistant.helpers.update_coordinator import CoordinatorEntity

from .const import DOMAIN, MANUFACTURER
from .coordinator import CleanerStatusPoller
from .session import CleanerDeviceSession


class CleanerEntity(CoordinatorEntity[CleanerStatusPoller]):
    """Entity backed by one capability of a cleaner session."""

    _attr_has_entity_name = True

    def __init__(self, session: CleanerDeviceSession, capability: str) -> None:
        super().__init__(session.poller)
        self._session = session
        self._capability = capability
        self._attr_unique_id = f"{session.device_id}_{capability}"
        self._attr_translation_key = capability
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, session.device_id)},
            name=session.device.name,
            manufacturer=MANUFACTURER,
            model="Cleaner",
        )

    @property
    def available(self) -> bool:
        """Return True if the session is reachable and has the capability."""
        return (
            super().available
            and self._session.available
            and self._session.registry.has_capability(self._capability)
        )

    async def async_added_to_hass(self) -> None:
        await super().async_added_to_hass()
        self.async_on_remove(
            self._session.registry.async_add_listener(self.async_write_ha_state)
        )
