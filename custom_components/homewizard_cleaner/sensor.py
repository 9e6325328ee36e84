"""Sensors for HomeWizard Cleaner battery level and cleaning state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from homeassistant.components.sensor import (
    SensorDeviceClass,
    SensorEntity,
    SensorEntityDescription,
    SensorStateClass,
)
from homeassistant.const import PERCENTAGE

from .const import (
    CAPABILITY_MEASURE_BATTERY,
    CAPABILITY_STATE,
    DOMAIN,
    STATE_UNKNOWN,
    STATUS_VOCABULARY,
)
from .entity import CleanerEntity

if TYPE_CHECKING:
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .session import CleanerDeviceSession

SENSORS: tuple[SensorEntityDescription, ...] = (
    SensorEntityDescription(
        key=CAPABILITY_MEASURE_BATTERY,
        device_class=SensorDeviceClass.BATTERY,
        state_class=SensorStateClass.MEASUREMENT,
        native_unit_of_measurement=PERCENTAGE,
    ),
    SensorEntityDescription(
        key=CAPABILITY_STATE,
        translation_key=CAPABILITY_STATE,
        device_class=SensorDeviceClass.ENUM,
        options=[*STATUS_VOCABULARY, STATE_UNKNOWN],
    ),
)


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up sensors for every paired cleaner."""
    sessions = hass.data[DOMAIN][entry.entry_id]["sessions"]
    async_add_entities(
        CleanerSensor(session, description)
        for session in sessions.values()
        for description in SENSORS
    )


class CleanerSensor(CleanerEntity, SensorEntity):
    """Sensor reading a capability value of a cleaner."""

    def __init__(
        self,
        session: CleanerDeviceSession,
        description: SensorEntityDescription,
    ) -> None:
        super().__init__(session, description.key)
        self.entity_description = description
        self._attr_translation_key = description.translation_key

    @property
    def native_value(self) -> Any:
        """Return the last value pushed for the capability."""
        return self._session.registry.get_value(self._capability)
