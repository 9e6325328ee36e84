"""Capability registry for HomeWizard Cleaner devices.

A capability is a named value the controller exposes for a device. The
registry tracks which capabilities a device has (its schema) and the last
value pushed for each, and notifies entities when a value changes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from homeassistant.core import CALLBACK_TYPE, callback

_LOGGER = logging.getLogger(__name__)


class CapabilitySchemaError(Exception):
    """Exception raised for operations that do not match the capability schema."""


class CapabilityRegistry:
    """Capabilities of a single device and their last pushed values."""

    def __init__(self) -> None:
        self._values: dict[str, Any] = {}
        self._listeners: list[Callable[[], None]] = []

    @property
    def capabilities(self) -> tuple[str, ...]:
        """Return the capability names in the order they were added."""
        return tuple(self._values)

    @property
    def values(self) -> dict[str, Any]:
        """Return a copy of the last pushed value of every capability."""
        return dict(self._values)

    def has_capability(self, name: str) -> bool:
        return name in self._values

    def get_value(self, name: str) -> Any:
        return self._values.get(name)

    def load(self, names: Iterable[str]) -> None:
        """Restore a persisted schema, values start out empty."""
        self._values = dict.fromkeys(names)

    def add_capability(self, name: str) -> None:
        if name in self._values:
            error_msg = f"Capability {name} already exists"
            raise CapabilitySchemaError(error_msg)
        self._values[name] = None
        _LOGGER.debug("Added capability %s", name)
        self._async_notify()

    def remove_capability(self, name: str) -> None:
        if name not in self._values:
            error_msg = f"Capability {name} does not exist"
            raise CapabilitySchemaError(error_msg)
        del self._values[name]
        _LOGGER.debug("Removed capability %s", name)
        self._async_notify()

    def set_value(self, name: str, value: Any) -> bool:
        """Push a capability value.

        Args:
            name: Capability name.
            value: New value.

        Returns:
            True if the value changed and listeners were notified.

        Raises:
            CapabilitySchemaError: If the capability does not exist.

        """
        if name not in self._values:
            error_msg = f"Capability {name} does not exist"
            raise CapabilitySchemaError(error_msg)
        if self._values[name] == value:
            return False
        self._values[name] = value
        self._async_notify()
        return True

    @callback
    def async_add_listener(self, update_callback: Callable[[], None]) -> CALLBACK_TYPE:
        """Listen for capability changes, returns a function to unsubscribe."""
        self._listeners.append(update_callback)

        @callback
        def remove_listener() -> None:
            if update_callback in self._listeners:
                self._listeners.remove(update_callback)

        return remove_listener

    @callback
    def _async_notify(self) -> None:
        for update_callback in list(self._listeners):
            update_callback()
