"""Data models for HomeWizard Cleaner integration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


@dataclass(frozen=True)
class CleanerDevice:
    """Represents a paired cleaner as returned by device discovery.

    Attributes:
        identifier: Stable vendor identifier of the appliance.
        name: Human-readable device name.
        endpoint: Base URL of the appliance's vendor API.

    """

    identifier: str
    name: str
    endpoint: str

    def as_dict(self) -> dict[str, str]:
        """Return the device as config entry data."""
        return {
            "identifier": self.identifier,
            "name": self.name,
            "endpoint": self.endpoint,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CleanerDevice:
        """Build a device from config entry data."""
        return cls(
            identifier=str(data["identifier"]),
            name=str(data.get("name") or data["identifier"]),
            endpoint=str(data["endpoint"]),
        )


@dataclass(frozen=True, slots=True)
class StatusSnapshot:
    """Status reported by a single poll of the appliance."""

    battery_percentage: float | int | None
    status: str | None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> StatusSnapshot:
        battery = data.get("battery_percentage")
        if isinstance(battery, bool) or not isinstance(battery, int | float):
            battery = None
        status = data.get("status")
        if not isinstance(status, str):
            status = None
        return cls(battery_percentage=battery, status=status, raw=data)


class SessionState(StrEnum):
    """Lifecycle states of a device session."""

    UNINITIALIZED = "uninitialized"
    AUTHENTICATING = "authenticating"
    POLLING = "polling"
    UNAVAILABLE = "unavailable"
    TERMINATED = "terminated"
