"""Status polling for HomeWizard Cleaner devices."""

from __future__ import annotations

import asyncio
import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from homeassistant.helpers.update_coordinator import DataUpdateCoordinator, UpdateFailed

from . import api
from .const import (
    CAPABILITY_MEASURE_BATTERY,
    CAPABILITY_STATE,
    DOMAIN,
    POLL_INTERVAL,
    STATE_UNKNOWN,
    STATUS_VOCABULARY,
    UNAVAILABLE_UNREACHABLE,
)
from .models import StatusSnapshot

if TYPE_CHECKING:
    import httpx
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant

    from .auth import CleanerTokenProvider
    from .capabilities import CapabilityRegistry
    from .reporter import UnknownStatusReporter

_LOGGER = logging.getLogger(__name__)


class CleanerStatusPoller(DataUpdateCoordinator[StatusSnapshot]):
    """Coordinator that polls one cleaner and pushes its status to capabilities.

    A failed poll marks the coordinator as failed and the next poll is still
    scheduled. A rejected token is replaced without counting as a failure.
    """

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        session: httpx.AsyncClient,
        endpoint: str,
        token_provider: CleanerTokenProvider,
        registry: CapabilityRegistry,
        reporter: UnknownStatusReporter,
        interval: float = POLL_INTERVAL,
    ) -> None:
        super().__init__(
            hass,
            _LOGGER,
            config_entry=config_entry,
            name=f"{DOMAIN}_{endpoint}",
            update_interval=timedelta(seconds=interval),
        )
        self._session = session
        self._endpoint = endpoint
        self._token_provider = token_provider
        self._registry = registry
        self._reporter = reporter
        self._interval = interval

    @property
    def interval(self) -> float:
        return self._interval

    async def _async_update_data(self) -> StatusSnapshot:
        """Fetch the status and apply it, bounded by the poll period.

        Raises:
            UpdateFailed: If the cleaner cannot be polled.

        """
        try:
            async with asyncio.timeout(self._interval):
                snapshot = await self._async_fetch_status()
        except (api.CleanerApiClientError, TimeoutError) as err:
            error_msg = f"{UNAVAILABLE_UNREACHABLE}: {err!r}"
            raise UpdateFailed(error_msg) from err

        if snapshot is None:
            if not self.last_update_success:
                # Token replaced while unreachable, stay unavailable until a fetch works
                error_msg = f"{UNAVAILABLE_UNREACHABLE}: token refreshed"
                raise UpdateFailed(error_msg)
            return self.data

        self.apply_snapshot(snapshot)
        return snapshot

    async def _async_fetch_status(self) -> StatusSnapshot | None:
        """Fetch the status, or replace a rejected token and return None."""
        try:
            return await api.async_get_status(
                self._session, self._endpoint, self._token_provider.token or ""
            )
        except api.CleanerApiAuthError:
            _LOGGER.warning("Token rejected by %s, requesting a new one", self._endpoint)
            await self._token_provider.async_get_token()
            return None

    def apply_snapshot(self, snapshot: StatusSnapshot) -> None:
        """Push a status snapshot to capabilities, battery first, then state."""
        if snapshot.battery_percentage is not None and self._registry.has_capability(
            CAPABILITY_MEASURE_BATTERY
        ):
            self._registry.set_value(
                CAPABILITY_MEASURE_BATTERY, snapshot.battery_percentage
            )

        status = snapshot.status
        if not status or not self._registry.has_capability(CAPABILITY_STATE):
            return

        if status in STATUS_VOCABULARY:
            self._registry.set_value(CAPABILITY_STATE, status)
            return

        self._registry.set_value(CAPABILITY_STATE, STATE_UNKNOWN)
        self._reporter.report_if_new(status)
