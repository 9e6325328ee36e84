"""Device session for HomeWizard Cleaner appliances.

A session owns everything needed to supervise one paired appliance: its
bearer token, the status coordinator, the unknown-status reporter and the
persisted per-device data. Its lifecycle is

    uninitialized -> authenticating -> polling <-> unavailable -> terminated

where a failed start goes straight to terminated without ever polling.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from homeassistant.core import CALLBACK_TYPE, callback

from . import api
from .auth import CleanerTokenProvider
from .capabilities import CapabilitySchemaError
from .const import (
    ACTION_COMMAND_MAP,
    CAPABILITY_COMMAND_MAP,
    COMMAND_CHARGE,
    COMMAND_WORK,
    POLL_INTERVAL,
    STORAGE_SAVE_DELAY,
    UNAVAILABLE_INIT_ERROR,
    UNAVAILABLE_UNREACHABLE,
)
from .coordinator import CleanerStatusPoller
from .migrations import apply_migrations
from .models import SessionState
from .reporter import UnknownStatusReporter

if TYPE_CHECKING:
    import httpx
    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.storage import Store

    from .auth import CredentialStore
    from .capabilities import CapabilityRegistry
    from .models import CleanerDevice

_LOGGER = logging.getLogger(__name__)

STORE_CAPABILITIES = "capabilities"
STORE_MIGRATIONS = "migrations"
STORE_SEEN_UNKNOWN_STATUSES = "seen_unknown_statuses"


class CleanerDeviceSession:
    """Runtime session of a single paired cleaner."""

    def __init__(
        self,
        hass: HomeAssistant,
        config_entry: ConfigEntry,
        session: httpx.AsyncClient,
        device: CleanerDevice,
        credentials: CredentialStore,
        registry: CapabilityRegistry,
        storage: Store,
        *,
        poll_interval: float = POLL_INTERVAL,
    ) -> None:
        """Initialize the session.

        Args:
            hass: Home Assistant instance.
            config_entry: Config entry the cleaner was paired through.
            session: HTTP client session.
            device: The paired device, its endpoint is fixed for the session.
            credentials: Source of the account email and password.
            registry: Capability registry the session pushes values into.
            storage: Per-device store for the capability schema, completed
                migrations and reported unknown statuses.
            poll_interval: Seconds between status polls.

        """
        self._session = session
        self._device = device
        self._registry = registry
        self._storage = storage
        self._token_provider = CleanerTokenProvider(
            session, credentials, device.identifier
        )
        self._reporter = UnknownStatusReporter(session, self._schedule_save)
        self._poller = CleanerStatusPoller(
            hass,
            config_entry,
            session,
            device.endpoint,
            self._token_provider,
            registry,
            self._reporter,
            poll_interval,
        )
        self._completed_migrations: list[str] = []
        self._state = SessionState.UNINITIALIZED
        self._shut_down = False
        self._unavailable_reason: str | None = None
        self._init_error: Exception | None = None
        self._unsub_poller: CALLBACK_TYPE | None = None

    @property
    def device(self) -> CleanerDevice:
        return self._device

    @property
    def device_id(self) -> str:
        return self._device.identifier

    @property
    def endpoint(self) -> str:
        return self._device.endpoint

    @property
    def token(self) -> str | None:
        return self._token_provider.token

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def available(self) -> bool:
        return self._state is SessionState.POLLING

    @property
    def polling(self) -> bool:
        """Return True while status polls are scheduled."""
        return self._unsub_poller is not None

    @property
    def unavailable_reason(self) -> str | None:
        return self._unavailable_reason

    @property
    def init_error(self) -> Exception | None:
        """Return the error that terminated the session during start."""
        return self._init_error

    @property
    def registry(self) -> CapabilityRegistry:
        return self._registry

    @property
    def poller(self) -> CleanerStatusPoller:
        return self._poller

    @property
    def seen_unknown_statuses(self) -> frozenset[str]:
        return self._reporter.seen

    async def async_init(self) -> bool:
        """Start the session: migrate, authenticate, fetch status, start polling.

        Returns:
            True if polling was started, False if the session terminated.

        """
        if self._state is not SessionState.UNINITIALIZED:
            _LOGGER.warning(
                "Session for %s already initialized (%s)", self._device.name, self._state
            )
            return self.polling

        _LOGGER.debug("Initializing session for %s", self._device.name)
        self._state = SessionState.AUTHENTICATING
        try:
            await self._async_load_storage()
            token = await self._token_provider.async_get_token()
            snapshot = await api.async_get_status(self._session, self.endpoint, token)
        except (api.CleanerApiClientError, CapabilitySchemaError) as err:
            _LOGGER.error("Initialization error for %s: %s", self._device.name, err)
            await self._async_terminate(err)
            return False
        except Exception as err:
            _LOGGER.exception("Unexpected initialization error for %s", self._device.name)
            await self._async_terminate(err)
            return False

        if self._shut_down:
            _LOGGER.debug("Session for %s shut down during start", self._device.name)
            return False

        _LOGGER.debug("Initial status of %s: %s", self._device.name, snapshot.raw)
        self._set_available()
        self._poller.apply_snapshot(snapshot)
        self._poller.async_set_updated_data(snapshot)
        # The first listener schedules the recurring poll
        self._unsub_poller = self._poller.async_add_listener(
            self._async_handle_poll_update
        )
        _LOGGER.info("Session for %s started", self._device.name)
        return True

    async def async_shutdown(self) -> None:
        """Stop polling and pending reports, no poll is started afterwards."""
        self._shut_down = True
        self._state = SessionState.TERMINATED
        if self._unsub_poller is not None:
            self._unsub_poller()
            self._unsub_poller = None
        self._reporter.cancel()
        await self._poller.async_shutdown()
        _LOGGER.debug("Session for %s terminated", self._device.name)

    async def async_send_command(self, command: str) -> None:
        """Send a control command with the cached token.

        Errors propagate to the caller, availability is left to the poller.

        Raises:
            ValueError: If the command is not supported.
            CleanerApiAuthError: If no token has been obtained yet.
            CleanerApiClientError: If the session is terminated or the
                request fails.

        """
        if command not in (COMMAND_CHARGE, COMMAND_WORK):
            error_msg = f"Unsupported command: {command}"
            raise ValueError(error_msg)
        if self._shut_down:
            error_msg = f"Session for {self._device.name} is shut down"
            raise api.CleanerApiClientError(error_msg)

        token = self._token_provider.token
        if token is None:
            error_msg = "not authenticated"
            raise api.CleanerApiAuthError(error_msg)

        try:
            await api.async_send_command(self._session, self.endpoint, token, command)
        except api.CleanerApiClientError as err:
            _LOGGER.error(
                "Error sending command %s to %s: %s", command, self._device.name, err
            )
            raise
        _LOGGER.info("Sent command %s to %s", command, self._device.name)

    async def async_write_capability(self, name: str, value: Any) -> None:
        """Handle a controller write to a boolean command capability.

        Raises:
            CapabilitySchemaError: If the capability is unknown or not writable.

        """
        command = CAPABILITY_COMMAND_MAP.get(name)
        if command is None or not self._registry.has_capability(name):
            error_msg = f"Capability {name} is not writable"
            raise CapabilitySchemaError(error_msg)
        if value is not True:
            return
        await self.async_send_command(command)

    async def async_run_action(self, action: str) -> None:
        """Handle a controller action, "dock" or "start"."""
        command = ACTION_COMMAND_MAP.get(action)
        if command is None:
            error_msg = f"Unsupported action: {action}"
            raise ValueError(error_msg)
        await self.async_send_command(command)

    @callback
    def async_add_listener(self, update_callback: Callable[[], None]) -> CALLBACK_TYPE:
        """Listen for poll results, returns a function to unsubscribe."""
        return self._poller.async_add_listener(update_callback)

    async def _async_load_storage(self) -> None:
        data = await self._storage.async_load() or {}
        self._registry.load(data.get(STORE_CAPABILITIES, ()))
        self._completed_migrations = list(data.get(STORE_MIGRATIONS, ()))
        self._reporter.load(data.get(STORE_SEEN_UNKNOWN_STATUSES, ()))

        applied = apply_migrations(self._registry, self._completed_migrations)
        if applied:
            _LOGGER.info(
                "Applied capability migrations to %s: %s",
                self._device.name,
                ", ".join(applied),
            )
            self._completed_migrations.extend(applied)
            self._schedule_save()

    @callback
    def _schedule_save(self) -> None:
        self._storage.async_delay_save(self._data_to_save, STORAGE_SAVE_DELAY)

    def _data_to_save(self) -> dict[str, list[str]]:
        return {
            STORE_CAPABILITIES: list(self._registry.capabilities),
            STORE_MIGRATIONS: list(self._completed_migrations),
            STORE_SEEN_UNKNOWN_STATUSES: sorted(self._reporter.seen),
        }

    async def _async_terminate(self, err: Exception) -> None:
        self._init_error = err
        self._set_unavailable(UNAVAILABLE_INIT_ERROR)
        self._state = SessionState.TERMINATED
        # Entities still subscribe to the poller, it must never start polling
        await self._poller.async_shutdown()

    @callback
    def _async_handle_poll_update(self) -> None:
        if self._poller.last_update_success:
            self._set_available()
        else:
            self._set_unavailable(UNAVAILABLE_UNREACHABLE)

    @callback
    def _set_available(self) -> None:
        if self._state is SessionState.TERMINATED:
            return
        if self._state is SessionState.POLLING:
            return
        if self._unavailable_reason is not None:
            _LOGGER.info("Device %s is back online", self._device.name)
        self._state = SessionState.POLLING
        self._unavailable_reason = None

    @callback
    def _set_unavailable(self, reason: str) -> None:
        if self._state is SessionState.TERMINATED:
            return
        if self._state is SessionState.UNAVAILABLE and self._unavailable_reason == reason:
            return
        _LOGGER.info("Device %s is unavailable: %s", self._device.name, reason)
        self._state = SessionState.UNAVAILABLE
        self._unavailable_reason = reason
