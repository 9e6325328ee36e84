"""Credential access and bearer token handling for HomeWizard Cleaner."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Protocol

from homeassistant.const import CONF_EMAIL, CONF_PASSWORD

from . import api

if TYPE_CHECKING:
    import httpx
    from homeassistant.config_entries import ConfigEntry

_LOGGER = logging.getLogger(__name__)


class CredentialStore(Protocol):
    """Read-only access to the account credentials."""

    @property
    def email(self) -> str | None: ...

    @property
    def password(self) -> str | None: ...


class ConfigEntryCredentials:
    """Credentials read from a config entry on every access.

    Reading lazily means credentials updated by a reauth flow are used by
    the next token exchange without restarting the session.
    """

    def __init__(self, config_entry: ConfigEntry) -> None:
        self._config_entry = config_entry

    @property
    def email(self) -> str | None:
        return self._config_entry.data.get(CONF_EMAIL)

    @property
    def password(self) -> str | None:
        return self._config_entry.data.get(CONF_PASSWORD)


class CleanerTokenProvider:
    """Exchange account credentials for a device bearer token.

    There is no refresh token: every call to async_get_token performs a
    fresh exchange, so it is only called at session start and after the
    API rejected the cached token.
    """

    def __init__(
        self,
        session: httpx.AsyncClient,
        credentials: CredentialStore,
        device_id: str,
    ) -> None:
        """Initialize the token provider.

        Args:
            session: HTTP client session.
            credentials: Source of the account email and password.
            device_id: Identifier of the appliance tokens are requested for.

        """
        self._session = session
        self._credentials = credentials
        self._device_id = device_id
        self._token: str | None = None

    @property
    def token(self) -> str | None:
        """Return the cached token, None before the first exchange."""
        return self._token

    async def async_get_token(self) -> str:
        """Request a new token and cache it.

        Returns:
            The new bearer token.

        Raises:
            CleanerApiCredentialsError: If credentials are missing or rejected.
            CleanerApiAuthError: If the token request fails with another status.
            CleanerApiConnectionError: If the API cannot be reached.

        """
        email = self._credentials.email
        password = self._credentials.password
        if not email or not password:
            _LOGGER.error("Email or password not found for device %s", self._device_id)
            error_msg = "missing credentials"
            raise api.CleanerApiCredentialsError(error_msg)

        try:
            token = await api.async_get_token(
                self._session, email, password, self._device_id
            )
        except api.CleanerApiUnexpectedStatusError as err:
            error_msg = f"Token request rejected: {err}"
            _LOGGER.warning("Error fetching token for %s: %s", self._device_id, err)
            raise api.CleanerApiAuthError(error_msg) from err
        except api.CleanerApiClientError as err:
            _LOGGER.warning("Error fetching token for %s: %s", self._device_id, err)
            raise

        self._token = token
        _LOGGER.info("Obtained new token for device %s", self._device_id)
        return token
