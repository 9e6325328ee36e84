"""API client for HomeWizard Cleaner appliances.

This module provides functions to interact with the HomeWizard cloud API,
including authentication, device discovery, status polling and command
sending, plus the diagnostic side channel used for unknown statuses.
"""

import base64
import logging
from typing import Any

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client
from httpx_retries import Retry, RetryTransport

from .const import (
    APP_NAME,
    BASE_URL,
    DEVICE_TYPE_CLEANER,
    POLL_INTERVAL,
    REFERENCE_STATES_URL,
    REPORT_URL,
)
from .models import CleanerDevice, StatusSnapshot

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401


class CleanerApiClientError(Exception):
    """Base exception for HomeWizard Cleaner API client errors."""


class CleanerApiAuthError(CleanerApiClientError):
    """Exception raised for missing, rejected or expired tokens or credentials."""


class CleanerApiCredentialsError(CleanerApiAuthError):
    """Exception raised when the account credentials are missing or rejected."""


class CleanerApiConnectionError(CleanerApiClientError):
    """Exception raised when the API cannot be reached or times out."""


class CleanerApiUnexpectedStatusError(CleanerApiClientError):
    """Exception raised for error responses not otherwise classified."""


def create_basic_auth_headers(email: str, password: str) -> dict[str, str]:
    """Create HTTP headers for account-level requests.

    Args:
        email: Account email address.
        password: Account password.

    Returns:
        Dictionary containing a Basic authorization header.

    """
    credentials = base64.b64encode(f"{email}:{password}".encode()).decode()
    return {
        "accept": "application/json",
        "Authorization": f"Basic {credentials}",
    }


def create_bearer_headers(token: str) -> dict[str, str]:
    """Create HTTP headers for appliance-level requests.

    Args:
        token: Bearer token obtained from the token exchange.

    Returns:
        Dictionary containing a Bearer authorization header.

    """
    return {
        "accept": "application/json",
        "Authorization": f"Bearer {token}",
    }


def is_http_error(status: int) -> bool:
    """Check if HTTP status code indicates an error.

    Args:
        status: HTTP status code to check.

    Returns:
        True if status code is 400 or higher, False otherwise.

    """
    return status >= HTTP_BAD_REQUEST


def is_auth_error(status: int) -> bool:
    """Check if HTTP status code indicates authentication error.

    Args:
        status: HTTP status code to check.

    Returns:
        True if status code is 401, False otherwise.

    """
    return status == HTTP_UNAUTHORIZED


def endpoint_url(endpoint: str, path: str = "") -> str:
    """Join a per-device endpoint with a path."""
    return f"{endpoint.rstrip('/')}/{path}"


def validate_response(response: httpx.Response) -> Any:
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.

    Returns:
        Parsed JSON data from response.

    Raises:
        CleanerApiAuthError: If the request was rejected with 401.
        CleanerApiUnexpectedStatusError: If any other error status or a
            non-JSON body is returned.

    """
    _validate_http_status(response)
    try:
        return response.json()
    except ValueError as err:
        error_msg = f"Invalid JSON in response: {err}"
        raise CleanerApiUnexpectedStatusError(error_msg) from err


def _validate_http_status(response: httpx.Response) -> None:
    if not is_http_error(response.status_code):
        return

    if is_auth_error(response.status_code):
        auth_error = "Authentication error"
        raise CleanerApiAuthError(auth_error)

    client_error = f"Request failed: {response.status_code}"
    raise CleanerApiUnexpectedStatusError(client_error)


async def _async_request(
    session: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: Any,
) -> httpx.Response:
    try:
        return await session.request(method, url, **kwargs)
    except httpx.RequestError as err:
        error_msg = f"Connection error: {err}"
        raise CleanerApiConnectionError(error_msg) from err


def extract_token(data: Any) -> str:
    """Extract the bearer token from a token exchange response.

    Raises:
        CleanerApiAuthError: If the response carries no token.

    """
    token = data.get("token") if isinstance(data, dict) else None
    if not token:
        error_msg = "Token not found in response"
        raise CleanerApiAuthError(error_msg)
    return str(token)


def extract_cleaners(data: Any) -> list[CleanerDevice]:
    """Extract pairable cleaners from a device listing.

    Args:
        data: API response data dictionary.

    Returns:
        List of CleanerDevice objects, other device types are skipped.

    """
    devices = data.get("devices", []) if isinstance(data, dict) else []
    return [
        CleanerDevice(
            identifier=str(device["identifier"]),
            name=str(device.get("name") or device["identifier"]),
            endpoint=str(device["endpoint"]),
        )
        for device in devices
        if device.get("type") == DEVICE_TYPE_CLEANER
    ]


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create HTTP client with retry logic for the HomeWizard API.

    The timeout matches the poll period so a hung call cannot stall
    polling indefinitely.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient with retry transport.

    """
    base_client = create_async_httpx_client(hass, timeout=POLL_INTERVAL)
    retry = Retry(total=3, backoff_factor=0.5)
    base_client._transport = RetryTransport(  # noqa: SLF001
        transport=base_client._transport,  # noqa: SLF001
        retry=retry,
    )
    return base_client


async def async_get_token(
    session: httpx.AsyncClient,
    email: str,
    password: str,
    device_id: str,
) -> str:
    """Exchange account credentials for a device bearer token.

    Args:
        session: HTTP client session.
        email: Account email address.
        password: Account password.
        device_id: Identifier of the appliance the token is for.

    Returns:
        The bearer token.

    Raises:
        CleanerApiCredentialsError: If the credentials are rejected.
        CleanerApiConnectionError: If the API cannot be reached.
        CleanerApiUnexpectedStatusError: If the API returns another error.

    """
    url = f"{BASE_URL}/auth/token"
    headers = create_basic_auth_headers(email, password)

    _LOGGER.debug("Requesting token for device %s", device_id)
    response = await _async_request(
        session, "POST", url, headers=headers, json={"device": device_id}
    )
    if is_auth_error(response.status_code):
        error_msg = f"Credentials rejected: {response.status_code}"
        raise CleanerApiCredentialsError(error_msg)
    token = extract_token(validate_response(response))
    _LOGGER.debug("Successfully obtained token for device %s", device_id)
    return token


async def async_get_devices(
    session: httpx.AsyncClient,
    email: str,
    password: str,
) -> list[CleanerDevice]:
    """Fetch the cleaners linked to an account.

    Args:
        session: HTTP client session.
        email: Account email address.
        password: Account password.

    Returns:
        List of CleanerDevice objects.

    Raises:
        CleanerApiAuthError: If the credentials are rejected.
        CleanerApiConnectionError: If the API cannot be reached.
        CleanerApiUnexpectedStatusError: If the API returns another error.

    """
    url = f"{BASE_URL}/auth/devices"
    headers = create_basic_auth_headers(email, password)

    _LOGGER.debug("Fetching devices from HomeWizard API")
    response = await _async_request(session, "GET", url, headers=headers)
    devices = extract_cleaners(validate_response(response))
    _LOGGER.debug("Retrieved %d cleaners from HomeWizard API", len(devices))
    return devices


async def async_get_status(
    session: httpx.AsyncClient,
    endpoint: str,
    token: str,
) -> StatusSnapshot:
    """Fetch the current status of an appliance.

    Raises:
        CleanerApiAuthError: If the token is expired or invalid.
        CleanerApiConnectionError: If the appliance cannot be reached.
        CleanerApiUnexpectedStatusError: If the API returns another error.

    """
    response = await _async_request(
        session, "GET", endpoint_url(endpoint), headers=create_bearer_headers(token)
    )
    data = validate_response(response)
    if not isinstance(data, dict):
        error_msg = "Unexpected status payload"
        raise CleanerApiUnexpectedStatusError(error_msg)
    _LOGGER.debug("Polled status from %s: %s", endpoint, data)
    return StatusSnapshot.from_payload(data)


async def async_send_command(
    session: httpx.AsyncClient,
    endpoint: str,
    token: str,
    activity: str,
) -> Any:
    """Send a control command to an appliance.

    Args:
        session: HTTP client session.
        endpoint: Base URL of the appliance.
        token: Bearer token.
        activity: Vendor activity, "charge" or "work".

    Returns:
        The response payload, its content is not relied upon.

    Raises:
        CleanerApiAuthError: If the token is expired or invalid.
        CleanerApiConnectionError: If the appliance cannot be reached.
        CleanerApiUnexpectedStatusError: If the API returns another error.

    """
    _LOGGER.debug("Sending command %s to %s", activity, endpoint)
    response = await _async_request(
        session,
        "POST",
        endpoint_url(endpoint, "control"),
        headers=create_bearer_headers(token),
        json={"activity": activity},
    )
    result = validate_response(response)
    _LOGGER.debug("Command %s response: %s", activity, result)
    return result


async def async_get_reference_states(session: httpx.AsyncClient) -> Any:
    """Fetch the published reference vocabulary of appliance states."""
    response = await _async_request(session, "GET", REFERENCE_STATES_URL)
    return validate_response(response)


async def async_send_unknown_status_report(
    session: httpx.AsyncClient,
    status: str,
) -> None:
    """Send a diagnostic report about a status outside the known vocabulary."""
    payload = {
        "message": f"Unknown status detected: {status}",
        "app": APP_NAME,
        "report": {"status": status},
    }
    response = await _async_request(session, "POST", REPORT_URL, json=payload)
    _validate_http_status(response)
    _LOGGER.debug("Sent unknown status report for %s", status)
