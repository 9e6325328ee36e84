"""Shared helpers for HomeWizard Cleaner tests."""

import asyncio
from collections.abc import Callable
from typing import Any

from custom_components.homewizard_cleaner.models import StatusSnapshot

DEVICE_ENDPOINT = "https://cleaner.example.com/v1/cleaners/abc123"


class StatusSequence:
    """Awaitable stand-in for api.async_get_status.

    Returns (or raises) the given results in order and keeps repeating the
    last one. Records the token used for every call.
    """

    def __init__(self, *results: StatusSnapshot | Exception) -> None:
        self._results = list(results)
        self.tokens: list[str] = []

    @property
    def call_count(self) -> int:
        return len(self.tokens)

    async def __call__(self, session: Any, endpoint: str, token: str) -> StatusSnapshot:
        self.tokens.append(token)
        result = self._results.pop(0) if len(self._results) > 1 else self._results[0]
        if isinstance(result, Exception):
            raise result
        return result


async def wait_for(predicate: Callable[[], bool], timeout: float = 2.0) -> None:
    """Wait until predicate returns True or fail after timeout."""
    async with asyncio.timeout(timeout):
        while not predicate():
            await asyncio.sleep(0.005)


def snapshot(battery: float | None = None, status: str | None = None) -> StatusSnapshot:
    """Build a status snapshot the way the API parses one."""
    payload: dict[str, Any] = {}
    if battery is not None:
        payload["battery_percentage"] = battery
    if status is not None:
        payload["status"] = status
    return StatusSnapshot.from_payload(payload)
