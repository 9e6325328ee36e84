"""Reporting of appliance statuses outside the known vocabulary."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable

import httpx

from . import api

_LOGGER = logging.getLogger(__name__)


class UnknownStatusReporter:
    """Send one diagnostic report per previously unseen status value.

    Reports run as detached tasks with their own error boundary, the poll
    tick that triggers them never waits for or fails because of them.
    """

    def __init__(
        self,
        session: httpx.AsyncClient,
        on_seen: Callable[[], None],
    ) -> None:
        """Initialize the reporter.

        Args:
            session: HTTP client session.
            on_seen: Called after a new value is marked seen, so it can be
                persisted.

        """
        self._session = session
        self._seen: set[str] = set()
        self._on_seen = on_seen
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def seen(self) -> frozenset[str]:
        return frozenset(self._seen)

    def load(self, seen: Iterable[str]) -> None:
        """Restore the status values reported in earlier runs."""
        self._seen.update(seen)

    def report_if_new(self, status: str) -> None:
        """Report a status value unless it was reported before."""
        if status in self._seen:
            return

        # Marked before any I/O so a report in flight is not repeated
        self._seen.add(status)
        self._on_seen()
        _LOGGER.warning("Unknown status detected: %s", status)

        task = asyncio.create_task(self._async_report(status))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def cancel(self) -> None:
        """Cancel reports still in flight."""
        for task in list(self._tasks):
            task.cancel()

    async def _async_report(self, status: str) -> None:
        try:
            await self._async_check_reference(status)
            await api.async_send_unknown_status_report(self._session, status)
        except api.CleanerApiClientError as err:
            _LOGGER.warning("Error sending unknown status report: %s", err)
        except Exception:
            _LOGGER.exception("Unexpected error sending unknown status report")

    async def _async_check_reference(self, status: str) -> None:
        try:
            reference = await api.async_get_reference_states(self._session)
        except api.CleanerApiClientError as err:
            _LOGGER.debug("Could not fetch reference states: %s", err)
            return
        if isinstance(reference, dict | list) and status in reference:
            _LOGGER.info(
                "Status %s is known upstream, a newer release may support it",
                status,
            )
