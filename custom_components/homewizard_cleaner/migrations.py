"""Versioned capability schema migrations.

Migrations run in order at session start. Each one checks the schema before
acting, and its name is recorded in the device store once applied so it is
never applied twice.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass

from .capabilities import CapabilityRegistry
from .const import (
    CAPABILITY_DOCK,
    CAPABILITY_MEASURE_BATTERY,
    CAPABILITY_START,
    CAPABILITY_STATE,
)

_LOGGER = logging.getLogger(__name__)

REQUIRED_CAPABILITIES = (
    CAPABILITY_DOCK,
    CAPABILITY_START,
    CAPABILITY_STATE,
    CAPABILITY_MEASURE_BATTERY,
)


@dataclass(frozen=True)
class Migration:
    """A named, idempotent change to the capability schema."""

    name: str
    apply: Callable[[CapabilityRegistry], None]


def _add_required_capabilities(registry: CapabilityRegistry) -> None:
    for name in REQUIRED_CAPABILITIES:
        if not registry.has_capability(name):
            registry.add_capability(name)


def _reset_state_capability(registry: CapabilityRegistry) -> None:
    # Re-adding picks up the extended state vocabulary
    if registry.has_capability(CAPABILITY_STATE):
        registry.remove_capability(CAPABILITY_STATE)
    registry.add_capability(CAPABILITY_STATE)


MIGRATIONS: tuple[Migration, ...] = (
    Migration("add_required_capabilities", _add_required_capabilities),
    Migration("state_update_16012025", _reset_state_capability),
)


def apply_migrations(
    registry: CapabilityRegistry,
    completed: Iterable[str],
    migrations: Iterable[Migration] = MIGRATIONS,
) -> list[str]:
    """Apply every migration not yet completed.

    Args:
        registry: Capability registry of the device.
        completed: Names of migrations applied in earlier runs.
        migrations: Ordered migrations to consider.

    Returns:
        Names of the migrations applied by this call, in order.

    Raises:
        CapabilitySchemaError: If a migration step hits an invalid schema.

    """
    done = set(completed)
    applied = []
    for migration in migrations:
        if migration.name in done:
            continue
        _LOGGER.debug("Applying capability migration %s", migration.name)
        migration.apply(registry)
        applied.append(migration.name)
    return applied
