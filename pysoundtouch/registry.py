"""Configured device list and discovery reconciliation.

The registry owns the list of known devices. Discovery results are merged by
address: new addresses are added, known addresses are left untouched (the
stored name wins), and addresses that were not found are optionally removed.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field

from .discovery import DeviceRecord
from .exceptions import DeviceNotFoundError, PersistenceError

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "DeviceRegistry",
    "ReconcileResult",
    "format_discovery_report",
    "reconcile",
]


@dataclass
class ReconcileResult:
    """Outcome of merging a scan into the device list."""

    added: list[DeviceRecord] = field(default_factory=list)
    known: list[DeviceRecord] = field(default_factory=list)
    removed: list[DeviceRecord] = field(default_factory=list)
    devices: list[DeviceRecord] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        """True if the device list differs from the persisted one."""
        return bool(self.added or self.removed)


def reconcile(
    persisted: Sequence[DeviceRecord],
    found: Iterable[DeviceRecord],
    remove_not_found: bool = False,
) -> ReconcileResult:
    """Compare a scan against the persisted list by address.

    Does not modify *persisted*. The returned ``devices`` is the list to
    store: persisted order kept, removed entries dropped, additions appended.
    """
    persisted_keys = {device.key for device in persisted}

    result = ReconcileResult()
    found_keys: set[str] = set()
    for device in found:
        if device.key in found_keys:
            continue
        found_keys.add(device.key)
        if device.key in persisted_keys:
            result.known.append(device)
        else:
            result.added.append(device)

    if remove_not_found:
        result.removed = [device for device in persisted if device.key not in found_keys]

    removed_keys = {device.key for device in result.removed}
    result.devices = [device for device in persisted if device.key not in removed_keys] + result.added
    return result


class DeviceRegistry:
    """In-memory device list with optional persistence.

    Args:
        devices: Initial device list (usually from the config file).
        saver: Called with the full new list whenever discovery changes it.
            Must raise PersistenceError on failure.
    """

    def __init__(
        self,
        devices: Iterable[DeviceRecord] = (),
        saver: Callable[[list[DeviceRecord]], None] | None = None,
    ) -> None:
        self._devices: list[DeviceRecord] = list(devices)
        self._saver = saver

    @property
    def devices(self) -> list[DeviceRecord]:
        """Snapshot of the configured devices."""
        return list(self._devices)

    def __len__(self) -> int:
        return len(self._devices)

    def find(self, name: str) -> DeviceRecord:
        """Look up a device by name (case-insensitive).

        Raises:
            DeviceNotFoundError: If no device has that name.
        """
        query = name.strip().lower()
        for device in self._devices:
            if device.name.lower() == query:
                return device
        available = ", ".join(device.name for device in self._devices) or "none"
        raise DeviceNotFoundError(f"Device '{name}' not found. Available devices: {available}")

    def apply_discovery(self, found: Iterable[DeviceRecord], remove_not_found: bool = False) -> ReconcileResult:
        """Merge a scan into the registry and persist if anything changed.

        The new list is saved before it replaces the in-memory one, so a
        failed save leaves the registry exactly as it was.

        Raises:
            PersistenceError: If the new list could not be saved.
        """
        result = reconcile(self._devices, found, remove_not_found)
        if not result.changed:
            return result

        if self._saver is not None:
            try:
                self._saver(result.devices)
            except PersistenceError:
                _LOGGER.error("Device list not saved; keeping %d configured device(s)", len(self._devices))
                raise

        self._devices = list(result.devices)
        _LOGGER.info(
            "Device list updated: %d added, %d removed, %d total",
            len(result.added),
            len(result.removed),
            len(self._devices),
        )
        return result


def format_discovery_report(
    subnet: str,
    found_count: int,
    result: ReconcileResult,
    config_name: str = "config.json",
) -> str:
    """Render the human-readable discovery summary."""
    lines = [
        f"Discovery complete on subnet {subnet}. Found {found_count} SoundTouch device(s).",
        "",
    ]

    if result.added:
        lines.append(f"Added ({len(result.added)}):")
        lines.extend(f"  + {device.name} ({device.ip})" for device in result.added)

    if result.known:
        lines.append(f"Already known ({len(result.known)}):")
        lines.extend(f"  = {device.name} ({device.ip})" for device in result.known)

    if result.removed:
        lines.append(f"Removed ({len(result.removed)}):")
        lines.extend(f"  - {device.name} ({device.ip})" for device in result.removed)

    if result.changed:
        lines.append(f"{config_name} has been updated.")
    else:
        lines.append(f"No changes made to {config_name}.")

    return "\n".join(lines)
