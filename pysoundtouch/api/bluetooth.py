"""Bluetooth helpers."""

from __future__ import annotations

from .constants import API_ENDPOINT_BLUETOOTH_PAIRING


class BluetoothAPI:
    """Bluetooth pairing."""

    async def enter_bluetooth_pairing(self) -> None:
        """Switch the device into Bluetooth pairing mode."""
        await self._request(API_ENDPOINT_BLUETOOTH_PAIRING)  # type: ignore[attr-defined]
