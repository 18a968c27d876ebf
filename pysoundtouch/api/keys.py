"""Remote key emulation for SoundTouch HTTP client.

Every button on the physical remote is sent to /key as a press followed by a
release. This mixin covers the keys the server exposes: power, volume steps
and the six preset buttons.
"""

from __future__ import annotations

import asyncio
from xml.sax.saxutils import escape

from ..exceptions import InvalidParameterError
from .constants import (
    API_ENDPOINT_KEY,
    KEY_POWER,
    KEY_PRESET_TEMPLATE,
    KEY_RELEASE_DELAY,
    KEY_SENDER,
    KEY_VOLUME_DOWN,
    KEY_VOLUME_UP,
    PRESET_MAX,
    PRESET_MIN,
)


def _key_body(key: str, state: str) -> str:
    return f'<key state="{state}" sender="{KEY_SENDER}">{escape(key)}</key>'


class KeyAPI:
    """Key press/release helpers."""

    async def press_key(self, key: str) -> None:
        """Send a press and a release of *key* to the device.

        Args:
            key: Key name as understood by the firmware (e.g. "POWER").

        Raises:
            SoundTouchError: If either request fails.
        """
        await self._post_xml(API_ENDPOINT_KEY, _key_body(key, "press"))  # type: ignore[attr-defined]
        await asyncio.sleep(KEY_RELEASE_DELAY)
        await self._post_xml(API_ENDPOINT_KEY, _key_body(key, "release"))  # type: ignore[attr-defined]

    async def power_on(self) -> None:
        """Toggle power with the POWER key (wakes a device in standby)."""
        await self.press_key(KEY_POWER)

    async def volume_up(self) -> None:
        """Raise volume by one step."""
        await self.press_key(KEY_VOLUME_UP)

    async def volume_down(self) -> None:
        """Lower volume by one step."""
        await self.press_key(KEY_VOLUME_DOWN)

    async def select_preset(self, preset_number: int) -> None:
        """Play one of the six presets.

        Raises:
            InvalidParameterError: If preset_number is not 1-6.
        """
        if not PRESET_MIN <= preset_number <= PRESET_MAX:
            raise InvalidParameterError(f"Preset number must be between {PRESET_MIN} and {PRESET_MAX}")
        await self.press_key(KEY_PRESET_TEMPLATE.format(preset_number))
