"""Device identity and standby helpers."""

from __future__ import annotations

from ..models import DeviceInfo
from .constants import API_ENDPOINT_INFO, API_ENDPOINT_STANDBY
from .parser import parse_device_info


class DeviceAPI:
    """Device information and power-off."""

    async def get_device_info(self) -> DeviceInfo:
        """Get device information from /info.

        Returns:
            DeviceInfo model; fields the device omits read "Unknown".

        Raises:
            SoundTouchError: If the request fails or the body is not XML.
        """
        root = await self._request_xml(API_ENDPOINT_INFO)  # type: ignore[attr-defined]
        return parse_device_info(root)

    async def power_off(self) -> None:
        """Put the device into standby."""
        await self._request(API_ENDPOINT_STANDBY)  # type: ignore[attr-defined]
