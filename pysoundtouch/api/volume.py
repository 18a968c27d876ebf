"""Absolute volume helpers.

Step changes go through the remote keys (see keys.py); this mixin reads and
writes the level directly via /volume.
"""

from __future__ import annotations

from ..exceptions import InvalidParameterError
from ..models import Volume
from .constants import API_ENDPOINT_VOLUME, VOLUME_MAX, VOLUME_MIN
from .parser import parse_volume


class VolumeAPI:
    """Volume get/set."""

    async def get_volume(self) -> Volume:
        """Read the current target/actual volume and mute state."""
        root = await self._request_xml(API_ENDPOINT_VOLUME)  # type: ignore[attr-defined]
        return parse_volume(root)

    async def set_volume(self, level: int) -> None:
        """Set volume to an absolute level.

        Args:
            level: Volume level 0-100.

        Raises:
            InvalidParameterError: If level is outside 0-100.
            SoundTouchError: If the request fails.
        """
        if not VOLUME_MIN <= level <= VOLUME_MAX:
            raise InvalidParameterError(f"Volume level must be between {VOLUME_MIN} and {VOLUME_MAX}")
        await self._post_xml(API_ENDPOINT_VOLUME, f"<volume>{level}</volume>")  # type: ignore[attr-defined]
