"""Main SoundTouch client facade.

This module provides the SoundTouchClient class that composes all API mixins
into a single interface for controlling one Bose SoundTouch speaker.
"""

from __future__ import annotations

from aiohttp import ClientSession

from .api.base import BaseSoundTouchClient
from .api.bluetooth import BluetoothAPI
from .api.constants import DEFAULT_PORT, DEFAULT_TIMEOUT
from .api.device import DeviceAPI
from .api.keys import KeyAPI
from .api.preset import PresetAPI
from .api.volume import VolumeAPI
from .exceptions import (
    InvalidParameterError,
    SoundTouchConnectionError,
    SoundTouchError,
    SoundTouchInvalidDataError,
    SoundTouchRequestError,
    SoundTouchResponseError,
    SoundTouchTimeoutError,
)


class SoundTouchClient(
    KeyAPI,
    DeviceAPI,
    VolumeAPI,
    PresetAPI,
    BluetoothAPI,
    BaseSoundTouchClient,
):
    """SoundTouch HTTP/XML API client.

    Each method issues fixed request/response exchanges against the device's
    web services API on port 8090. Failures raise immediately; nothing is
    retried.

    Example:
        ```python
        import asyncio
        from pysoundtouch import SoundTouchClient

        async def main():
            async with SoundTouchClient("192.168.1.20") as client:
                info = await client.get_device_info()
                print(info.name, info.type)
                await client.set_volume(25)
                await client.select_preset(1)

        asyncio.run(main())
        ```

    Args:
        host: Device IP address or hostname.
        port: API port (default: 8090).
        timeout: Network timeout in seconds (default: 5.0).
        session: Optional shared aiohttp ClientSession for connection pooling.
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        session: ClientSession | None = None,
    ) -> None:
        super().__init__(host, port, timeout, session)

    def __repr__(self) -> str:
        return f"SoundTouchClient(host={self.host!r}, port={self.port})"


# Export exceptions for convenience
__all__ = [
    "SoundTouchClient",
    "SoundTouchError",
    "SoundTouchRequestError",
    "SoundTouchResponseError",
    "SoundTouchTimeoutError",
    "SoundTouchConnectionError",
    "SoundTouchInvalidDataError",
    "InvalidParameterError",
]
