"""Pydantic models for SoundTouch API responses.

The device speaks XML; the parser module turns each response into one of
these models so callers never touch ElementTree nodes directly.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

__all__ = [
    "Component",
    "DeviceInfo",
    "Preset",
    "Volume",
]


class Component(BaseModel):
    """Hardware/software component reported by /info."""

    category: str
    software_version: str | None = None
    serial_number: str | None = None


class DeviceInfo(BaseModel):
    """Device identity as returned by GET /info."""

    device_id: str = "Unknown"
    name: str = "Unknown"
    type: str = "Unknown"
    mac_address: str | None = None
    components: list[Component] = Field(default_factory=list)


class Preset(BaseModel):
    """One of the six preset slots."""

    id: int = Field(ge=1, le=6)
    name: str
    source: str | None = None


class Volume(BaseModel):
    """Volume state as returned by GET /volume."""

    target: int = 0
    actual: int = 0
    muted: bool = False
