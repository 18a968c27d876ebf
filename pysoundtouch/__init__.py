"""pysoundtouch - async client and discovery for Bose SoundTouch speakers."""

from __future__ import annotations

from .client import SoundTouchClient
from .discovery import DeviceRecord, discover_devices, probe_host, resolve_subnet, scan_subnet
from .exceptions import (
    DeviceNotFoundError,
    InvalidParameterError,
    InvalidSubnetFormatError,
    NoSubnetDetectedError,
    PersistenceError,
    SoundTouchConnectionError,
    SoundTouchError,
    SoundTouchInvalidDataError,
    SoundTouchRequestError,
    SoundTouchResponseError,
    SoundTouchTimeoutError,
)
from .models import Component, DeviceInfo, Preset, Volume
from .network import Subnet, detect_host_subnet, enumerate_hosts, parse_subnet
from .registry import DeviceRegistry, ReconcileResult, reconcile

__version__ = "0.1.0"

__all__ = [
    "Component",
    "DeviceInfo",
    "DeviceNotFoundError",
    "DeviceRecord",
    "DeviceRegistry",
    "InvalidParameterError",
    "InvalidSubnetFormatError",
    "NoSubnetDetectedError",
    "PersistenceError",
    "Preset",
    "ReconcileResult",
    "SoundTouchClient",
    "SoundTouchConnectionError",
    "SoundTouchError",
    "SoundTouchInvalidDataError",
    "SoundTouchRequestError",
    "SoundTouchResponseError",
    "SoundTouchTimeoutError",
    "Subnet",
    "Volume",
    "detect_host_subnet",
    "discover_devices",
    "enumerate_hosts",
    "parse_subnet",
    "probe_host",
    "reconcile",
    "resolve_subnet",
    "scan_subnet",
]
