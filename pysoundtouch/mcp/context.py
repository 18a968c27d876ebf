"""MCP server context: device registry, client cache, config."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from pathlib import Path

from ..client import SoundTouchClient
from ..discovery import DeviceRecord, discover_devices
from ..registry import DeviceRegistry, ReconcileResult, format_discovery_report
from .config import load_config, save_devices

_LOGGER = logging.getLogger(__name__)


@dataclass
class MCPContext:
    """Shared context for MCP tools: device registry, client cache, config."""

    registry: DeviceRegistry
    clients: dict[str, SoundTouchClient]
    config_path: Path
    timeout: float
    probe_timeout: float
    scan_concurrency: int | None
    log_level: str

    def __init__(self) -> None:
        cfg = load_config()
        self.config_path = cfg["config_path"]
        self.timeout = cfg["timeout"]
        self.probe_timeout = cfg["probe_timeout"]
        self.scan_concurrency = cfg["scan_concurrency"]
        self.log_level = cfg["log_level"]
        self.registry = DeviceRegistry(cfg["devices"], saver=partial(save_devices, self.config_path))
        self.clients = {}
        _LOGGER.debug("Loaded %d device(s) from %s", len(self.registry), self.config_path)

    def get_client(self, device_name: str) -> tuple[DeviceRecord, SoundTouchClient]:
        """Resolve a configured device name to its record and a client.

        Raises:
            DeviceNotFoundError: If the name is not configured.
        """
        device = self.registry.find(device_name)
        client = self.clients.get(device.key)
        if client is None:
            client = SoundTouchClient(host=device.ip, timeout=self.timeout)
            self.clients[device.key] = client
        return device, client

    async def discover(self, subnet: str | None, remove_not_found: bool = False) -> str:
        """Scan a subnet, merge the result into the registry and return the report.

        Raises:
            InvalidSubnetFormatError, NoSubnetDetectedError: From subnet resolution.
            PersistenceError: If the updated device list could not be saved.
        """
        resolved, found = await discover_devices(
            subnet,
            timeout=self.probe_timeout,
            max_concurrency=self.scan_concurrency,
        )
        result: ReconcileResult = self.registry.apply_discovery(found, remove_not_found)
        for device in result.removed:
            client = self.clients.pop(device.key, None)
            if client is not None:
                await client.close()
        return format_discovery_report(str(resolved), len(found), result, self.config_path.name)

    async def close(self) -> None:
        """Close every cached client session."""
        for client in self.clients.values():
            await client.close()
        self.clients.clear()
