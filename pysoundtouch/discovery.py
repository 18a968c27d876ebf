"""Device discovery for Bose SoundTouch speakers.

SoundTouch speakers answer GET /info on port 8090 with an <info> document.
Discovery enumerates every host address of a subnet and probes them all
concurrently with a short timeout; anything that answers with a named <info>
root is a SoundTouch device.

Probing is best effort: an unreachable host, an HTTP error, a malformed body
or a foreign XML document all mean "not a device" and are never raised.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from dataclasses import dataclass
from ipaddress import IPv4Address
from typing import Any

import aiohttp
from aiohttp import ClientSession

from .api.constants import API_ENDPOINT_INFO, DEFAULT_PORT, PROBE_TIMEOUT
from .api.parser import parse_info_name, parse_xml
from .network import Subnet, detect_host_subnet, enumerate_hosts, parse_subnet

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "DeviceRecord",
    "discover_devices",
    "probe_host",
    "resolve_subnet",
    "scan_subnet",
]


@dataclass(frozen=True)
class DeviceRecord:
    """A named SoundTouch device at a fixed address."""

    name: str
    ip: str

    @property
    def key(self) -> str:
        """Identity key: the address, case-folded."""
        return self.ip.strip().lower()

    def to_dict(self) -> dict[str, Any]:
        """Convert to the dictionary stored in the config file."""
        return {"name": self.name, "ip": self.ip}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DeviceRecord:
        """Build from a config file entry."""
        return cls(name=str(data.get("name") or ""), ip=str(data.get("ip") or ""))

    def __str__(self) -> str:
        return f"{self.name} ({self.ip})"


def resolve_subnet(subnet: str | None) -> Subnet:
    """Turn the user-supplied subnet text into a Subnet.

    Blank input means "the subnet this host is on".

    Raises:
        InvalidSubnetFormatError: If the text cannot be parsed.
        NoSubnetDetectedError: If auto-detection finds no usable interface.
    """
    if subnet is None or not subnet.strip():
        return detect_host_subnet()
    return parse_subnet(subnet)


async def probe_host(
    session: ClientSession,
    ip: str,
    timeout: float = PROBE_TIMEOUT,
    port: int = DEFAULT_PORT,
) -> DeviceRecord | None:
    """Check whether *ip* is a SoundTouch device.

    Returns:
        DeviceRecord with the advertised name, or None for every kind of miss.
    """
    url = f"http://{ip}:{port}{API_ENDPOINT_INFO}"
    try:
        async with asyncio.timeout(timeout):
            resp = await session.request("GET", url)
            async with resp:
                if not 200 <= resp.status < 300:
                    _LOGGER.debug("Probe %s: HTTP %d", ip, resp.status)
                    return None
                text = await resp.text()
        name = parse_info_name(parse_xml(text, endpoint=API_ENDPOINT_INFO))
    except Exception as err:  # noqa: BLE001
        _LOGGER.debug("Probe %s: %s", ip, err or type(err).__name__)
        return None

    if not name:
        _LOGGER.debug("Probe %s: not a SoundTouch /info response", ip)
        return None
    return DeviceRecord(name=name, ip=ip)


async def scan_subnet(
    subnet: Subnet,
    *,
    timeout: float = PROBE_TIMEOUT,
    max_concurrency: int | None = None,
    session: ClientSession | None = None,
    port: int = DEFAULT_PORT,
) -> list[DeviceRecord]:
    """Probe every host of *subnet* concurrently.

    Args:
        subnet: Range to scan.
        timeout: Per-probe timeout in seconds.
        max_concurrency: Cap on in-flight probes. None or 0 probes every host
            at once.
        session: Optional aiohttp session; a dedicated one with an unlimited
            connector is created (and closed) when omitted.
        port: API port to probe.

    Returns:
        Matching devices, unique by address, in no particular order.

    Cancelling the awaiting task cancels every in-flight probe and raises
    asyncio.CancelledError; no partial result is returned.
    """
    owns_session = session is None
    if session is None:
        session = ClientSession(connector=aiohttp.TCPConnector(limit=0))

    found: list[DeviceRecord] = []

    async def _probe_all() -> None:
        matches = await asyncio.gather(
            *(probe_host(session, str(ip), timeout, port) for ip in enumerate_hosts(subnet))
        )
        found.extend(match for match in matches if match is not None)

    async def _worker(hosts: Iterator[IPv4Address]) -> None:
        # Workers share one host iterator; next() never runs concurrently
        for ip in hosts:
            match = await probe_host(session, str(ip), timeout, port)
            if match is not None:
                found.append(match)

    try:
        if max_concurrency and max_concurrency > 0:
            hosts = enumerate_hosts(subnet)
            workers = min(max_concurrency, subnet.host_count)
            await asyncio.gather(*(_worker(hosts) for _ in range(workers)))
        else:
            await _probe_all()
    finally:
        if owns_session:
            await session.close()

    unique: list[DeviceRecord] = []
    seen: set[str] = set()
    for device in found:
        if device.key not in seen:
            unique.append(device)
            seen.add(device.key)
    return unique


async def discover_devices(
    subnet: str | None = None,
    *,
    timeout: float = PROBE_TIMEOUT,
    max_concurrency: int | None = None,
    session: ClientSession | None = None,
) -> tuple[Subnet, list[DeviceRecord]]:
    """Resolve *subnet* (blank = auto-detect) and scan it.

    Returns:
        The resolved subnet and the devices found on it.

    Raises:
        InvalidSubnetFormatError: If the subnet text cannot be parsed.
        NoSubnetDetectedError: If auto-detection finds no usable interface.
    """
    resolved = resolve_subnet(subnet)
    _LOGGER.info(
        "Scanning %s (%d hosts, timeout=%.2fs, concurrency=%s)...",
        resolved,
        resolved.host_count,
        timeout,
        max_concurrency or "unbounded",
    )
    devices = await scan_subnet(
        resolved,
        timeout=timeout,
        max_concurrency=max_concurrency,
        session=session,
    )
    _LOGGER.info("Discovery complete on %s: found %d device(s)", resolved, len(devices))
    return resolved, devices
