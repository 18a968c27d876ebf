"""IPv4 subnet helpers used by discovery.

Parses the subnet forms accepted by the discovery tool, detects the host's
own subnet from its network interfaces, and enumerates the host addresses
that should be probed.

All arithmetic is done on the 32-bit integer form of the address so the
results are independent of how the address was written.
"""

from __future__ import annotations

import ipaddress
import logging
import socket
from collections.abc import Iterator
from dataclasses import dataclass

import psutil

from .exceptions import InvalidSubnetFormatError, NoSubnetDetectedError

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "MAX_PREFIX_LENGTH",
    "MIN_PREFIX_LENGTH",
    "Subnet",
    "detect_host_subnet",
    "enumerate_hosts",
    "mask_from_prefix",
    "network_address",
    "parse_subnet",
    "prefix_from_mask",
]

# /31 and /32 have no hosts between network and broadcast
MIN_PREFIX_LENGTH = 1
MAX_PREFIX_LENGTH = 30

# Short forms ("192.168.1" and "192.168.1.10") imply a /24
DEFAULT_PREFIX_LENGTH = 24

_ALL_ONES = 0xFFFFFFFF


@dataclass(frozen=True)
class Subnet:
    """An IPv4 range to scan, always stored as its network address."""

    network_address: ipaddress.IPv4Address
    prefix_length: int

    def __post_init__(self) -> None:
        if not MIN_PREFIX_LENGTH <= self.prefix_length <= MAX_PREFIX_LENGTH:
            raise InvalidSubnetFormatError(
                f"Invalid prefix length: '{self.prefix_length}'. "
                f"Must be {MIN_PREFIX_LENGTH}-{MAX_PREFIX_LENGTH}."
            )
        if network_address(self.network_address, self.prefix_length) != self.network_address:
            raise InvalidSubnetFormatError(f"{self.network_address} has host bits set for /{self.prefix_length}")

    @property
    def broadcast_address(self) -> ipaddress.IPv4Address:
        """Address with every host bit set."""
        host_bits = _ALL_ONES >> self.prefix_length
        return ipaddress.IPv4Address(int(self.network_address) | host_bits)

    @property
    def host_count(self) -> int:
        """Number of usable host addresses (network and broadcast excluded)."""
        return 2 ** (32 - self.prefix_length) - 2

    def __str__(self) -> str:
        return f"{self.network_address}/{self.prefix_length}"


def mask_from_prefix(prefix_length: int) -> bytes:
    """Build the 4-byte network mask for a prefix length (0-32)."""
    if not 0 <= prefix_length <= 32:
        raise ValueError(f"Prefix length must be 0-32, got {prefix_length}")
    mask = (_ALL_ONES << (32 - prefix_length)) & _ALL_ONES
    return mask.to_bytes(4, "big")


def prefix_from_mask(mask: bytes | str) -> int:
    """Count the set bits of a network mask.

    Accepts the packed 4-byte form or dotted-quad text. Contiguity of the
    bits is not checked.
    """
    if isinstance(mask, str):
        mask = ipaddress.IPv4Address(mask).packed
    return sum(bin(octet).count("1") for octet in mask)


def network_address(address: ipaddress.IPv4Address | str, prefix_length: int) -> ipaddress.IPv4Address:
    """Return the address with all host bits cleared."""
    mask = int.from_bytes(mask_from_prefix(prefix_length), "big")
    return ipaddress.IPv4Address(int(ipaddress.IPv4Address(address)) & mask)


def parse_subnet(text: str) -> Subnet:
    """Parse a subnet in CIDR or short form.

    Accepted forms:
        - "192.168.1.0/24" (CIDR)
        - "192.168.1" (three octets, treated as 192.168.1.0/24)
        - "192.168.1.0" (four octets without prefix, treated as /24)

    Host bits in the address are cleared, so "192.168.1.77/24" becomes
    192.168.1.0/24.

    Raises:
        InvalidSubnetFormatError: If the text cannot be parsed or the prefix
            is outside 1-30.
    """
    subnet = text.strip()

    if "/" not in subnet:
        parts = subnet.split(".")
        if len(parts) == 3:
            subnet = f"{subnet}.0/{DEFAULT_PREFIX_LENGTH}"
        elif len(parts) == 4:
            subnet = f"{subnet}/{DEFAULT_PREFIX_LENGTH}"
        else:
            raise InvalidSubnetFormatError(
                f"Cannot parse subnet '{subnet}'. Expected CIDR (e.g. 192.168.1.0/24)."
            )

    ip_part, _, prefix_part = subnet.partition("/")

    try:
        address = ipaddress.IPv4Address(ip_part.strip())
    except ValueError as err:
        raise InvalidSubnetFormatError(f"Invalid IP in subnet: '{ip_part}'") from err

    # Plain ASCII decimal only; int() would also take "1_6" or full-width digits
    if not (prefix_part.isascii() and prefix_part.isdigit()):
        raise InvalidSubnetFormatError(
            f"Invalid prefix length: '{prefix_part}'. Must be {MIN_PREFIX_LENGTH}-{MAX_PREFIX_LENGTH}."
        )
    prefix_length = int(prefix_part)

    if not MIN_PREFIX_LENGTH <= prefix_length <= MAX_PREFIX_LENGTH:
        raise InvalidSubnetFormatError(
            f"Invalid prefix length: '{prefix_part}'. Must be {MIN_PREFIX_LENGTH}-{MAX_PREFIX_LENGTH}."
        )

    return Subnet(network_address(address, prefix_length), prefix_length)


def detect_host_subnet() -> Subnet:
    """Derive the subnet of the first active, non-loopback IPv4 interface.

    Raises:
        NoSubnetDetectedError: If no interface qualifies.
    """
    stats = psutil.net_if_stats()

    for iface, addrs in psutil.net_if_addrs().items():
        iface_stats = stats.get(iface)
        if iface_stats is None or not iface_stats.isup:
            continue

        for addr in addrs:
            if addr.family != socket.AF_INET or not addr.address:
                continue
            if not addr.netmask or addr.netmask == "0.0.0.0":
                continue

            try:
                ip = ipaddress.IPv4Address(addr.address)
                prefix_length = prefix_from_mask(addr.netmask)
            except ValueError:
                _LOGGER.debug("Skipping unparseable address %s/%s on %s", addr.address, addr.netmask, iface)
                continue

            if ip.is_loopback:
                continue
            if not MIN_PREFIX_LENGTH <= prefix_length <= MAX_PREFIX_LENGTH:
                _LOGGER.debug("Skipping %s on %s: /%d has no scannable hosts", ip, iface, prefix_length)
                continue

            subnet = Subnet(network_address(ip, prefix_length), prefix_length)
            _LOGGER.debug("Detected host subnet %s from interface %s (%s)", subnet, iface, ip)
            return subnet

    raise NoSubnetDetectedError(
        "Could not detect host subnet. Please provide a subnet explicitly (e.g. 192.168.1.0/24)."
    )


def enumerate_hosts(subnet: Subnet) -> Iterator[ipaddress.IPv4Address]:
    """Yield every address between the network and broadcast address, ascending."""
    first = int(subnet.network_address) + 1
    last = int(subnet.broadcast_address)
    for value in range(first, last):
        yield ipaddress.IPv4Address(value)
