"""MCP server for Bose SoundTouch device control."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from ..api.constants import PRESET_MAX, PRESET_MIN
from ..exceptions import (
    InvalidSubnetFormatError,
    NoSubnetDetectedError,
    PersistenceError,
    SoundTouchConnectionError,
    SoundTouchError,
    SoundTouchTimeoutError,
)
from .context import MCPContext

_LOGGER = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _error_msg(err: Exception) -> str:
    """Format exception as user-friendly message."""
    if isinstance(err, SoundTouchConnectionError):
        return f"Connection failed: {err}"
    if isinstance(err, SoundTouchTimeoutError):
        return f"Timeout: {err}"
    if isinstance(err, InvalidSubnetFormatError):
        return f"Invalid subnet: {err}"
    if isinstance(err, NoSubnetDetectedError):
        return f"Could not determine subnet: {err}"
    if isinstance(err, PersistenceError):
        return f"Could not save configuration: {err}"
    if isinstance(err, SoundTouchError):
        return str(err)
    _LOGGER.exception("Unexpected error in tool call")
    return f"Error: {err}"


# ---------------------------------------------------------------------------
# Tool implementations
# ---------------------------------------------------------------------------


async def list_devices(ctx: MCPContext) -> str:
    devices = ctx.registry.devices
    if not devices:
        return (
            f"No devices configured. Run soundtouch_discover_devices or add devices to {ctx.config_path}."
        )
    lines = [f"  - {d.name} ({d.ip})" for d in devices]
    return "Configured devices:\n" + "\n".join(lines)


async def power_control(ctx: MCPContext, device_name: str, power_on: bool) -> str:
    try:
        device, client = ctx.get_client(device_name)
        if power_on:
            await client.power_on()
            return f"Device '{device.name}' powered on successfully."
        await client.power_off()
        return f"Device '{device.name}' powered off (standby mode)."
    except Exception as e:  # noqa: BLE001
        return _error_msg(e)


async def volume_step(ctx: MCPContext, device_name: str, up: bool) -> str:
    try:
        _, client = ctx.get_client(device_name)
        if up:
            await client.volume_up()
        else:
            await client.volume_down()
        volume = await client.get_volume()
        direction = "increased" if up else "decreased"
        return f"Volume {direction}. Current volume: {volume.target}"
    except Exception as e:  # noqa: BLE001
        return _error_msg(e)


async def set_volume(ctx: MCPContext, device_name: str, level: int) -> str:
    try:
        _, client = ctx.get_client(device_name)
        await client.set_volume(level)
        return f"Volume set to {level}."
    except Exception as e:  # noqa: BLE001
        return _error_msg(e)


async def get_volume(ctx: MCPContext, device_name: str) -> str:
    try:
        _, client = ctx.get_client(device_name)
        volume = await client.get_volume()
        text = f"Volume: {volume.target}"
        if volume.muted:
            text += " (muted)"
        return text
    except Exception as e:  # noqa: BLE001
        return _error_msg(e)


async def list_presets(ctx: MCPContext, device_name: str) -> str:
    try:
        device, client = ctx.get_client(device_name)
        presets = await client.get_presets()
        if not presets:
            return f"No presets configured for device '{device.name}'."
        lines = [f"  {p.id}. {p.name}" for p in presets]
        return f"Presets for '{device.name}':\n" + "\n".join(lines)
    except Exception as e:  # noqa: BLE001
        return _error_msg(e)


async def play_preset(ctx: MCPContext, device_name: str, preset: str) -> str:
    try:
        if not preset or not preset.strip():
            return "preset is required (a number 1-6 or a preset name)."
        device, client = ctx.get_client(device_name)

        identifier = preset.strip()
        if identifier.isdigit():
            number = int(identifier)
            if not PRESET_MIN <= number <= PRESET_MAX:
                return f"Preset number must be between {PRESET_MIN} and {PRESET_MAX}."
            await client.select_preset(number)
            return f"Playing preset {number} on '{device.name}'."

        match = await client.find_preset(identifier)
        if match is None:
            presets = await client.get_presets()
            available = ", ".join(f"{p.id}: {p.name}" for p in presets) or "none"
            return f"Preset '{identifier}' not found. Available presets: {available}"

        await client.select_preset(match.id)
        return f"Playing preset '{match.name}' (#{match.id}) on '{device.name}'."
    except Exception as e:  # noqa: BLE001
        return _error_msg(e)


async def bluetooth_pairing(ctx: MCPContext, device_name: str) -> str:
    try:
        device, client = ctx.get_client(device_name)
        await client.enter_bluetooth_pairing()
        return (
            f"Device '{device.name}' is now in Bluetooth pairing mode. "
            "Look for the device in your phone/tablet Bluetooth settings to pair."
        )
    except Exception as e:  # noqa: BLE001
        return _error_msg(e)


async def device_info(ctx: MCPContext, device_name: str) -> str:
    try:
        device, client = ctx.get_client(device_name)
        info = await client.get_device_info()
        parts = [
            f"Device Information for '{device.name}':",
            f"  Type: {info.type}",
            f"  Device ID: {info.device_id}",
            f"  IP Address: {device.ip}",
        ]
        if info.mac_address:
            parts.append(f"  MAC Address: {info.mac_address}")
        for component in info.components:
            if component.software_version:
                parts.append(f"  {component.category} version: {component.software_version}")
        return "\n".join(parts)
    except Exception as e:  # noqa: BLE001
        return _error_msg(e)


async def discover(ctx: MCPContext, subnet: str | None, remove_not_found: bool) -> str:
    try:
        return await ctx.discover(subnet, remove_not_found)
    except Exception as e:  # noqa: BLE001
        return _error_msg(e)


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


def _context_lifespan(ctx: MCPContext) -> Callable[[Any], AbstractAsyncContextManager[None]]:
    """Server lifespan that closes cached client sessions on shutdown."""

    @asynccontextmanager
    async def _lifespan(_server: Any) -> AsyncIterator[None]:
        try:
            yield
        finally:
            await ctx.close()

    return _lifespan


def _run_server() -> None:
    """Run the MCP server (stdio transport)."""
    from mcp.server.fastmcp import FastMCP

    ctx = MCPContext()
    log_level = ctx.log_level.upper() if ctx.log_level.upper() in _LOG_LEVELS else "INFO"
    # stdout carries the MCP transport; FastMCP sends logging to stderr
    mcp = FastMCP(
        "SoundTouch",
        json_response=True,
        log_level=log_level,
        lifespan=_context_lifespan(ctx),
    )

    @mcp.tool()
    async def soundtouch_list_devices() -> str:
        """List all configured SoundTouch devices with their IP addresses."""
        return await list_devices(ctx)

    @mcp.tool()
    async def soundtouch_power(device_name: str, power_on: bool) -> str:
        """Turn a SoundTouch device on or off (standby mode).

        device_name is the configured name (see soundtouch_list_devices).
        power_on: true to power on, false for standby.
        """
        return await power_control(ctx, device_name, power_on)

    @mcp.tool()
    async def soundtouch_volume_up(device_name: str) -> str:
        """Increase the volume of a SoundTouch device by one level."""
        return await volume_step(ctx, device_name, up=True)

    @mcp.tool()
    async def soundtouch_volume_down(device_name: str) -> str:
        """Decrease the volume of a SoundTouch device by one level."""
        return await volume_step(ctx, device_name, up=False)

    @mcp.tool()
    async def soundtouch_set_volume(device_name: str, level: int) -> str:
        """Set the volume of a SoundTouch device to a specific level (0-100)."""
        return await set_volume(ctx, device_name, level)

    @mcp.tool()
    async def soundtouch_get_volume(device_name: str) -> str:
        """Get the current volume (0-100) of a SoundTouch device."""
        return await get_volume(ctx, device_name)

    @mcp.tool()
    async def soundtouch_list_presets(device_name: str) -> str:
        """List all configured presets for a SoundTouch device."""
        return await list_presets(ctx, device_name)

    @mcp.tool()
    async def soundtouch_play_preset(device_name: str, preset: str) -> str:
        """Play a preset on a SoundTouch device by number (1-6) or by name."""
        return await play_preset(ctx, device_name, preset)

    @mcp.tool()
    async def soundtouch_bluetooth_pairing(device_name: str) -> str:
        """Enter Bluetooth pairing mode on a SoundTouch device."""
        return await bluetooth_pairing(ctx, device_name)

    @mcp.tool()
    async def soundtouch_device_info(device_name: str) -> str:
        """Get information about a SoundTouch device: type, device ID, IP, MAC."""
        return await device_info(ctx, device_name)

    @mcp.tool()
    async def soundtouch_discover_devices(subnet: str = "", remove_not_found: bool = False) -> str:
        """Discover SoundTouch devices on a local subnet and update the configured device list.

        New devices are added, existing ones are skipped, and devices not found
        are removed when remove_not_found is true.

        subnet: CIDR (e.g. "192.168.1.0/24") or short form ("192.168.1").
        Omit to scan the host's own subnet.
        """
        return await discover(ctx, subnet, remove_not_found)

    mcp.run()


def run() -> None:
    """Entry point for soundtouch-mcp console script."""
    _run_server()
