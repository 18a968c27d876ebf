"""MCP server for Bose SoundTouch device control.

Exposes pysoundtouch as an MCP server with tools for power, volume, presets,
Bluetooth pairing, device info and subnet discovery.
Install with: pip install pysoundtouch[mcp]

Run with: python -m pysoundtouch.mcp
Or: soundtouch-mcp (after pip install)
"""

from __future__ import annotations

from .server import run

__all__ = ["run"]
