"""Allow running the MCP server with ``python -m pysoundtouch.mcp``."""

from .server import run

run()
