"""SoundTouch API constants.

Endpoint paths, key names and timeouts for the SoundTouch web services API
(HTTP on port 8090, XML bodies).
"""

from __future__ import annotations

from typing import Final

DEFAULT_PORT: Final = 8090
DEFAULT_TIMEOUT: Final = 5.0

# Discovery probe timeout (seconds); keeps a /24 scan well under a second
PROBE_TIMEOUT: Final = 0.5

# In-flight probe cap used by the MCP server; stays below common fd limits
DEFAULT_SCAN_CONCURRENCY: Final = 256

# Sender attribute expected by the firmware for /key requests
KEY_SENDER: Final = "Gabbo"

# Gap between key press and release (seconds)
KEY_RELEASE_DELAY: Final = 0.1

XML_CONTENT_TYPE: Final = "text/xml"

# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

API_ENDPOINT_INFO: Final = "/info"
API_ENDPOINT_KEY: Final = "/key"
API_ENDPOINT_STANDBY: Final = "/standby"
API_ENDPOINT_VOLUME: Final = "/volume"
API_ENDPOINT_PRESETS: Final = "/presets"
API_ENDPOINT_BLUETOOTH_PAIRING: Final = "/enterBluetoothPairing"

# Root element of a valid /info response
INFO_ROOT_TAG: Final = "info"

# ---------------------------------------------------------------------------
# Keys
# ---------------------------------------------------------------------------

KEY_POWER: Final = "POWER"
KEY_VOLUME_UP: Final = "VOLUME_UP"
KEY_VOLUME_DOWN: Final = "VOLUME_DOWN"
KEY_PRESET_TEMPLATE: Final = "PRESET_{}"

# ---------------------------------------------------------------------------
# Limits
# ---------------------------------------------------------------------------

VOLUME_MIN: Final = 0
VOLUME_MAX: Final = 100
PRESET_MIN: Final = 1
PRESET_MAX: Final = 6
