"""MCP server configuration: file + env vars."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from ..api.constants import DEFAULT_SCAN_CONCURRENCY, DEFAULT_TIMEOUT, PROBE_TIMEOUT
from ..discovery import DeviceRecord
from ..exceptions import PersistenceError

_LOGGER = logging.getLogger(__name__)

DEVICES_KEY = "devices"


def _default_config_path() -> Path:
    """Default config file path (XDG ~/.config/soundtouch/config.json)."""
    if os.name == "nt":
        base = Path(os.environ.get("APPDATA", os.path.expanduser("~")))
    else:
        base = Path(os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config")))
    return base / "soundtouch" / "config.json"


def config_path() -> Path:
    """Config file in use: SOUNDTOUCH_CONFIG_FILE or the default path."""
    path = os.environ.get("SOUNDTOUCH_CONFIG_FILE")
    return Path(path) if path else _default_config_path()


def _parse_devices(raw: Any) -> list[DeviceRecord]:
    devices: list[DeviceRecord] = []
    seen: set[str] = set()
    if not isinstance(raw, list):
        return devices
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        device = DeviceRecord.from_dict(entry)
        if not device.ip or device.key in seen:
            _LOGGER.warning("Ignoring invalid or duplicate device entry: %s", entry)
            continue
        seen.add(device.key)
        devices.append(device)
    return devices


def _optional_int(value: Any) -> int | None:
    if value is None:
        return None
    return int(value)


def load_config() -> dict:
    """Load config from file and env vars. Env vars override file values.

    Config file: SOUNDTOUCH_CONFIG_FILE or ~/.config/soundtouch/config.json
    Keys: devices, timeout, probe_timeout, scan_concurrency, log_level

    Env overrides: SOUNDTOUCH_TIMEOUT, SOUNDTOUCH_PROBE_TIMEOUT,
    SOUNDTOUCH_SCAN_CONCURRENCY, SOUNDTOUCH_LOG_LEVEL

    scan_concurrency defaults to 256; null or 0 probes every host at once.
    """
    cfg: dict = {
        "config_path": config_path(),
        "devices": [],
        "timeout": DEFAULT_TIMEOUT,
        "probe_timeout": PROBE_TIMEOUT,
        "scan_concurrency": DEFAULT_SCAN_CONCURRENCY,
        "log_level": "INFO",
    }

    # Load from file if present
    path = cfg["config_path"]
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                file_cfg = json.load(f)
            cfg["devices"] = _parse_devices(file_cfg.get(DEVICES_KEY))
            cfg["timeout"] = float(file_cfg.get("timeout", DEFAULT_TIMEOUT))
            cfg["probe_timeout"] = float(file_cfg.get("probe_timeout", PROBE_TIMEOUT))
            cfg["scan_concurrency"] = _optional_int(file_cfg.get("scan_concurrency", DEFAULT_SCAN_CONCURRENCY))
            cfg["log_level"] = str(file_cfg.get("log_level", "INFO"))
        except (json.JSONDecodeError, OSError, AttributeError, TypeError, ValueError) as err:
            _LOGGER.warning("Could not read config file %s: %s", path, err)

    # Env overrides
    if env := os.environ.get("SOUNDTOUCH_TIMEOUT"):
        try:
            cfg["timeout"] = float(env)
        except ValueError:
            pass
    if env := os.environ.get("SOUNDTOUCH_PROBE_TIMEOUT"):
        try:
            cfg["probe_timeout"] = float(env)
        except ValueError:
            pass
    if env := os.environ.get("SOUNDTOUCH_SCAN_CONCURRENCY"):
        try:
            cfg["scan_concurrency"] = int(env)
        except ValueError:
            pass
    if env := os.environ.get("SOUNDTOUCH_LOG_LEVEL"):
        cfg["log_level"] = env.upper()

    return cfg


def save_devices(path: Path, devices: list[DeviceRecord]) -> None:
    """Rewrite the device list in the config file, keeping every other key.

    The document is written to a temporary file next to *path* and moved into
    place, so readers never see a half-written file.

    Raises:
        PersistenceError: If the existing document cannot be read or parsed,
            or the new one cannot be written.
    """
    document: dict[str, Any] = {}
    if path.exists():
        try:
            with open(path, encoding="utf-8") as f:
                loaded = json.load(f)
        except (ValueError, OSError) as err:
            # ValueError covers JSONDecodeError and UnicodeDecodeError
            raise PersistenceError(f"Could not read {path}: {err}") from err
        if not isinstance(loaded, dict):
            raise PersistenceError(f"Could not read {path}: top-level JSON value is not an object")
        document = loaded

    document[DEVICES_KEY] = [device.to_dict() for device in devices]

    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
            delete=False,
        ) as f:
            tmp_name = f.name
            json.dump(document, f, indent=2)
            f.write("\n")
        os.replace(tmp_name, path)
    except OSError as err:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        raise PersistenceError(f"Could not write {path}: {err}") from err

    _LOGGER.info("Saved %d device(s) to %s", len(devices), path)
