"""XML response parsing for the SoundTouch API.

Pure functions that turn response bodies into models. Nothing here performs
I/O, so the mixins and the discovery prober share the same parsing rules.
"""

from __future__ import annotations

import logging
import xml.etree.ElementTree as ET

from ..exceptions import SoundTouchInvalidDataError
from ..models import Component, DeviceInfo, Preset, Volume
from .constants import INFO_ROOT_TAG, PRESET_MAX, PRESET_MIN

_LOGGER = logging.getLogger(__name__)

__all__ = [
    "local_name",
    "parse_device_info",
    "parse_info_name",
    "parse_presets",
    "parse_volume",
    "parse_xml",
]


def parse_xml(text: str, endpoint: str | None = None) -> ET.Element:
    """Parse a response body into its root element.

    Raises:
        SoundTouchInvalidDataError: If the body is not well-formed XML.
    """
    try:
        return ET.fromstring(text)
    except ET.ParseError as err:
        where = f" from {endpoint}" if endpoint else ""
        raise SoundTouchInvalidDataError(f"Malformed XML{where}: {err}") from err


def local_name(tag: str) -> str:
    """Strip any '{namespace}' prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


def _text(element: ET.Element | None, path: str) -> str | None:
    if element is None:
        return None
    value = element.findtext(path)
    if value is None:
        return None
    value = value.strip()
    return value or None


def _int(value: str | None) -> int:
    try:
        return int(value) if value is not None else 0
    except ValueError:
        return 0


def parse_info_name(root: ET.Element) -> str | None:
    """Return the advertised name if *root* is a SoundTouch /info document."""
    if local_name(root.tag) != INFO_ROOT_TAG:
        return None
    return _text(root, "name")


def parse_device_info(root: ET.Element) -> DeviceInfo:
    """Build DeviceInfo from a /info document; missing fields become 'Unknown'."""
    components = []
    for component in root.findall("components/component"):
        category = _text(component, "componentCategory")
        if not category:
            continue
        components.append(
            Component(
                category=category,
                software_version=_text(component, "softwareVersion"),
                serial_number=_text(component, "serialNumber"),
            )
        )

    return DeviceInfo(
        device_id=root.get("deviceID") or "Unknown",
        name=_text(root, "name") or "Unknown",
        type=_text(root, "type") or "Unknown",
        mac_address=_text(root.find("networkInfo"), "macAddress"),
        components=components,
    )


def parse_volume(root: ET.Element) -> Volume:
    """Build Volume from a /volume document. Non-numeric levels read as 0."""
    muted = (_text(root, "muteenabled") or "false").lower() == "true"
    return Volume(
        target=_int(_text(root, "targetvolume")),
        actual=_int(_text(root, "actualvolume")),
        muted=muted,
    )


def parse_presets(root: ET.Element) -> list[Preset]:
    """Build the preset list from a /presets document.

    Entries without an id, a ContentItem or an itemName are skipped, as are
    ids outside the six hardware slots.
    """
    presets: list[Preset] = []
    for element in root.findall("preset"):
        preset_id = element.get("id")
        item = element.find("ContentItem")
        name = _text(item, "itemName")
        if preset_id is None or item is None or name is None:
            continue
        try:
            number = int(preset_id)
        except ValueError:
            _LOGGER.debug("Ignoring preset with non-numeric id %r", preset_id)
            continue
        if not PRESET_MIN <= number <= PRESET_MAX:
            _LOGGER.debug("Ignoring preset with out-of-range id %d", number)
            continue
        presets.append(Preset(id=number, name=name, source=item.get("source") or None))
    return presets
