"""Preset listing and lookup."""

from __future__ import annotations

from ..models import Preset
from .constants import API_ENDPOINT_PRESETS
from .parser import parse_presets


class PresetAPI:
    """Preset helpers.

    Playing a preset is a key press and lives in KeyAPI.select_preset.
    """

    async def get_presets(self) -> list[Preset]:
        """Get the configured presets (empty slots are omitted)."""
        root = await self._request_xml(API_ENDPOINT_PRESETS)  # type: ignore[attr-defined]
        return parse_presets(root)

    async def find_preset(self, identifier: str) -> Preset | None:
        """Resolve a preset by name.

        An exact case-insensitive name match wins over a substring match; among
        substring matches the lowest slot number wins.
        """
        query = identifier.strip().lower()
        if not query:
            return None

        presets = await self.get_presets()
        for preset in presets:
            if preset.name.lower() == query:
                return preset
        for preset in presets:
            if query in preset.name.lower():
                return preset
        return None
