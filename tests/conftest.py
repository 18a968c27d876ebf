"""Pytest configuration and fixtures for pysoundtouch tests.

This module provides fixtures for both unit tests (with mocks) and
integration tests (with real devices).

Integration tests are enabled with environment variables:
    SOUNDTOUCH_TEST_DEVICE=192.168.1.20 pytest tests/integration/
    SOUNDTOUCH_TEST_SUBNET=192.168.1.0/24 pytest tests/integration/
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from aiohttp import ClientSession


# ============================================================================
# Configuration
# ============================================================================

SOUNDTOUCH_TEST_DEVICE = os.getenv("SOUNDTOUCH_TEST_DEVICE")
SOUNDTOUCH_TEST_SUBNET = os.getenv("SOUNDTOUCH_TEST_SUBNET")

# Env vars read by the MCP config loader; cleared so a developer's shell
# settings never leak into unit tests
_CONFIG_ENV_VARS = (
    "SOUNDTOUCH_CONFIG_FILE",
    "SOUNDTOUCH_TIMEOUT",
    "SOUNDTOUCH_PROBE_TIMEOUT",
    "SOUNDTOUCH_SCAN_CONCURRENCY",
    "SOUNDTOUCH_LOG_LEVEL",
)


# ============================================================================
# Sample device responses
# ============================================================================

INFO_XML = """<?xml version="1.0" encoding="UTF-8" ?>
<info deviceID="A0F6FD1B2C3D">
  <name>Living Room</name>
  <type>SoundTouch 10</type>
  <margeAccountUUID>1234567</margeAccountUUID>
  <components>
    <component>
      <componentCategory>SCM</componentCategory>
      <softwareVersion>27.0.6.46330.5043500</softwareVersion>
      <serialNumber>I6332527703739342000020</serialNumber>
    </component>
    <component>
      <componentCategory>PackagedProduct</componentCategory>
      <serialNumber>069231P63364828AE</serialNumber>
    </component>
  </components>
  <networkInfo type="SCM">
    <macAddress>A0F6FD1B2C3D</macAddress>
    <ipAddress>192.168.1.20</ipAddress>
  </networkInfo>
</info>"""

VOLUME_XML = """<?xml version="1.0" encoding="UTF-8" ?>
<volume deviceID="A0F6FD1B2C3D">
  <targetvolume>32</targetvolume>
  <actualvolume>30</actualvolume>
  <muteenabled>false</muteenabled>
</volume>"""

PRESETS_XML = """<?xml version="1.0" encoding="UTF-8" ?>
<presets>
  <preset id="1" createdOn="1488641256" updatedOn="1488641256">
    <ContentItem source="INTERNET_RADIO" location="4712" isPresetable="true">
      <itemName>Radio Paradise</itemName>
    </ContentItem>
  </preset>
  <preset id="2">
    <ContentItem source="SPOTIFY" location="spotify:playlist:abc" isPresetable="true">
      <itemName>Morning Jazz</itemName>
    </ContentItem>
  </preset>
  <preset id="3">
    <ContentItem source="TUNEIN" location="/v1/playback/station/s24940" isPresetable="true">
      <itemName>Jazz FM</itemName>
    </ContentItem>
  </preset>
</presets>"""


@pytest.fixture
def info_xml() -> str:
    return INFO_XML


@pytest.fixture
def volume_xml() -> str:
    return VOLUME_XML


@pytest.fixture
def presets_xml() -> str:
    return PRESETS_XML


# ============================================================================
# Unit Test Fixtures (Mocks)
# ============================================================================


@pytest.fixture
def mock_aiohttp_session(request):
    """Mock aiohttp ClientSession for testing.

    This fixture creates a mock session that properly simulates aiohttp's
    ClientSession behavior, including proper cleanup to avoid resource warnings.
    """
    session = MagicMock(spec=ClientSession)
    session._closed = False
    session.closed = False
    session.close = AsyncMock()

    # Mark session as closed after test to prevent warnings
    def cleanup():
        session._closed = True
        session.closed = True

    request.addfinalizer(cleanup)

    return session


@pytest.fixture
def make_response():
    """Factory for mock aiohttp ClientResponse objects usable with 'async with'."""

    def _make(status: int = 200, text: str = "") -> MagicMock:
        response = MagicMock()
        response.status = status
        response.headers = {}
        response.text = AsyncMock(return_value=text)
        response.__aenter__ = AsyncMock(return_value=response)
        response.__aexit__ = AsyncMock(return_value=None)
        return response

    return _make


@pytest.fixture
def mock_client(mock_aiohttp_session):
    """Create a SoundTouchClient with a mocked HTTP session.

    The transport methods are replaced so mixin tests only see the requests
    they issue.
    """
    from pysoundtouch.client import SoundTouchClient

    client = SoundTouchClient(host="192.168.1.20", session=mock_aiohttp_session)

    # Mock the transport to avoid actual HTTP calls
    client._request = AsyncMock(return_value="")
    client._post_xml = AsyncMock(return_value="")

    return client


@pytest.fixture
def clean_config_env(monkeypatch):
    """Remove SOUNDTOUCH_* config env vars for the duration of a test."""
    for name in _CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture
def write_config(tmp_path: Path, clean_config_env):
    """Write a config document and point SOUNDTOUCH_CONFIG_FILE at it."""

    def _write(document: Any) -> Path:
        path = tmp_path / "config.json"
        path.write_text(json.dumps(document, indent=2), encoding="utf-8")
        clean_config_env.setenv("SOUNDTOUCH_CONFIG_FILE", str(path))
        return path

    return _write


# ============================================================================
# Integration Test Fixtures (Real Devices)
# ============================================================================


def pytest_configure(config):
    """Configure pytest for integration tests."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires real device)",
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark integration tests."""
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture(scope="session")
def real_device_available():
    """Check if a real device is available for integration testing."""
    return SOUNDTOUCH_TEST_DEVICE is not None


@pytest.fixture
async def real_device_client(real_device_available):
    """Create a real SoundTouchClient for integration testing.

    Requires SOUNDTOUCH_TEST_DEVICE, e.g.
    SOUNDTOUCH_TEST_DEVICE=192.168.1.20 pytest tests/integration/
    """
    if not real_device_available:
        pytest.skip("No real device configured. Set SOUNDTOUCH_TEST_DEVICE environment variable.")

    from pysoundtouch.client import SoundTouchClient

    client = SoundTouchClient(host=SOUNDTOUCH_TEST_DEVICE)
    yield client
    await client.close()
