"""Unit tests for SoundTouch device discovery."""

from __future__ import annotations

import asyncio
from ipaddress import IPv4Address
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest

from pysoundtouch.discovery import (
    DeviceRecord,
    discover_devices,
    probe_host,
    resolve_subnet,
    scan_subnet,
)
from pysoundtouch.exceptions import InvalidSubnetFormatError, NoSubnetDetectedError
from pysoundtouch.network import Subnet, parse_subnet


class TestDeviceRecord:
    """Test DeviceRecord."""

    def test_key_is_case_folded_address(self):
        assert DeviceRecord("Kitchen", " 192.168.1.20 ").key == "192.168.1.20"

    def test_dict_round_trip(self):
        record = DeviceRecord("Kitchen", "192.168.1.20")
        assert record.to_dict() == {"name": "Kitchen", "ip": "192.168.1.20"}
        assert DeviceRecord.from_dict(record.to_dict()) == record

    def test_from_dict_missing_fields(self):
        assert DeviceRecord.from_dict({}) == DeviceRecord("", "")

    def test_str(self):
        assert str(DeviceRecord("Kitchen", "192.168.1.20")) == "Kitchen (192.168.1.20)"


class TestResolveSubnet:
    """Test resolve_subnet."""

    @pytest.mark.parametrize("text", [None, "", "   "])
    def test_blank_auto_detects(self, text):
        detected = Subnet(IPv4Address("10.0.0.0"), 24)
        with patch("pysoundtouch.discovery.detect_host_subnet", return_value=detected) as mock_detect:
            assert resolve_subnet(text) == detected
        mock_detect.assert_called_once()

    def test_explicit_is_parsed(self):
        with patch("pysoundtouch.discovery.detect_host_subnet") as mock_detect:
            assert resolve_subnet("192.168.1") == parse_subnet("192.168.1.0/24")
        mock_detect.assert_not_called()

    def test_invalid_raises(self):
        with pytest.raises(InvalidSubnetFormatError):
            resolve_subnet("192.168.1.0/31")


class TestProbeHost:
    """Test the single-host probe."""

    @pytest.mark.asyncio
    async def test_match(self, mock_aiohttp_session, make_response, info_xml):
        mock_aiohttp_session.request = AsyncMock(return_value=make_response(200, info_xml))

        result = await probe_host(mock_aiohttp_session, "192.168.1.20")

        assert result == DeviceRecord("Living Room", "192.168.1.20")
        args = mock_aiohttp_session.request.call_args[0]
        assert args == ("GET", "http://192.168.1.20:8090/info")

    @pytest.mark.asyncio
    async def test_custom_port(self, mock_aiohttp_session, make_response, info_xml):
        mock_aiohttp_session.request = AsyncMock(return_value=make_response(200, info_xml))

        await probe_host(mock_aiohttp_session, "192.168.1.20", port=8091)

        assert mock_aiohttp_session.request.call_args[0][1] == "http://192.168.1.20:8091/info"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("status", "body"),
        [
            (200, "<html><body>Router admin</body></html>"),
            (200, "<root><name>NAS</name></root>"),
            (200, "<info><name></name></info>"),
            (200, "not xml at all"),
            (200, ""),
            (404, "<info><name>Kitchen</name></info>"),
            (500, "Internal Server Error"),
        ],
    )
    async def test_non_matches(self, mock_aiohttp_session, make_response, status, body):
        """Anything other than a named <info> document is not a device."""
        mock_aiohttp_session.request = AsyncMock(return_value=make_response(status, body))

        assert await probe_host(mock_aiohttp_session, "192.168.1.30") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "error",
        [asyncio.TimeoutError(), aiohttp.ClientConnectionError("refused"), OSError("unreachable")],
    )
    async def test_transport_errors_are_misses(self, mock_aiohttp_session, error):
        mock_aiohttp_session.request = AsyncMock(side_effect=error)

        assert await probe_host(mock_aiohttp_session, "192.168.1.30") is None

    @pytest.mark.asyncio
    async def test_slow_host_times_out(self, mock_aiohttp_session):
        """A host that never answers is abandoned after the probe timeout."""

        async def _hang(*args, **kwargs):
            await asyncio.sleep(10)

        mock_aiohttp_session.request = AsyncMock(side_effect=_hang)

        result = await asyncio.wait_for(probe_host(mock_aiohttp_session, "192.168.1.30", timeout=0.01), 2)

        assert result is None


class TestScanSubnet:
    """Test the concurrent subnet scan."""

    @pytest.mark.asyncio
    async def test_probes_every_host(self, mock_aiohttp_session):
        subnet = parse_subnet("192.168.1.0/29")
        probed: list[str] = []

        async def _probe(session, ip, timeout, port):
            probed.append(ip)
            return DeviceRecord("Kitchen", ip) if ip == "192.168.1.3" else None

        with patch("pysoundtouch.discovery.probe_host", side_effect=_probe):
            devices = await scan_subnet(subnet, session=mock_aiohttp_session)

        assert sorted(probed, key=IPv4Address) == [f"192.168.1.{i}" for i in range(1, 7)]
        assert devices == [DeviceRecord("Kitchen", "192.168.1.3")]

    @pytest.mark.asyncio
    async def test_passes_timeout_and_port(self, mock_aiohttp_session):
        mock_probe = AsyncMock(return_value=None)

        with patch("pysoundtouch.discovery.probe_host", mock_probe):
            await scan_subnet(parse_subnet("10.0.0.4/30"), timeout=0.25, port=8091, session=mock_aiohttp_session)

        assert mock_probe.await_count == 2
        for call in mock_probe.call_args_list:
            assert call.args[0] is mock_aiohttp_session
            assert call.args[2:] == (0.25, 8091)

    @pytest.mark.asyncio
    async def test_no_devices(self, mock_aiohttp_session):
        with patch("pysoundtouch.discovery.probe_host", AsyncMock(return_value=None)):
            assert await scan_subnet(parse_subnet("10.0.0.0/28"), session=mock_aiohttp_session) == []

    @pytest.mark.asyncio
    async def test_results_are_unique_by_address(self, mock_aiohttp_session):
        with patch(
            "pysoundtouch.discovery.probe_host",
            AsyncMock(return_value=DeviceRecord("Echo", "10.0.0.5")),
        ):
            devices = await scan_subnet(parse_subnet("10.0.0.4/30"), session=mock_aiohttp_session)

        assert devices == [DeviceRecord("Echo", "10.0.0.5")]

    @pytest.mark.asyncio
    async def test_borrowed_session_is_not_closed(self, mock_aiohttp_session):
        with patch("pysoundtouch.discovery.probe_host", AsyncMock(return_value=None)):
            await scan_subnet(parse_subnet("10.0.0.4/30"), session=mock_aiohttp_session)

        mock_aiohttp_session.close.assert_not_called()

    @pytest.mark.asyncio
    async def test_owned_session_is_closed(self):
        owned = MagicMock()
        owned.close = AsyncMock()

        with (
            patch("pysoundtouch.discovery.ClientSession", return_value=owned) as mock_session_cls,
            patch("pysoundtouch.discovery.aiohttp.TCPConnector") as mock_connector,
            patch("pysoundtouch.discovery.probe_host", AsyncMock(return_value=None)) as mock_probe,
        ):
            await scan_subnet(parse_subnet("10.0.0.4/30"))

        mock_connector.assert_called_once_with(limit=0)
        mock_session_cls.assert_called_once_with(connector=mock_connector.return_value)
        assert mock_probe.call_args.args[0] is owned
        owned.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_owned_session_closed_on_cancel(self):
        owned = MagicMock()
        owned.close = AsyncMock()

        async def _hang(*args, **kwargs):
            await asyncio.sleep(10)

        with (
            patch("pysoundtouch.discovery.ClientSession", return_value=owned),
            patch("pysoundtouch.discovery.aiohttp.TCPConnector"),
            patch("pysoundtouch.discovery.probe_host", side_effect=_hang),
        ):
            task = asyncio.create_task(scan_subnet(parse_subnet("10.0.0.0/28")))
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task

        owned.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unbounded_probes_run_concurrently(self, mock_aiohttp_session):
        """The whole range is in flight at once, so total time is about one timeout."""
        in_flight = 0
        peak = 0

        async def _probe(session, ip, timeout, port):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return None

        with patch("pysoundtouch.discovery.probe_host", side_effect=_probe):
            await asyncio.wait_for(scan_subnet(parse_subnet("10.0.0.0/24"), session=mock_aiohttp_session), 2)

        assert peak == 254

    @pytest.mark.asyncio
    async def test_concurrency_cap_is_respected(self, mock_aiohttp_session):
        in_flight = 0
        peak = 0
        probed: list[str] = []

        async def _probe(session, ip, timeout, port):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            probed.append(ip)
            await asyncio.sleep(0)
            in_flight -= 1
            return DeviceRecord("Den", ip) if ip == "10.0.0.9" else None

        with patch("pysoundtouch.discovery.probe_host", side_effect=_probe):
            devices = await scan_subnet(
                parse_subnet("10.0.0.0/27"),
                max_concurrency=4,
                session=mock_aiohttp_session,
            )

        assert peak == 4
        assert len(probed) == 30
        assert len(set(probed)) == 30
        assert devices == [DeviceRecord("Den", "10.0.0.9")]

    @pytest.mark.asyncio
    async def test_cap_larger_than_range(self, mock_aiohttp_session):
        mock_probe = AsyncMock(return_value=None)

        with patch("pysoundtouch.discovery.probe_host", mock_probe):
            await scan_subnet(parse_subnet("10.0.0.4/30"), max_concurrency=64, session=mock_aiohttp_session)

        assert mock_probe.await_count == 2

    @pytest.mark.asyncio
    async def test_cancellation_raises(self, mock_aiohttp_session):
        """Cancelling the scan propagates CancelledError without a result."""

        async def _hang(*args, **kwargs):
            await asyncio.sleep(10)

        with patch("pysoundtouch.discovery.probe_host", side_effect=_hang):
            task = asyncio.create_task(scan_subnet(parse_subnet("10.0.0.0/28"), session=mock_aiohttp_session))
            await asyncio.sleep(0.01)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task


class TestDiscoverDevices:
    """Test discover_devices."""

    @pytest.mark.asyncio
    async def test_explicit_subnet(self, mock_aiohttp_session):
        found = [DeviceRecord("Kitchen", "192.168.1.20")]

        with patch("pysoundtouch.discovery.scan_subnet", AsyncMock(return_value=found)) as mock_scan:
            subnet, devices = await discover_devices(
                "192.168.1.0/24",
                timeout=0.2,
                max_concurrency=16,
                session=mock_aiohttp_session,
            )

        assert subnet == parse_subnet("192.168.1.0/24")
        assert devices == found
        mock_scan.assert_awaited_once_with(
            subnet,
            timeout=0.2,
            max_concurrency=16,
            session=mock_aiohttp_session,
        )

    @pytest.mark.asyncio
    async def test_auto_detect(self):
        detected = Subnet(IPv4Address("10.1.0.0"), 16)

        with (
            patch("pysoundtouch.discovery.detect_host_subnet", return_value=detected),
            patch("pysoundtouch.discovery.scan_subnet", AsyncMock(return_value=[])),
        ):
            subnet, devices = await discover_devices("")

        assert subnet == detected
        assert devices == []

    @pytest.mark.asyncio
    async def test_detection_failure_raises_before_scanning(self):
        with (
            patch("pysoundtouch.discovery.detect_host_subnet", side_effect=NoSubnetDetectedError("none")),
            patch("pysoundtouch.discovery.scan_subnet", AsyncMock()) as mock_scan,
        ):
            with pytest.raises(NoSubnetDetectedError):
                await discover_devices()

        mock_scan.assert_not_called()

    @pytest.mark.asyncio
    async def test_invalid_subnet_raises_before_scanning(self):
        with patch("pysoundtouch.discovery.scan_subnet", AsyncMock()) as mock_scan:
            with pytest.raises(InvalidSubnetFormatError):
                await discover_devices("192.168.1.0/8x")

        mock_scan.assert_not_called()
