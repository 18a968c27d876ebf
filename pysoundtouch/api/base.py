"""Base HTTP transport for the SoundTouch API.

Owns (or borrows) the aiohttp session and turns every transport failure into
one of the library's exceptions. Requests are sent exactly once; there is no
retry or protocol negotiation since every SoundTouch speaker serves plain HTTP
on port 8090.
"""

from __future__ import annotations

import asyncio
import logging
import xml.etree.ElementTree as ET
from typing import Any

import aiohttp
from aiohttp import ClientSession

from ..exceptions import (
    SoundTouchConnectionError,
    SoundTouchResponseError,
    SoundTouchTimeoutError,
)
from .constants import DEFAULT_PORT, DEFAULT_TIMEOUT, XML_CONTENT_TYPE
from .parser import parse_xml

_LOGGER = logging.getLogger(__name__)


class BaseSoundTouchClient:
    """Low-level request helpers shared by all API mixins.

    Args:
        host: Device IP address or hostname.
        port: API port (default: 8090).
        timeout: Per-request timeout in seconds.
        session: Optional shared aiohttp ClientSession. When omitted, the client
            creates one lazily and closes it in close().
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
        session: ClientSession | None = None,
    ) -> None:
        self._host = host
        self._port = port
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    @property
    def host(self) -> str:
        """Device IP address or hostname."""
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def base_url(self) -> str:
        """Base URL of the device API, e.g. http://192.168.1.20:8090."""
        return f"http://{self._host}:{self._port}"

    async def _get_session(self) -> ClientSession:
        if self._session is None or self._session.closed:
            self._session = ClientSession()
            self._owns_session = True
        return self._session

    async def _request(self, endpoint: str, method: str = "GET", body: str | None = None) -> str:
        """Send one request and return the response body.

        Raises:
            SoundTouchTimeoutError: If the device does not answer in time.
            SoundTouchConnectionError: On network-level failures.
            SoundTouchResponseError: If the device answers with a non-2xx status.
        """
        url = f"{self.base_url}{endpoint}"
        request_kwargs: dict[str, Any] = {"timeout": aiohttp.ClientTimeout(total=self.timeout)}
        if body is not None:
            request_kwargs["data"] = body.encode("utf-8")
            request_kwargs["headers"] = {"Content-Type": XML_CONTENT_TYPE}

        session = await self._get_session()
        _LOGGER.debug("%s %s", method, url)

        try:
            resp = await session.request(method, url, **request_kwargs)
            async with resp:
                text = await resp.text()
                if not 200 <= resp.status < 300:
                    raise SoundTouchResponseError(
                        f"Device {self._host} returned HTTP {resp.status}",
                        endpoint=endpoint,
                        status=resp.status,
                    )
                return text
        except asyncio.TimeoutError as err:
            raise SoundTouchTimeoutError(
                f"Request timed out after {self.timeout}s",
                endpoint=endpoint,
                host=self._host,
                last_error=err,
            ) from err
        except aiohttp.ClientError as err:
            raise SoundTouchConnectionError(
                f"Could not reach device: {err}",
                endpoint=endpoint,
                host=self._host,
                last_error=err,
            ) from err

    async def _request_xml(self, endpoint: str, method: str = "GET", body: str | None = None) -> ET.Element:
        """Send a request and parse the XML response body.

        Raises:
            SoundTouchInvalidDataError: If the body is not well-formed XML.
        """
        text = await self._request(endpoint, method=method, body=body)
        return parse_xml(text, endpoint=endpoint)

    async def _post_xml(self, endpoint: str, body: str) -> str:
        return await self._request(endpoint, method="POST", body=body)

    async def close(self) -> None:
        """Close the HTTP session if this client created it."""
        if not self._owns_session:
            return
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None

    async def __aenter__(self) -> BaseSoundTouchClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
