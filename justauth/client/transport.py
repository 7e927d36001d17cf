# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
HTTP transport for JustAuth.

The transport only sends requests and reports what came back. Every
status, including 401, is returned as a Response; only network failures
and timeouts raise.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

import aiohttp

from ..common.utils import join_url, merge_headers
from ..core.types import Request, Response
from ..errors import TransportError

logger = logging.getLogger(__name__)


class Transport(ABC):
    """Abstract base class for HTTP transports."""

    @abstractmethod
    async def send(self, request: Request) -> Response:
        """
        Send a request.

        Args:
            request: Request to send

        Returns:
            The response, whatever its status

        Raises:
            TransportError: On network failure or timeout
        """
        pass

    async def close(self) -> None:
        """Release transport resources."""
        pass


class AiohttpTransport(Transport):
    """
    Transport built on ``aiohttp.ClientSession``.

    The session is created lazily on first use so that the transport can
    be constructed outside of a running event loop.
    """

    def __init__(self,
                 base_url: str = "",
                 timeout: float = 10.0,
                 headers: Optional[Dict[str, str]] = None,
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize transport.

        Args:
            base_url: Prefix for relative request URLs
            timeout: Default total timeout per request, in seconds
            headers: Headers sent with every request
            session: Existing session to use; it is not closed by ``close``
        """
        self.base_url = base_url
        self.timeout = timeout
        self.headers = dict(headers or {})
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self._session

    async def send(self, request: Request) -> Response:
        url = join_url(self.base_url, request.url)
        headers = merge_headers(self.headers, request.headers)
        kwargs = {"headers": headers}

        if request.json is not None:
            kwargs["json"] = request.json
        elif request.data is not None:
            kwargs["data"] = request.data
        if request.params:
            kwargs["params"] = request.params
        if request.timeout is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=request.timeout)

        logger.debug(f"{request.method} {url}")

        try:
            async with self._get_session().request(request.method, url, **kwargs) as resp:
                body = await resp.read()
                return Response(
                    status=resp.status,
                    headers=dict(resp.headers),
                    body=body,
                    url=str(resp.url),
                )
        except asyncio.TimeoutError:
            raise TransportError(f"Request timed out: {request.method} {url}",
                                 method=request.method, url=url)
        except aiohttp.ClientError as e:
            raise TransportError(f"Request failed: {request.method} {url}: {e}",
                                 method=request.method, url=url)

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()
            logger.debug("Closed HTTP session")
        self._session = None
