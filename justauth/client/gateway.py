# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Authorized request gateway for JustAuth.

The gateway sends application requests with the current access token
attached. When a request is rejected because the token expired, it
renews the token through the RenewalCoordinator and replays the request
once with the new token.
"""

import logging
from dataclasses import replace
from typing import Any, Dict, Optional, Tuple

from ..common.utils import maybe_await
from ..core.config import AuthConfig, ErrorCallback
from ..core.types import RenewalResponse, Request, Response
from ..errors import (
    AuthenticationError,
    RenewalFailure,
    ResponseError,
    TransportError,
)
from ..refresh.coordinator import RenewalCoordinator
from ..tokenstore.credentials import CredentialStore
from .transport import AiohttpTransport, Transport

logger = logging.getLogger(__name__)


class RequestGateway:
    """
    Wraps a transport with credential handling.

    Use ``execute`` for a prepared Request, or the ``get`` / ``post`` /
    ``put`` / ``patch`` / ``delete`` helpers.
    """

    def __init__(self,
                 config: AuthConfig,
                 store: CredentialStore,
                 coordinator: RenewalCoordinator,
                 transport: Optional[Transport] = None,
                 on_auth_error: Optional[ErrorCallback] = None):
        """
        Initialize gateway.

        Args:
            config: Session configuration
            store: Credential store
            coordinator: Renewal coordinator shared by every request of the session
            transport: HTTP transport (defaults to AiohttpTransport)
            on_auth_error: Called once per terminal authentication failure;
                defaults to ``config.on_auth_error``
        """
        self.config = config
        self.store = store
        self.coordinator = coordinator
        self.transport = transport or AiohttpTransport(
            base_url=config.base_url,
            timeout=config.timeout,
            headers=config.default_headers,
        )
        self.on_auth_error = on_auth_error if on_auth_error is not None else config.on_auth_error
        # Store generation after the last terminal failure, and its error
        self._expired: Optional[Tuple[int, AuthenticationError]] = None

    def is_auth_failure(self, response: Response) -> bool:
        """Check if a response means the access token was rejected."""
        return response.status in self.config.auth_failure_statuses

    def _authorize(self, request: Request, token: Optional[str]) -> Request:
        if not token:
            return request
        value = f"{self.config.auth_scheme} {token}" if self.config.auth_scheme else token
        return request.with_header(self.config.auth_header, value)

    async def execute(self, request: Request) -> Response:
        """
        Send a request, renewing the access token if it was rejected.

        Args:
            request: Request to send

        Returns:
            The response. After a renewal this is the response of the
            replayed request, whatever its status.

        Raises:
            AuthenticationError: The token was rejected and could not be renewed
            TransportError: Network failure or timeout
            StorageError: The storage backend failed
        """
        if request.anonymous:
            return await self.transport.send(request)

        generation = self.store.generation
        token = await self.store.get_access()
        response = await self.transport.send(self._authorize(request, token))

        if not self.is_auth_failure(response):
            return response

        if self.store.generation != generation:
            # Cleared while the request was in flight; that already ended the session
            logger.debug(f"{request.method} {request.url} rejected after credentials were cleared")
            raise self._session_ended(generation)

        if request.retried:
            logger.warning(f"{request.method} {request.url} rejected after a retry")
            raise await self._terminal_failure(
                RenewalFailure("Request was rejected after it had already been retried"))

        if not await self.store.get_renewal():
            logger.warning(f"{request.method} {request.url} rejected and no refresh token is stored")
            raise await self._terminal_failure(RenewalFailure("No refresh token available"))

        request = replace(request, retried=True)
        logger.debug(f"{request.method} {request.url} rejected with {response.status}, renewing")

        new_token = await self.coordinator.request(self._renew)

        # The replayed response is final, never renewed again
        return await self.transport.send(self._authorize(request, new_token))

    async def _renew(self) -> str:
        generation = self.store.generation
        try:
            return await self._refresh_token(generation)
        except RenewalFailure as e:
            if self.store.generation != generation:
                raise self._session_ended(generation, cause=e)
            raise await self._terminal_failure(e) from e

    def _session_ended(self, generation: int,
                       cause: Optional[Exception] = None) -> AuthenticationError:
        """Error for a request whose credentials were cleared after it started."""
        if self._expired is not None and self._expired[0] > generation:
            return self._expired[1]

        # Logged out rather than expired; nobody is notified
        error = AuthenticationError(details={"reason": "Credentials were cleared"})
        error.__cause__ = cause
        return error

    async def _refresh_token(self, generation: int) -> str:
        """
        Exchange the refresh token for a new access token.

        Args:
            generation: Store generation the renewal started from

        Returns:
            The new access token

        Raises:
            RenewalFailure: If there is no refresh token, the exchange failed
                or the credentials were cleared while it ran
        """
        refresh_token = await self.store.get_renewal()
        if not refresh_token:
            raise RenewalFailure("No refresh token available")

        request = Request(
            method="POST",
            url=self.config.refresh_url,
            json={"refreshToken": refresh_token},
            anonymous=True,
        )

        try:
            response = await self.transport.send(request)
            response.raise_for_status()
            result = RenewalResponse.from_dict(response.json())
        except (TransportError, ResponseError) as e:
            raise RenewalFailure(f"Failed to refresh token: {e.message}",
                                 details=e.details) from e

        if result.refresh_token:
            stored = await self.store.set_pair(result.access_token, result.refresh_token,
                                               generation=generation)
        else:
            stored = await self.store.set_access_only(result.access_token,
                                                      generation=generation)
        if not stored:
            raise RenewalFailure("Credentials were cleared during renewal")

        return result.access_token

    async def _terminal_failure(self, cause: Exception) -> AuthenticationError:
        """Clear credentials, notify the error callback and build the error to raise."""
        await self.store.clear()

        error = AuthenticationError(details={"reason": str(cause)})
        error.__cause__ = cause
        self._expired = (self.store.generation, error)
        logger.warning(f"Session expired: {cause}")

        if self.on_auth_error is not None:
            try:
                await maybe_await(self.on_auth_error(error))
            except Exception as e:
                logger.error(f"Error in auth error callback: {e}")

        return error

    async def request(self, method: str, url: str, **kwargs: Any) -> Response:
        """Build a Request from keyword arguments and execute it."""
        return await self.execute(Request(method=method, url=url, **kwargs))

    async def get(self, url: str, params: Optional[Dict[str, Any]] = None,
                  **kwargs: Any) -> Response:
        """Make a GET request."""
        return await self.request("GET", url, params=params, **kwargs)

    async def post(self, url: str, json: Any = None, **kwargs: Any) -> Response:
        """Make a POST request."""
        return await self.request("POST", url, json=json, **kwargs)

    async def put(self, url: str, json: Any = None, **kwargs: Any) -> Response:
        """Make a PUT request."""
        return await self.request("PUT", url, json=json, **kwargs)

    async def patch(self, url: str, json: Any = None, **kwargs: Any) -> Response:
        """Make a PATCH request."""
        return await self.request("PATCH", url, json=json, **kwargs)

    async def delete(self, url: str, **kwargs: Any) -> Response:
        """Make a DELETE request."""
        return await self.request("DELETE", url, **kwargs)

    async def close(self) -> None:
        """Close the underlying transport."""
        await self.transport.close()

    async def __aenter__(self) -> "RequestGateway":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
