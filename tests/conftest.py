"""
Shared fixtures for JustAuth tests.
"""

import asyncio
import json
from typing import Any, Callable, Dict, List, Optional

import pytest

from justauth import AuthConfig, CredentialStore, MemoryStorage, RenewalCoordinator
from justauth.client import RequestGateway, Transport
from justauth.common import maybe_await
from justauth.core.types import Request, Response


def json_response(status: int, body: Any = None, url: str = "") -> Response:
    """Build a JSON response."""
    payload = b"" if body is None else json.dumps(body).encode("utf-8")
    return Response(status=status, headers={"Content-Type": "application/json"},
                    body=payload, url=url)


class FakeTransport(Transport):
    """
    Transport answering from a handler function.

    Every send yields to the event loop first so that concurrent requests
    interleave the way real network calls do.
    """

    def __init__(self, handler: Callable[[Request], Any]):
        self.handler = handler
        self.requests: List[Request] = []
        self.closed = False

    async def send(self, request: Request) -> Response:
        self.requests.append(request)
        await asyncio.sleep(0)
        return await maybe_await(self.handler(request))

    async def close(self) -> None:
        self.closed = True

    def sent_to(self, url: str) -> List[Request]:
        return [r for r in self.requests if r.url == url]


class FakeAuthServer:
    """
    Minimal API server with login, refresh and one protected endpoint.

    Attributes:
        valid_access: Access tokens the protected endpoint accepts
        refresh_results: Bodies returned by successive refresh calls; an
            int entry is answered as an error status instead
        refresh_delay: Seconds the refresh endpoint takes
    """

    LOGIN_URL = "/api/auth/login"
    REFRESH_URL = "/api/auth/refresh"
    ME_URL = "/api/auth/me"
    DATA_URL = "/api/data"

    def __init__(self):
        self.valid_access = {"A1"}
        self.refresh_results: List[Any] = []
        self.refresh_delay = 0.01
        self.login_status = 200
        self.login_body: Dict[str, Any] = {
            "accessToken": "A1",
            "refreshToken": "R1",
            "user": {"id": "1", "email": "user@example.com"},
            "expiresIn": 900,
        }
        self.refresh_bodies: List[Any] = []

    def bearer(self, request: Request) -> Optional[str]:
        value = request.headers.get("Authorization", "")
        return value[len("Bearer "):] if value.startswith("Bearer ") else None

    async def __call__(self, request: Request) -> Response:
        if request.url == self.LOGIN_URL:
            if self.login_status != 200:
                return json_response(self.login_status, {"error": "invalid_credentials"})
            return json_response(200, self.login_body)

        if request.url == self.REFRESH_URL:
            self.refresh_bodies.append(request.json)
            await asyncio.sleep(self.refresh_delay)
            result = self.refresh_results.pop(0) if self.refresh_results else 401
            if isinstance(result, int):
                return json_response(result, {"error": "invalid_grant"})
            self.valid_access.add(result["accessToken"])
            return json_response(200, result)

        if self.bearer(request) not in self.valid_access:
            return json_response(401, {"error": "token_expired"})

        if request.url == self.ME_URL:
            return json_response(200, {"id": "1", "email": "user@example.com"})
        return json_response(200, {"data": "ok", "token": self.bearer(request)})


@pytest.fixture
def server():
    return FakeAuthServer()


@pytest.fixture
def transport(server):
    return FakeTransport(server)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def auth_errors():
    """Errors received by the on_auth_error callback."""
    return []


@pytest.fixture
def config(storage, auth_errors):
    return AuthConfig(
        login_url=FakeAuthServer.LOGIN_URL,
        refresh_url=FakeAuthServer.REFRESH_URL,
        storage=storage,
        on_auth_error=auth_errors.append,
    )


@pytest.fixture
def store(storage):
    return CredentialStore(storage)


@pytest.fixture
def gateway(config, store, transport):
    return RequestGateway(config, store, RenewalCoordinator(), transport=transport)
