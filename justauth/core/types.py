# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Core types for JustAuth.

Credentials are opaque strings: nothing in this module parses or
validates their contents. Payloads and user records coming from the
server are passed through as plain dictionaries.
"""

import json
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Optional

from ..errors import ResponseError


class SessionStatus(Enum):
    """Lifecycle states of a session."""
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"


class RenewalState(Enum):
    """States of the renewal coordinator."""
    IDLE = "idle"
    IN_FLIGHT = "in_flight"


@dataclass(frozen=True)
class CredentialPair:
    """Access and renewal credential held together."""
    access_token: str
    refresh_token: str

    def __repr__(self) -> str:
        return "CredentialPair(access_token=***, refresh_token=***)"


@dataclass
class Identity:
    """
    The authenticated user.

    Only ``id`` is required; every other field returned by the server is
    kept untouched in ``attributes``.
    """
    id: str
    attributes: Dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Read a field of the user record."""
        if key == "id":
            return self.id
        return self.attributes.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """Convert identity to the wire dictionary."""
        data = dict(self.attributes)
        data["id"] = self.id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Identity":
        """Create identity from a user record."""
        if not isinstance(data, dict) or data.get("id") in (None, ""):
            raise ValueError("User record must be an object with an 'id' field")
        attributes = {k: v for k, v in data.items() if k != "id"}
        return cls(id=str(data["id"]), attributes=attributes)


@dataclass
class LoginResponse:
    """Body returned by the login endpoint."""
    access_token: str
    refresh_token: str
    user: Identity
    expires_in: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Any) -> "LoginResponse":
        """
        Parse a login response body.

        Raises:
            ResponseError: If a required field is missing
        """
        if not isinstance(data, dict):
            raise ResponseError("Malformed login response: expected an object", body=data)

        access_token = data.get("accessToken")
        refresh_token = data.get("refreshToken")
        if not isinstance(access_token, str) or not access_token:
            raise ResponseError("Malformed login response: missing accessToken", body=data)
        if not isinstance(refresh_token, str) or not refresh_token:
            raise ResponseError("Malformed login response: missing refreshToken", body=data)

        try:
            user = Identity.from_dict(data.get("user"))
        except ValueError as e:
            raise ResponseError(f"Malformed login response: {e}", body=data)

        return cls(
            access_token=access_token,
            refresh_token=refresh_token,
            user=user,
            expires_in=data.get("expiresIn"),
        )


@dataclass
class RenewalResponse:
    """Body returned by the renewal endpoint."""
    access_token: str
    refresh_token: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "RenewalResponse":
        """Parse a renewal response body; ``refreshToken`` is optional."""
        if not isinstance(data, dict):
            raise ResponseError("Malformed renewal response: expected an object", body=data)

        access_token = data.get("accessToken")
        if not isinstance(access_token, str) or not access_token:
            raise ResponseError("Malformed renewal response: missing accessToken", body=data)

        refresh_token = data.get("refreshToken") or None
        return cls(access_token=access_token, refresh_token=refresh_token)


@dataclass
class Request:
    """
    An outbound HTTP request.

    Attributes:
        method: HTTP method
        url: Absolute URL, or a path relative to the transport's base URL
        headers: Request headers
        json: JSON body
        data: Raw body, used when ``json`` is not set
        params: Query parameters
        timeout: Per-request timeout in seconds, overriding the default
        retried: Set once the request has been replayed after a renewal
        anonymous: Send without credentials and never intercept the response
    """
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    json: Any = None
    data: Any = None
    params: Optional[Dict[str, Any]] = None
    timeout: Optional[float] = None
    retried: bool = False
    anonymous: bool = False

    def __post_init__(self):
        self.method = self.method.upper()

    def with_header(self, name: str, value: str) -> "Request":
        """Return a copy carrying one more header."""
        headers = {k: v for k, v in self.headers.items() if k.lower() != name.lower()}
        headers[name] = value
        return replace(self, headers=headers)


@dataclass
class Response:
    """A received HTTP response."""
    status: int
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    url: str = ""

    @property
    def ok(self) -> bool:
        """True for 2xx statuses."""
        return 200 <= self.status < 300

    @property
    def text(self) -> str:
        return self.body.decode("utf-8", errors="replace")

    def json(self) -> Any:
        """
        Decode the body as JSON.

        Raises:
            ResponseError: If the body is not valid JSON
        """
        if not self.body:
            return None
        try:
            return json.loads(self.body)
        except ValueError as e:
            raise ResponseError(f"Response body is not valid JSON: {e}",
                                status=self.status, body=self.text)

    def raise_for_status(self) -> "Response":
        """Raise ResponseError unless the status is 2xx."""
        if not self.ok:
            raise ResponseError(
                f"Request to {self.url or 'endpoint'} failed with status {self.status}",
                status=self.status,
                body=self.text,
            )
        return self


@dataclass
class SessionState:
    """Mutable session state owned by the session controller."""
    identity: Optional[Identity] = None
    authenticating: bool = False
    last_error: Optional[Exception] = None
    status: SessionStatus = SessionStatus.UNINITIALIZED


@dataclass(frozen=True)
class SessionSnapshot:
    """Read-only view of the session for UI bindings."""
    user: Optional[Identity]
    is_authenticated: bool
    loading: bool
    error: Optional[Exception]
    status: SessionStatus = SessionStatus.UNINITIALIZED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user": self.user.to_dict() if self.user else None,
            "isAuthenticated": self.is_authenticated,
            "loading": self.loading,
            "error": str(self.error) if self.error else None,
            "status": self.status.value,
        }
