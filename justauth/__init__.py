# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
JustAuth Python Package

Access / refresh token session management with transparent,
single-flight token renewal for asyncio HTTP clients.
"""

__version__ = "0.1.0"

from .core.config import AuthConfig
from .core.types import (
    CredentialPair,
    Identity,
    Request,
    Response,
    SessionSnapshot,
    SessionStatus,
)
from .storage import StorageBackend, MemoryStorage, JSONFileStorage, RedisStorage
from .tokenstore import CredentialStore
from .refresh import RenewalCoordinator
from .client import Transport, AiohttpTransport, RequestGateway
from .session import SessionController
from .errors import (
    JustAuthError,
    StorageError,
    TransportError,
    ResponseError,
    RenewalFailure,
    AuthenticationError,
    ConfigurationError,
)

__all__ = [
    "AuthConfig",
    "CredentialPair",
    "Identity",
    "Request",
    "Response",
    "SessionSnapshot",
    "SessionStatus",
    "StorageBackend",
    "MemoryStorage",
    "JSONFileStorage",
    "RedisStorage",
    "CredentialStore",
    "RenewalCoordinator",
    "Transport",
    "AiohttpTransport",
    "RequestGateway",
    "SessionController",
    "JustAuthError",
    "StorageError",
    "TransportError",
    "ResponseError",
    "RenewalFailure",
    "AuthenticationError",
    "ConfigurationError",
]
