# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package core provides the configuration and the shared data types of JustAuth.
"""

from .config import (
    AuthConfig,
    ErrorCallback,
    ACCESS_TOKEN_KEY,
    REFRESH_TOKEN_KEY,
    IDENTITY_KEY,
)

from .types import (
    SessionStatus,
    RenewalState,
    CredentialPair,
    Identity,
    LoginResponse,
    RenewalResponse,
    Request,
    Response,
    SessionState,
    SessionSnapshot,
)

__all__ = [
    'AuthConfig',
    'ErrorCallback',
    'ACCESS_TOKEN_KEY',
    'REFRESH_TOKEN_KEY',
    'IDENTITY_KEY',
    'SessionStatus',
    'RenewalState',
    'CredentialPair',
    'Identity',
    'LoginResponse',
    'RenewalResponse',
    'Request',
    'Response',
    'SessionState',
    'SessionSnapshot',
]
