# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Error classes for JustAuth.

All errors share the same shape: a human readable ``message``, a stable
``error_code`` and an optional ``details`` dictionary.
"""

from typing import Any, Dict, Optional


class JustAuthError(Exception):
    """Base error for every failure raised by JustAuth."""

    def __init__(self, message: str, error_code: str = None, details: dict = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "JUSTAUTH_ERROR"
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert the error to a dictionary."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class StorageError(JustAuthError):
    """A storage backend failed to read or write a key."""

    def __init__(self, message: str, key: Optional[str] = None, details: dict = None):
        details = dict(details or {})
        if key is not None:
            details.setdefault("key", key)
        super().__init__(message, "STORAGE_ERROR", details)
        self.key = key


class TransportError(JustAuthError):
    """Network failure or timeout while sending a request."""

    def __init__(self, message: str, method: str = None, url: str = None, details: dict = None):
        details = dict(details or {})
        if method:
            details.setdefault("method", method)
        if url:
            details.setdefault("url", url)
        super().__init__(message, "TRANSPORT_ERROR", details)
        self.method = method
        self.url = url


class ResponseError(JustAuthError):
    """A response could not be used where a successful one was required."""

    def __init__(self, message: str, status: int = None, body: Any = None, details: dict = None):
        details = dict(details or {})
        if status is not None:
            details.setdefault("status", status)
        super().__init__(message, "RESPONSE_ERROR", details)
        self.status = status
        self.body = body


class RenewalFailure(JustAuthError):
    """The renewal credential was rejected, or there was none to send."""

    def __init__(self, message: str = "Failed to refresh token", details: dict = None):
        super().__init__(message, "RENEWAL_FAILED", details)


class AuthenticationError(JustAuthError):
    """The session expired and can only be restored by logging in again."""

    def __init__(self, message: str = "Authentication failed. Please login again.",
                 details: dict = None):
        super().__init__(message, "SESSION_EXPIRED", details)


class ConfigurationError(JustAuthError, ValueError):
    """Invalid configuration."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message, "CONFIGURATION_ERROR", {"field": field} if field else None)
        self.field = field


__all__ = [
    "JustAuthError",
    "StorageError",
    "TransportError",
    "ResponseError",
    "RenewalFailure",
    "AuthenticationError",
    "ConfigurationError",
]
