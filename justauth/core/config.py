# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Configuration module for JustAuth.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from ..common.config import env_settings, expand_variables, load_config_file, parse_bool
from ..errors import ConfigurationError
from ..storage.base import StorageBackend
from ..storage.memory import MemoryStorage

logger = logging.getLogger(__name__)

ErrorCallback = Callable[[Exception], Union[None, Awaitable[None]]]

ACCESS_TOKEN_KEY = "auth_access_token"
REFRESH_TOKEN_KEY = "auth_refresh_token"
IDENTITY_KEY = "auth_user"

# Settings read by AuthConfig.from_env, with their converters
ENV_SETTINGS: Dict[str, Callable[[str], Any]] = {
    "login_url": str,
    "refresh_url": str,
    "base_url": str,
    "timeout": float,
    "identity_url": str,
    "validate_on_init": parse_bool,
}


@dataclass
class AuthConfig:
    """
    Configuration for a JustAuth session.

    Attributes:
        login_url: Login endpoint, absolute or relative to ``base_url``
        refresh_url: Renewal endpoint, absolute or relative to ``base_url``
        base_url: Prefix for relative request URLs
        timeout: Default transport timeout in seconds
        storage: Storage backend; a fresh MemoryStorage when omitted
        on_auth_error: Called once per terminal authentication failure
        validate_on_init: Check stored credentials against ``identity_url``
            when the session starts instead of trusting them
        identity_url: Endpoint returning the current user record
        access_token_key: Storage key of the access credential
        refresh_token_key: Storage key of the renewal credential
        identity_key: Storage key of the persisted user record
        auth_header: Header carrying the access credential
        auth_scheme: Scheme prefixed to the access credential
        auth_failure_statuses: Statuses treated as an expired credential
        default_headers: Headers sent with every request
    """
    login_url: str
    refresh_url: str
    base_url: str = ""
    timeout: float = 10.0
    storage: Optional[StorageBackend] = None
    on_auth_error: Optional[ErrorCallback] = None
    validate_on_init: bool = False
    identity_url: Optional[str] = None
    access_token_key: str = ACCESS_TOKEN_KEY
    refresh_token_key: str = REFRESH_TOKEN_KEY
    identity_key: str = IDENTITY_KEY
    auth_header: str = "Authorization"
    auth_scheme: str = "Bearer"
    auth_failure_statuses: Tuple[int, ...] = (401,)
    default_headers: Dict[str, str] = field(
        default_factory=lambda: {"Content-Type": "application/json"}
    )

    def __post_init__(self):
        if self.storage is None:
            self.storage = MemoryStorage()
        self.auth_failure_statuses = tuple(int(s) for s in self.auth_failure_statuses)

    @classmethod
    def from_env(cls, prefix: str = "JUSTAUTH_", **overrides: Any) -> "AuthConfig":
        """
        Create configuration from environment variables.

        Reads ``<prefix>LOGIN_URL``, ``REFRESH_URL``, ``BASE_URL``, ``TIMEOUT``,
        ``IDENTITY_URL`` and ``VALIDATE_ON_INIT``. Keyword arguments override
        the environment, which is how callables such as ``on_auth_error`` or a
        storage backend are supplied.

        Raises:
            ConfigurationError: If a variable holds an unusable value
        """
        values: Dict[str, Any] = {"login_url": "", "refresh_url": ""}
        values.update(env_settings(prefix, ENV_SETTINGS))
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], **overrides: Any) -> "AuthConfig":
        """
        Create configuration from a dictionary.

        Raises:
            ConfigurationError: If the dictionary holds unknown keys
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}",
                                     field=unknown[0])

        values = dict(data)
        if "auth_failure_statuses" in values:
            values["auth_failure_statuses"] = tuple(values["auth_failure_statuses"])
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_file(cls, file_path: str, **overrides: Any) -> "AuthConfig":
        """Load configuration from a JSON or YAML file, expanding ${VAR} references."""
        data = expand_variables(load_config_file(file_path))
        logger.debug(f"Loaded configuration from {file_path}")
        return cls.from_dict(data, **overrides)

    def validate(self) -> bool:
        """
        Validate the configuration.

        Raises:
            ConfigurationError: If a setting is missing or out of range
        """
        if not self.login_url:
            raise ConfigurationError("login_url is required", field="login_url")
        if not self.refresh_url:
            raise ConfigurationError("refresh_url is required", field="refresh_url")
        if self.timeout is None or self.timeout <= 0:
            raise ConfigurationError("timeout must be positive", field="timeout")
        if not self.auth_failure_statuses:
            raise ConfigurationError("auth_failure_statuses must not be empty",
                                     field="auth_failure_statuses")
        if self.validate_on_init and not self.identity_url:
            raise ConfigurationError("identity_url is required when validate_on_init is set",
                                     field="identity_url")
        if len({self.access_token_key, self.refresh_token_key, self.identity_key}) != 3:
            raise ConfigurationError("Storage keys must be distinct", field="access_token_key")
        return True
