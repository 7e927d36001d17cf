# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Redis storage backend for JustAuth.

Useful when several workers of one application share a session, or
when credentials must outlive the process.
"""

import logging
from typing import Any, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from ..errors import StorageError
from .base import StorageBackend

logger = logging.getLogger(__name__)


class RedisConfig:
    """Configuration for Redis storage."""

    def __init__(self,
                 address: str = "localhost:6379",
                 password: Optional[str] = None,
                 db: int = 0,
                 ssl: bool = False,
                 key_prefix: str = "justauth:",
                 connection_kwargs: Dict[str, Any] = None):
        """
        Initialize Redis configuration.

        Args:
            address: Redis address (host:port)
            password: Redis password
            db: Redis database number
            ssl: Enable SSL connection
            key_prefix: Prefix for Redis keys
            connection_kwargs: Additional client arguments
        """
        self.address = address
        self.password = password
        self.db = db
        self.ssl = ssl
        self.key_prefix = key_prefix
        self.connection_kwargs = connection_kwargs or {}


class RedisStorage(StorageBackend):
    """Redis-backed storage with asynchronous methods."""

    def __init__(self, config: Optional[RedisConfig] = None, client: Any = None):
        """
        Initialize Redis storage.

        Args:
            config: Redis configuration
            client: Existing ``redis.asyncio.Redis`` client to use instead of
                creating one from ``config``
        """
        self.config = config or RedisConfig()
        self._redis = client

    def _client(self) -> "redis.Redis":
        if self._redis is None:
            host, port = self.config.address.split(":")
            self._redis = redis.Redis(
                host=host,
                port=int(port),
                password=self.config.password,
                db=self.config.db,
                ssl=self.config.ssl,
                decode_responses=True,
                **self.config.connection_kwargs
            )
            logger.info(f"Created Redis client for {host}:{port}")
        return self._redis

    def _get_key(self, key: str) -> str:
        return f"{self.config.key_prefix}{key}"

    async def get(self, key: str) -> Optional[str]:
        try:
            value = await self._client().get(self._get_key(key))
        except RedisError as e:
            logger.error(f"Failed to read key {key} from Redis: {e}")
            raise StorageError(f"Failed to read from Redis: {e}", key=key)

        if isinstance(value, bytes):
            value = value.decode("utf-8")
        return value

    async def set(self, key: str, value: str) -> None:
        try:
            await self._client().set(self._get_key(key), value)
        except RedisError as e:
            logger.error(f"Failed to write key {key} to Redis: {e}")
            raise StorageError(f"Failed to write to Redis: {e}", key=key)

    async def clear(self, key: str) -> None:
        try:
            await self._client().delete(self._get_key(key))
        except RedisError as e:
            logger.error(f"Failed to delete key {key} from Redis: {e}")
            raise StorageError(f"Failed to delete from Redis: {e}", key=key)

    async def close(self) -> None:
        """Close the Redis connection."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("Disconnected from Redis")
