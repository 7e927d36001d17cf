# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Credential storage for JustAuth.

The credential store keeps the current access and renewal credential in
an injected storage backend. It is the only component that writes them.
"""

import asyncio
import logging
from typing import Optional

from ..common.utils import maybe_await
from ..core.config import ACCESS_TOKEN_KEY, REFRESH_TOKEN_KEY
from ..core.types import CredentialPair
from ..storage.base import StorageBackend

logger = logging.getLogger(__name__)


class CredentialStore:
    """
    Holds the access / renewal credential pair.

    Reads and writes are serialized with a lock, so with an asynchronous
    backend no reader can observe a pair that is only half written.
    Backend errors (StorageError) propagate unchanged.

    Every ``clear`` bumps ``generation``. A writer that read the
    generation before a slow operation (such as a renewal) passes it
    back to ``set_pair`` / ``set_access_only``; the write is dropped if
    the credentials were cleared in the meantime.
    """

    def __init__(self,
                 backend: StorageBackend,
                 access_token_key: str = ACCESS_TOKEN_KEY,
                 refresh_token_key: str = REFRESH_TOKEN_KEY):
        """
        Initialize credential store.

        Args:
            backend: Storage backend
            access_token_key: Key of the access credential
            refresh_token_key: Key of the renewal credential
        """
        self.backend = backend
        self.access_token_key = access_token_key
        self.refresh_token_key = refresh_token_key
        self._lock = asyncio.Lock()
        self._generation = 0

    @property
    def generation(self) -> int:
        """Number of times the credentials have been cleared."""
        return self._generation

    async def get_access(self) -> Optional[str]:
        """Get the current access token."""
        async with self._lock:
            return await maybe_await(self.backend.get(self.access_token_key))

    async def get_renewal(self) -> Optional[str]:
        """Get the current refresh token."""
        async with self._lock:
            return await maybe_await(self.backend.get(self.refresh_token_key))

    async def get_pair(self) -> Optional[CredentialPair]:
        """Get both tokens, or None unless both are stored."""
        async with self._lock:
            access = await maybe_await(self.backend.get(self.access_token_key))
            renewal = await maybe_await(self.backend.get(self.refresh_token_key))

        if access and renewal:
            return CredentialPair(access_token=access, refresh_token=renewal)
        return None

    async def set_pair(self, access: str, renewal: str,
                       generation: Optional[int] = None) -> bool:
        """
        Set both access and refresh tokens.

        Args:
            access: New access token
            renewal: New refresh token
            generation: Only write if the store was not cleared since this generation

        Returns:
            False if the write was dropped
        """
        async with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Credentials were cleared, dropping new pair")
                return False
            await maybe_await(self.backend.set(self.access_token_key, access))
            await maybe_await(self.backend.set(self.refresh_token_key, renewal))
        logger.debug("Stored new credential pair")
        return True

    async def set_access_only(self, access: str, generation: Optional[int] = None) -> bool:
        """Set only the access token, keeping the refresh token."""
        async with self._lock:
            if generation is not None and generation != self._generation:
                logger.debug("Credentials were cleared, dropping new access token")
                return False
            await maybe_await(self.backend.set(self.access_token_key, access))
        logger.debug("Rotated access token")
        return True

    async def clear(self) -> None:
        """Clear all tokens."""
        async with self._lock:
            self._generation += 1
            await maybe_await(self.backend.clear(self.access_token_key))
            await maybe_await(self.backend.clear(self.refresh_token_key))
        logger.debug("Cleared stored credentials")

    async def has_pair(self) -> bool:
        """Check both tokens are present (expiry is not checked)."""
        return await self.get_pair() is not None
