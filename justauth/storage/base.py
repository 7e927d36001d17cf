# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Storage backend contract for JustAuth.

A backend is a plain key-value store of strings. Methods may be
implemented as regular functions or as coroutine functions; callers
resolve both through ``maybe_await``.
"""

from abc import ABC, abstractmethod
from typing import Awaitable, Optional, Union


class StorageBackend(ABC):
    """
    Abstract base class for storage backends.

    Implementations must return None for a missing key instead of raising,
    and should raise StorageError for genuine I/O failures.
    """

    @abstractmethod
    def get(self, key: str) -> Union[Optional[str], Awaitable[Optional[str]]]:
        """
        Read a value.

        Args:
            key: Storage key

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> Union[None, Awaitable[None]]:
        """
        Write a value, replacing any previous one.

        Args:
            key: Storage key
            value: String value
        """
        pass

    @abstractmethod
    def clear(self, key: str) -> Union[None, Awaitable[None]]:
        """
        Remove a value. Removing an absent key is not an error.

        Args:
            key: Storage key
        """
        pass
