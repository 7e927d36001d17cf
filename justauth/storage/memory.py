# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
In-memory storage backend for JustAuth.

Suitable for server-side applications, scripts and testing. Values live
as long as the backend instance.
"""

from typing import Dict, Optional

from .base import StorageBackend


class MemoryStorage(StorageBackend):
    """Dictionary-backed storage with synchronous methods."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def clear(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        """Keys currently stored."""
        return list(self._data.keys())
