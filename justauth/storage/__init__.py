# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package storage provides the key-value backends credentials are persisted in.

This package implements:
- The StorageBackend contract (get / set / clear by key)
- Memory-based storage for scripts and testing
- JSON file storage for single-host applications
- Redis-based storage for shared deployments
"""

from .base import StorageBackend
from .memory import MemoryStorage
from .file import JSONFileStorage
from .redis_storage import RedisConfig, RedisStorage

__all__ = [
    'StorageBackend',
    'MemoryStorage',
    'JSONFileStorage',
    'RedisConfig',
    'RedisStorage',
]
