# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
File-based storage backend for JustAuth.

Keeps every key in a single JSON document on disk so credentials
survive a restart of the application.
"""

import asyncio
import json
import logging
import os
from typing import Dict, Optional

import aiofiles

from ..errors import StorageError
from .base import StorageBackend

logger = logging.getLogger(__name__)


class JSONFileStorage(StorageBackend):
    """
    JSON file storage with asynchronous methods.

    The whole document is rewritten on every change: writes go to a
    temporary file first and replace the target, so a crash never leaves
    a truncated document behind.
    """

    def __init__(self, path: str, file_mode: int = 0o600):
        """
        Initialize file storage.

        Args:
            path: Path of the JSON document
            file_mode: Permission bits applied to the document
        """
        self.path = path
        self.file_mode = file_mode
        self._lock = asyncio.Lock()

    async def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}

        try:
            async with aiofiles.open(self.path, 'r', encoding='utf-8') as f:
                content = await f.read()
        except OSError as e:
            logger.error(f"Failed to read storage file {self.path}: {e}")
            raise StorageError(f"Failed to read storage file: {e}")

        if not content.strip():
            return {}

        try:
            data = json.loads(content)
        except ValueError as e:
            raise StorageError(f"Storage file {self.path} is not valid JSON: {e}")

        if not isinstance(data, dict):
            raise StorageError(f"Storage file {self.path} must contain an object")
        return data

    async def _save(self, data: Dict[str, str]) -> None:
        tmp_path = f"{self.path}.tmp"
        directory = os.path.dirname(self.path)

        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
                await f.write(json.dumps(data, indent=2))
            os.chmod(tmp_path, self.file_mode)
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"Failed to write storage file {self.path}: {e}")
            raise StorageError(f"Failed to write storage file: {e}")

    async def get(self, key: str) -> Optional[str]:
        async with self._lock:
            data = await self._load()
            return data.get(key)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            data = await self._load()
            data[key] = value
            await self._save(data)

    async def clear(self, key: str) -> None:
        async with self._lock:
            data = await self._load()
            if key in data:
                del data[key]
                await self._save(data)
