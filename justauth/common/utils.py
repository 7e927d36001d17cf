# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Common utilities and helper functions for JustAuth.
"""

import inspect
from typing import Any, Dict, Mapping, Optional


async def maybe_await(value: Any) -> Any:
    """
    Resolve a value that may or may not be awaitable.

    Storage backends and callbacks may be implemented either as plain
    functions or as coroutine functions; this lets callers treat both
    the same way.

    Args:
        value: Plain value or awaitable

    Returns:
        The value itself, or the awaited result
    """
    if inspect.isawaitable(value):
        return await value
    return value


def merge_headers(*headers: Optional[Mapping[str, str]]) -> Dict[str, str]:
    """
    Merge header mappings, later ones winning.

    Header names are compared case-insensitively; the spelling of the
    last mapping that set a header is kept.
    """
    result: Dict[str, str] = {}
    names: Dict[str, str] = {}

    for mapping in headers:
        if not mapping:
            continue
        for name, value in mapping.items():
            lowered = name.lower()
            if lowered in names:
                del result[names[lowered]]
            names[lowered] = name
            result[name] = value

    return result


def join_url(base_url: str, url: str) -> str:
    """Join a base URL and a path; absolute URLs are returned unchanged."""
    if not base_url or url.startswith(("http://", "https://")):
        return url
    return f"{base_url.rstrip('/')}/{url.lstrip('/')}"
