# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package common provides shared helpers for JustAuth.
"""

from .utils import (
    maybe_await,
    merge_headers,
    join_url,
)

from .config import (
    parse_bool,
    env_settings,
    expand_variables,
    load_config_file,
)

__all__ = [
    'maybe_await',
    'merge_headers',
    'join_url',
    'parse_bool',
    'env_settings',
    'expand_variables',
    'load_config_file',
]
