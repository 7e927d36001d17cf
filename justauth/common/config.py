# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Configuration helpers for JustAuth.

Environment settings are read by name from a prefixed set of variables;
configuration files are JSON or YAML mappings whose string values may
reference environment variables as ``${VAR}``.
"""

import json
import os
import re
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from ..errors import ConfigurationError

_VARIABLE = re.compile(r"\$\{([^}]+)\}")

TRUE_VALUES = ("true", "1", "yes", "on")


def parse_bool(value: str) -> bool:
    """Interpret an environment flag."""
    return value.strip().lower() in TRUE_VALUES


def env_settings(prefix: str, casts: Mapping[str, Callable[[str], Any]]) -> Dict[str, Any]:
    """
    Collect the settings present in the environment.

    Args:
        prefix: Variable prefix, e.g. ``JUSTAUTH_``
        casts: Setting name to converter; ``timeout`` is read from
            ``<prefix>TIMEOUT``

    Returns:
        Converted values of the variables that are set; unset ones are left out

    Raises:
        ConfigurationError: If a variable cannot be converted
    """
    settings: Dict[str, Any] = {}
    for name, cast in casts.items():
        env_key = f"{prefix}{name.upper()}"
        raw = os.environ.get(env_key)
        if raw is None:
            continue
        try:
            settings[name] = cast(raw)
        except ValueError:
            raise ConfigurationError(f"Invalid value for {env_key}: {raw!r}", field=name)
    return settings


def expand_variables(value: Any, environ: Optional[Mapping[str, str]] = None) -> Any:
    """
    Replace ``${VAR}`` references in strings, recursing into mappings and lists.

    Unknown variables are left as they are.
    """
    if environ is None:
        environ = os.environ

    if isinstance(value, str):
        return _VARIABLE.sub(lambda m: environ.get(m.group(1), m.group(0)), value)
    if isinstance(value, dict):
        return {k: expand_variables(v, environ) for k, v in value.items()}
    if isinstance(value, list):
        return [expand_variables(item, environ) for item in value]
    return value


def load_config_file(file_path: str) -> Dict[str, Any]:
    """Load configuration from a file (JSON or YAML)."""
    import yaml

    if not os.path.exists(file_path):
        raise FileNotFoundError(f"Configuration file not found: {file_path}")

    file_ext = Path(file_path).suffix.lower()

    with open(file_path, 'r', encoding='utf-8') as f:
        if file_ext in ['.json']:
            data = json.load(f)
        elif file_ext in ['.yaml', '.yml']:
            data = yaml.safe_load(f)
        else:
            raise ValueError(f"Unsupported configuration file format: {file_ext}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {file_path}")
    return data
