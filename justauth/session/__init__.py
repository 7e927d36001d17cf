# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package session provides the session state machine exposed to applications.
"""

from .controller import (
    SessionController,
    SessionListener,
    PLACEHOLDER_IDENTITY_ID,
)

__all__ = [
    'SessionController',
    'SessionListener',
    'PLACEHOLDER_IDENTITY_ID',
]
