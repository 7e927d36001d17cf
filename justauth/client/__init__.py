# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package client provides authorized HTTP access for JustAuth.

This package implements:
- The Transport contract and its aiohttp implementation
- The RequestGateway, which attaches the access token and renews it
  transparently when the server rejects it
"""

from .transport import Transport, AiohttpTransport
from .gateway import RequestGateway

__all__ = [
    'Transport',
    'AiohttpTransport',
    'RequestGateway',
]
