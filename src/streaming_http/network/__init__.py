"""
Network backend components for streaming_http.

This module provides the low-level networking abstractions: the
NetworkStream and NetworkBackend interfaces, an asyncio implementation,
and in-memory mocks for testing.
"""

from .backend import NetworkBackend
from .stream import NetworkStream
from .asyncio_backend import AsyncioNetworkBackend, AsyncioNetworkStream
from .mock import MockNetworkBackend, MockNetworkStream
from .utils import (
    configure_socket,
    parse_url,
    format_host_header,
    validate_port,
)

__all__ = [
    "NetworkBackend", 
    "NetworkStream",
    "AsyncioNetworkBackend",
    "AsyncioNetworkStream",
    "MockNetworkBackend", 
    "MockNetworkStream",
    "configure_socket",
    "parse_url",
    "format_host_header",
    "validate_port",
]
