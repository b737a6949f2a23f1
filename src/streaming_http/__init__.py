"""
streaming_http - long-poll client over a single HTTP/1.1 connection

Sends sequential POST requests on one keep-alive TCP connection and waits,
possibly for many minutes, for the server to push a response back on the
same socket.
"""

import logging

__version__ = "0.1.0"
__author__ = "Developer"
__email__ = "dev@example.com"

# Import main components for easy access
from .primitives import OutboundRequest, Response
from .connection import Connection, ConnectionState
from .framing import RequestFramer, frame_request
from .reader import StreamingResponseReader
from .client import StreamingHTTPClient
from .exceptions import (
    StreamingHTTPError,
    ConnectionError,
    ProtocolError,
    StreamError,
    OperationCancelled,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "OutboundRequest",
    "Response",
    "Connection",
    "ConnectionState",
    "RequestFramer",
    "frame_request",
    "StreamingResponseReader",
    "StreamingHTTPClient",
    "StreamingHTTPError",
    "ConnectionError",
    "ProtocolError",
    "StreamError",
    "OperationCancelled",
]
