"""
Connection manager for streaming_http.

Owns the single TCP stream of a client: opens it, tears it down and
reports whether it is still alive.
"""

import asyncio
import logging
from enum import Enum
from typing import Optional

from .exceptions import StreamError
from .lines import LineReader
from .network.asyncio_backend import AsyncioNetworkBackend
from .network.backend import NetworkBackend
from .network.stream import NetworkStream
from .network.utils import parse_url


class ConnectionState(Enum):
    """States of a streaming connection."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class Connection:
    """
    Single persistent TCP connection.
    
    Reconnecting silently discards the previous stream together with any
    bytes buffered from it. Failures never raise: ``connect`` and
    ``disconnect`` report their outcome as a boolean.
    """
    
    # Default configuration
    DEFAULT_READ_TIMEOUT = 1.0  # seconds
    DEFAULT_CONNECT_TIMEOUT = 30.0  # seconds
    
    def __init__(
        self,
        backend: Optional[NetworkBackend] = None,
        read_timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the connection manager.
        
        Args:
            backend: NetworkBackend used to open TCP streams
            read_timeout: Default timeout for response reads in seconds
            connect_timeout: Timeout for establishing the connection in seconds
            logger: Logger receiving connection events
        """
        self._backend = backend or AsyncioNetworkBackend()
        self._read_timeout = read_timeout if read_timeout is not None else self.DEFAULT_READ_TIMEOUT
        self._connect_timeout = (
            connect_timeout if connect_timeout is not None else self.DEFAULT_CONNECT_TIMEOUT
        )
        self._logger = logger or logging.getLogger(__name__)
        
        self._state = ConnectionState.DISCONNECTED
        self._stream: Optional[NetworkStream] = None
        self._line_reader: Optional[LineReader] = None
        self._host: Optional[str] = None
        self._port: Optional[int] = None
    
    async def connect(self, uri: str) -> bool:
        """
        Open a new TCP connection to the host and port of ``uri``.
        
        Any existing connection is closed first.
        
        Returns:
            True if the new stream is connected
        """
        await self._close_stream()
        
        try:
            _, host, port, _ = parse_url(uri)
        except ValueError as e:
            self._logger.warning(f"Cannot connect to {uri!r}: {e}")
            return False
        
        self._state = ConnectionState.CONNECTING
        self._host = host
        self._port = port
        
        try:
            stream = await self._backend.connect_tcp(host, port, timeout=self._connect_timeout)
        except (OSError, ValueError, asyncio.TimeoutError) as e:
            # ValueError covers hostnames the resolver cannot IDNA-encode
            self._state = ConnectionState.DISCONNECTED
            self._logger.warning(f"Connecting to {host}:{port} failed: {e!r}")
            return False
        
        self._stream = stream
        self._line_reader = LineReader(stream)
        self._state = ConnectionState.CONNECTED
        self._logger.debug(f"Connected to {host}:{port}")
        
        return self.is_connected
    
    async def disconnect(self) -> bool:
        """
        Close the connection. Safe to call when already disconnected.
        
        Returns:
            True if the connection is no longer connected
        """
        await self._close_stream()
        return not self.is_connected
    
    async def _close_stream(self) -> None:
        stream = self._stream
        self._stream = None
        self._line_reader = None
        self._state = ConnectionState.DISCONNECTED
        
        if stream is None:
            return
        
        try:
            await stream.aclose()
        except OSError as e:
            self._logger.debug(f"Error closing stream: {e}")
        self._logger.debug(f"Disconnected from {self._host}:{self._port}")
    
    @property
    def is_connected(self) -> bool:
        """Live state of the underlying stream."""
        return self._stream is not None and not self._stream.is_closed
    
    @property
    def state(self) -> ConnectionState:
        if self._state == ConnectionState.CONNECTED and not self.is_connected:
            return ConnectionState.DISCONNECTED
        return self._state
    
    @property
    def stream(self) -> NetworkStream:
        """
        The active stream.
        
        Raises:
            StreamError: If there is no active stream
        """
        if self._stream is None:
            raise StreamError("not connected")
        return self._stream
    
    @property
    def line_reader(self) -> LineReader:
        """
        Line reader bound to the active stream.
        
        Raises:
            StreamError: If there is no active stream
        """
        if self._line_reader is None:
            raise StreamError("not connected")
        return self._line_reader
    
    @property
    def host(self) -> Optional[str]:
        return self._host
    
    @property
    def port(self) -> Optional[int]:
        return self._port
    
    @property
    def read_timeout(self) -> float:
        return self._read_timeout
