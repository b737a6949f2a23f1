"""
Mock network implementations for testing.

This module provides mock implementations of NetworkStream and NetworkBackend
that can be used for unit testing without requiring actual network connections.
"""

import asyncio
from typing import Any, Dict, List, Optional, Set, Tuple
from .stream import NetworkStream
from .backend import NetworkBackend


class MockNetworkStream(NetworkStream):
    """
    Mock network stream for testing.
    
    This implementation simulates a network stream in memory,
    allowing tests to verify network behavior without actual I/O.
    """
    
    def __init__(self, data: bytes = b"", wait_for_data: bool = False):
        """
        Initialize the mock stream.
        
        Args:
            data: Initial data to be available for reading.
            wait_for_data: If True, reading an exhausted stream blocks until
                more data is added, like an idle socket. Otherwise it
                returns ``b""`` immediately, like a socket at end-of-stream.
        """
        self._data = data
        self._position = 0
        self._closed = False
        self._wait_for_data = wait_for_data
        self._data_event: Optional[asyncio.Event] = None
        self._extra_info: Dict[str, Any] = {}
        self._write_buffer: List[bytes] = []
        self._read_errors: List[Exception] = []
        self._write_error: Optional[Exception] = None
        self.read_calls = 0
    
    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        """
        Read data from the mock stream.
        
        Raises:
            RuntimeError: If the stream is closed.
        """
        self.read_calls += 1
        if self._closed:
            raise RuntimeError("Stream is closed")
        
        if self._read_errors:
            raise self._read_errors.pop(0)
        
        while self._wait_for_data and self._position >= len(self._data):
            if self._data_event is None:
                self._data_event = asyncio.Event()
            self._data_event.clear()
            await self._data_event.wait()
            if self._closed:
                raise RuntimeError("Stream is closed")
        
        if self._position >= len(self._data):
            return b""
        
        if max_bytes is None:
            result = self._data[self._position:]
            self._position = len(self._data)
        else:
            end = min(self._position + max_bytes, len(self._data))
            result = self._data[self._position:end]
            self._position = end
        
        return result
    
    async def write(self, data: bytes) -> None:
        """
        Write data to the mock stream.
        
        Raises:
            RuntimeError: If the stream is closed.
        """
        if self._closed:
            raise RuntimeError("Stream is closed")
        
        if self._write_error is not None:
            raise self._write_error
        
        self._write_buffer.append(data)
    
    async def aclose(self) -> None:
        """Close the mock stream."""
        self._closed = True
        self._wake_readers()
    
    def get_extra_info(self, name: str) -> Optional[Any]:
        return self._extra_info.get(name)
    
    @property
    def is_closed(self) -> bool:
        """Check if the mock stream is closed."""
        return self._closed
    
    @property
    def written_data(self) -> bytes:
        """Get all data that was written to the stream."""
        return b"".join(self._write_buffer)
    
    @property
    def unread_data(self) -> bytes:
        """Get the data that has not been read yet."""
        return self._data[self._position:]
    
    def set_extra_info(self, name: str, value: Any) -> None:
        self._extra_info[name] = value
    
    def add_data(self, data: bytes) -> None:
        """
        Add data to be available for reading.
        
        Args:
            data: The data to add.
        """
        self._data += data
        self._wake_readers()
    
    def add_read_error(self, error: Exception) -> None:
        """Make the next read raise ``error`` instead of returning data."""
        self._read_errors.append(error)
    
    def fail_writes(self, error: Optional[Exception] = None) -> None:
        """Make every following write raise ``error`` (BrokenPipeError by default)."""
        self._write_error = error or BrokenPipeError("Broken pipe")
    
    def _wake_readers(self) -> None:
        if self._data_event is not None:
            self._data_event.set()


class MockNetworkBackend(NetworkBackend):
    """
    Mock network backend for testing.
    
    Every ``connect_tcp`` call returns a fresh MockNetworkStream, so a
    reconnect never sees data left on the previous connection.
    """
    
    def __init__(self, wait_for_data: bool = False):
        """
        Initialize the mock backend.
        
        Args:
            wait_for_data: Passed to every MockNetworkStream created.
        """
        self._connections: Dict[Tuple[str, int], MockNetworkStream] = {}
        self._refused: Set[Tuple[str, int]] = set()
        self._wait_for_data = wait_for_data
        self._connection_count = 0
    
    async def connect_tcp(
        self, 
        host: str, 
        port: int, 
        timeout: Optional[float] = None
    ) -> MockNetworkStream:
        """
        Create a mock TCP connection.
        
        Raises:
            ConnectionRefusedError: If the endpoint was marked as refused.
        """
        key = (host, port)
        
        if key in self._refused:
            raise ConnectionRefusedError(f"Connection refused: {host}:{port}")
        
        stream = MockNetworkStream(wait_for_data=self._wait_for_data)
        stream.set_extra_info("socket", self._connection_count)
        stream.set_extra_info("peername", (host, port))
        stream.set_extra_info("sockname", ("127.0.0.1", 12345))
        self._connections[key] = stream
        self._connection_count += 1
        
        return stream
    
    def get_connection(self, host: str, port: int) -> Optional[MockNetworkStream]:
        """Get the most recent mock connection to ``host:port``."""
        return self._connections.get((host, port))
    
    def add_connection_data(self, host: str, port: int, data: bytes) -> None:
        """
        Add data to a mock connection for testing.
        
        Args:
            host: The hostname.
            port: The port number.
            data: The data to add.
        """
        connection = self.get_connection(host, port)
        if connection:
            connection.add_data(data)
    
    def refuse(self, host: str, port: int) -> None:
        """Make connections to ``host:port`` fail with ConnectionRefusedError."""
        self._refused.add((host, port))
    
    @property
    def connection_count(self) -> int:
        return self._connection_count
    
    def reset(self) -> None:
        """Reset all mock connections."""
        self._connections.clear()
        self._refused.clear()
        self._connection_count = 0
