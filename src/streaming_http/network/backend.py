"""
Network backend interface for streaming_http.

The connection manager never opens sockets itself; it asks a backend for
a NetworkStream. Production code uses the asyncio backend, tests swap in
the in-memory mock.
"""

from abc import ABC, abstractmethod
from typing import Optional
from .stream import NetworkStream


class NetworkBackend(ABC):
    """Opens the single TCP stream a Connection talks over."""
    
    @abstractmethod
    async def connect_tcp(
        self, 
        host: str, 
        port: int, 
        timeout: Optional[float] = None
    ) -> NetworkStream:
        """
        Open a stream to ``host:port`` with Nagle's algorithm disabled.
        
        Args:
            host: Hostname or IP address taken from the connect URI
            port: TCP port taken from the connect URI
            timeout: Seconds to wait for the connection, or None for no limit
        
        Returns:
            A connected NetworkStream
        
        Raises:
            OSError: If the connection is refused or the host is unreachable
            ValueError: If the resolver cannot encode the hostname
            asyncio.TimeoutError: If ``timeout`` passes first
        """
