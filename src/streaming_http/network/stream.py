"""
Network stream interface for streaming_http.

Every byte the client sends or receives goes through a NetworkStream, so
the transport can run over a real socket or an in-memory mock.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class NetworkStream(ABC):
    """
    Duplex byte stream over one TCP connection.
    
    Implementations must not buffer reads on behalf of the caller: the
    line reader on top of the stream keeps its own buffer and may be
    reused across many request/response exchanges.
    """
    
    @abstractmethod
    async def read(self, max_bytes: Optional[int] = None) -> bytes:
        """
        Read data from the stream.
        
        Args:
            max_bytes: Maximum number of bytes to read.
        
        Returns:
            The data read, or ``b""`` when no more data is available.
        
        Raises:
            RuntimeError: If the stream is closed.
            OSError: If a network error occurs.
        """
        pass
    
    @abstractmethod
    async def write(self, data: bytes) -> None:
        """
        Write data to the stream and wait until it has been flushed.
        
        Raises:
            RuntimeError: If the stream is closed.
            OSError: If a network error occurs.
        """
        pass
    
    @abstractmethod
    async def aclose(self) -> None:
        """Close the stream. Calling it twice is harmless."""
        pass
    
    @abstractmethod
    def get_extra_info(self, name: str) -> Optional[Any]:
        """
        Get extra information about the stream.
        
        Common names are ``"socket"``, ``"peername"`` and ``"sockname"``.
        """
        pass
    
    @property
    @abstractmethod
    def is_closed(self) -> bool:
        """True once the stream was closed locally or by the peer."""
        pass
