"""
Buffered line reader over a NetworkStream.
"""

from .exceptions import ProtocolError, StreamError
from .network.stream import NetworkStream


class LineReader:
    """
    Reads CRLF/LF terminated lines, and raw body bytes, from a NetworkStream.
    
    The reader never closes the stream and keeps bytes it has received
    but not yet returned, so one reader serves every response on a
    keep-alive connection. A read interrupted by a timeout or
    cancellation loses nothing: bytes only leave the buffer when they
    are returned.
    """
    
    DEFAULT_CHUNK_SIZE = 1024
    MAX_LINE_SIZE = 64 * 1024
    
    def __init__(
        self,
        stream: NetworkStream,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        max_line_size: int = MAX_LINE_SIZE,
    ) -> None:
        self._stream = stream
        self._chunk_size = chunk_size
        self._max_line_size = max_line_size
        self._buffer = bytearray()
    
    @property
    def buffered(self) -> int:
        """Number of received bytes not returned yet."""
        return len(self._buffer)
    
    async def readline(self) -> bytes:
        """
        Return the next line, terminator included.
        
        Raises:
            StreamError: If the stream reports end-of-stream.
            ProtocolError: If the line grows past the maximum size.
        """
        while True:
            end = self._buffer.find(b"\n")
            if end != -1:
                return self._take(end + 1)
            if len(self._buffer) > self._max_line_size:
                raise ProtocolError(f"Line exceeds {self._max_line_size} bytes")
            await self._fill()
    
    async def read(self, max_bytes: int) -> bytes:
        """
        Return up to ``max_bytes`` bytes as soon as any are available.
        
        Raises:
            StreamError: If the stream reports end-of-stream.
        """
        if not self._buffer:
            await self._fill()
        return self._take(min(max_bytes, len(self._buffer)))
    
    def _take(self, size: int) -> bytes:
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data
    
    async def _fill(self) -> None:
        chunk = await self._stream.read(self._chunk_size)
        if not chunk:
            raise StreamError("end of stream")
        self._buffer.extend(chunk)
