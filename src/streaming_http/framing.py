"""
Request framing for streaming_http.

Serializes an OutboundRequest into one HTTP/1.1 POST and writes it to
the active connection.
"""

import asyncio
import logging
from typing import Optional

import h11

from .connection import Connection
from .exceptions import OperationCancelled
from .network.utils import format_host_header
from .primitives import OutboundRequest
from .timeouts import wait_with_cancel


def frame_request(request: OutboundRequest, host: str, user_agent: str) -> bytes:
    """
    Build the wire form of ``request``.
    
    Serialized through a fresh client-side h11 connection; h11 keeps the
    header order and casing given here. Content-Length is the payload's
    UTF-8 byte length, not its character count.
    
    Raises:
        h11.LocalProtocolError: If the path or a header value is not valid HTTP
    """
    headers = [
        ("Connection", "keep-alive"),
        ("Content-Type", request.content_type),
        ("Content-Length", str(request.content_length)),
        ("Host", host),
        ("Accept", "*/*"),
        ("Accept-Encoding", "identity"),
        ("User-Agent", user_agent),
    ]
    conn = h11.Connection(h11.CLIENT)
    data = conn.send(h11.Request(method="POST", target=request.path, headers=headers))
    if request.payload:
        data += conn.send(h11.Data(data=request.payload))
    data += conn.send(h11.EndOfMessage())
    return data


class RequestFramer:
    """Writes framed requests to a Connection."""
    
    DEFAULT_USER_AGENT = "StreamingHttpClient/0.0.1"
    DEFAULT_WRITE_TIMEOUT = 30.0  # seconds
    
    def __init__(
        self,
        user_agent: Optional[str] = None,
        write_timeout: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._user_agent = user_agent or self.DEFAULT_USER_AGENT
        self._write_timeout = (
            write_timeout if write_timeout is not None else self.DEFAULT_WRITE_TIMEOUT
        )
        self._logger = logger or logging.getLogger(__name__)
        self._bytes_sent = 0
    
    @property
    def user_agent(self) -> str:
        return self._user_agent
    
    @property
    def bytes_sent(self) -> int:
        return self._bytes_sent
    
    async def send(
        self,
        connection: Connection,
        request: OutboundRequest,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> bool:
        """
        Write ``request`` to ``connection`` in one logical write.
        
        A failed write leaves the connection in an unknown state; callers
        should reconnect before trying again.
        
        Returns:
            True if the whole request was written
        """
        if not connection.is_connected:
            self._logger.warning("Cannot send request: not connected")
            return False
        
        host = format_host_header(connection.host, connection.port)
        try:
            data = frame_request(request, host, self._user_agent)
        except (h11.LocalProtocolError, ValueError) as e:
            self._logger.error(f"Cannot frame request for {request.path!r}: {e}")
            return False
        self._logger.debug(
            f"POST {request.path} ({request.content_length} bytes): "
            f"{request.payload.decode('utf-8', errors='replace')}"
        )
        
        try:
            await wait_with_cancel(
                connection.stream.write(data), self._write_timeout, cancel_event
            )
        except OperationCancelled:
            self._logger.warning("Sending request cancelled")
            return False
        except asyncio.TimeoutError:
            self._logger.error(f"Sending request timed out after {self._write_timeout}s")
            return False
        except (OSError, RuntimeError) as e:
            self._logger.error(f"Sending request failed: {e!r}")
            return False
        
        self._bytes_sent += len(data)
        return True
