"""
High-level client for streaming_http.

StreamingHTTPClient ties the connection manager, the request framer and
the streaming response reader together behind one object.
"""

import asyncio
import logging
from typing import Any, Dict, Optional, Union

from .connection import Connection, ConnectionState
from .framing import RequestFramer
from .network.backend import NetworkBackend
from .primitives import DEFAULT_CONTENT_TYPE, DEFAULT_PATH, OutboundRequest, Response
from .reader import StreamingResponseReader


class StreamingHTTPClient:
    """
    Long-poll client over one keep-alive connection.
    
    ``send_request`` and ``get_response`` are not locked: callers must not
    overlap them on the same client. ``exchange`` runs a send/read pair
    under a lock for clients shared between tasks.
    
    Example:
        async with StreamingHTTPClient(read_timeout=15 * 60) as client:
            if await client.connect("http://localhost:8080/"):
                await client.send_request(payload)
                response = await client.get_response()
    """
    
    DEFAULT_USER_AGENT = RequestFramer.DEFAULT_USER_AGENT
    DEFAULT_READ_TIMEOUT = Connection.DEFAULT_READ_TIMEOUT
    
    def __init__(
        self,
        user_agent: Optional[str] = None,
        read_timeout: Optional[float] = None,
        write_timeout: Optional[float] = None,
        connect_timeout: Optional[float] = None,
        poll_interval: Optional[float] = None,
        backend: Optional[NetworkBackend] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the client.
        
        Args:
            user_agent: Value of the User-Agent header
            read_timeout: Default time to wait for a response in seconds
            write_timeout: Timeout for sending a request in seconds
            connect_timeout: Timeout for establishing the connection in seconds
            poll_interval: Pause between read attempts on an idle socket
            backend: NetworkBackend used to open connections
            logger: Logger for all client components
        """
        self._logger = logger or logging.getLogger(__name__)
        self._connection = Connection(
            backend=backend,
            read_timeout=read_timeout,
            connect_timeout=connect_timeout,
            logger=self._logger,
        )
        self._framer = RequestFramer(
            user_agent=user_agent,
            write_timeout=write_timeout,
            logger=self._logger,
        )
        self._reader = StreamingResponseReader(
            poll_interval=poll_interval,
            logger=self._logger,
        )
        self._exchange_lock: Optional[asyncio.Lock] = None
        
        # Metrics
        self._requests_sent = 0
        self._failed_sends = 0
        self._responses_read = 0
        self._incomplete_responses = 0
    
    async def connect(self, uri: str) -> bool:
        """Connect to ``uri``, replacing any existing connection."""
        return await self._connection.connect(uri)
    
    async def disconnect(self) -> bool:
        """Close the connection. Returns True once disconnected."""
        return await self._connection.disconnect()
    
    @property
    def is_connected(self) -> bool:
        return self._connection.is_connected
    
    @property
    def state(self) -> ConnectionState:
        return self._connection.state
    
    @property
    def connection(self) -> Connection:
        return self._connection
    
    async def send_request(
        self,
        payload: Union[str, bytes],
        path: str = DEFAULT_PATH,
        content_type: str = DEFAULT_CONTENT_TYPE,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> bool:
        """
        POST ``payload`` on the current connection.
        
        Returns:
            False if the request could not be written
        """
        try:
            request = OutboundRequest.create(payload, path=path, content_type=content_type)
        except ValueError as e:
            self._logger.error(f"Invalid request: {e}")
            self._failed_sends += 1
            return False
        sent = await self._framer.send(self._connection, request, cancel_event)
        if sent:
            self._requests_sent += 1
        else:
            self._failed_sends += 1
        return sent
    
    async def get_response(
        self,
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Response:
        """
        Wait for the next response on the current connection.
        
        Args:
            timeout: Seconds to wait; defaults to the client's read timeout
            cancel_event: Optional event that aborts the wait when set
        """
        if timeout is None:
            timeout = self._connection.read_timeout
        
        response = await self._reader.read(self._connection, timeout, cancel_event)
        self._responses_read += 1
        if not response.complete:
            self._incomplete_responses += 1
        return response
    
    async def exchange(
        self,
        payload: Union[str, bytes],
        timeout: Optional[float] = None,
        path: str = DEFAULT_PATH,
        content_type: str = DEFAULT_CONTENT_TYPE,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Response:
        """
        Send ``payload`` and wait for its response while holding the
        client's lock, so concurrent callers never interleave.
        """
        if self._exchange_lock is None:
            self._exchange_lock = asyncio.Lock()
        async with self._exchange_lock:
            sent = await self.send_request(payload, path, content_type, cancel_event)
            if not sent:
                return Response.failed()
            return await self.get_response(timeout, cancel_event)
    
    @property
    def metrics(self) -> Dict[str, Any]:
        """
        Get client metrics.
        
        Returns:
            Dictionary with client metrics
        """
        return {
            "requests_sent": self._requests_sent,
            "failed_sends": self._failed_sends,
            "bytes_sent": self._framer.bytes_sent,
            "responses_read": self._responses_read,
            "incomplete_responses": self._incomplete_responses,
            "state": self._connection.state.value,
        }
    
    async def __aenter__(self):
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.disconnect()
