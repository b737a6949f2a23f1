"""
Custom exceptions for streaming_http.

These exceptions are raised inside the transport layer and are absorbed
at its public boundary, where failures become a ``False`` return value or
an incomplete ``Response``.
"""

from typing import Optional


class StreamingHTTPError(Exception):
    """Base exception for all streaming_http errors."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ConnectionError(StreamingHTTPError):
    """Raised when there's an error with the TCP connection."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Connection error: {message}", cause)


class ProtocolError(StreamingHTTPError):
    """Raised when a response does not follow the supported HTTP/1.1 subset."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Protocol error: {message}", cause)


class StreamError(StreamingHTTPError):
    """Raised when the byte stream fails or reports end-of-stream."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None) -> None:
        super().__init__(f"Stream error: {message}", cause)


class OperationCancelled(StreamingHTTPError):
    """Raised when a cancellation event fires during a read or write."""
    
    def __init__(self, message: str = "operation cancelled") -> None:
        super().__init__(f"Cancelled: {message}")
