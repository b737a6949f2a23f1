"""
Value objects for streaming_http.

Requests and responses are immutable: a request is built fresh for every
call and a response is constructed once by the reader and handed to the
caller.
"""

from dataclasses import dataclass
from typing import Optional, Union


DEFAULT_PATH = "/"
DEFAULT_CONTENT_TYPE = "text/xml"


@dataclass(frozen=True)
class OutboundRequest:
    """
    Immutable POST request: target path, content type and raw payload.
    """
    
    payload: bytes
    path: str = DEFAULT_PATH
    content_type: str = DEFAULT_CONTENT_TYPE
    
    def __post_init__(self) -> None:
        """Validate request data after initialization."""
        if not isinstance(self.payload, bytes):
            raise ValueError("payload must be bytes")
        
        if not self.path.startswith("/"):
            raise ValueError("path must start with '/'")
        
        for value in (self.path, self.content_type):
            if "\r" in value or "\n" in value:
                raise ValueError("path and content type must not contain line breaks")
    
    @classmethod
    def create(
        cls,
        payload: Union[str, bytes],
        path: str = DEFAULT_PATH,
        content_type: str = DEFAULT_CONTENT_TYPE,
    ) -> "OutboundRequest":
        """
        Create an OutboundRequest, UTF-8 encoding a text payload.
        
        Args:
            payload: Request body as text or bytes
            path: Request target
            content_type: Value of the Content-Type header
            
        Returns:
            New OutboundRequest instance
        """
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        
        return cls(payload=payload, path=path, content_type=content_type)
    
    @property
    def content_length(self) -> int:
        """Length of the payload in bytes (not characters)."""
        return len(self.payload)


@dataclass(frozen=True)
class Response:
    """
    Result of one streaming read.
    
    ``success`` is derived from the status line (any 2xx code). ``complete``
    tells whether the body reached its declared Content-Length before the
    wait ended; a timed-out or cancelled read returns ``complete=False``
    with whatever had arrived.
    """
    
    body: str
    success: bool
    elapsed_ms: float
    status_code: Optional[int] = None
    complete: bool = False
    
    @classmethod
    def failed(cls, elapsed_ms: float = 0.0) -> "Response":
        """Create an empty unsuccessful response."""
        return cls(body="", success=False, elapsed_ms=elapsed_ms)
