"""
Network utilities for streaming_http.

Socket tuning and URL handling shared by the backends and the
connection manager.
"""

import socket
from typing import Tuple, Union
from urllib.parse import urlparse


def configure_socket(sock: socket.socket) -> None:
    """
    Apply the socket options used for long-lived push connections.
    
    Nagle's algorithm is disabled so small requests go out immediately,
    and TCP keep-alive probes detect a dead peer during long waits.
    """
    sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
    
    # Platform-specific keep-alive settings
    if hasattr(socket, 'TCP_KEEPIDLE'):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPIDLE, 60)
    if hasattr(socket, 'TCP_KEEPINTVL'):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPINTVL, 10)
    if hasattr(socket, 'TCP_KEEPCNT'):
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_KEEPCNT, 6)


def parse_url(url: str) -> Tuple[str, str, int, str]:
    """
    Parse URL into components.
    
    Args:
        url: URL string to parse
    
    Returns:
        Tuple of (scheme, host, port, path)
    
    Raises:
        ValueError: If URL is malformed or uses an unsupported scheme
    """
    parsed = urlparse(url)
    
    scheme = parsed.scheme or "http"
    if scheme != "http":
        raise ValueError(f"Unsupported URL scheme: {scheme}")
    
    host = parsed.hostname or ""
    if not host:
        raise ValueError("No hostname found in URL")
    
    # urlparse raises ValueError itself for out-of-range ports
    port = parsed.port
    if port is None:
        port = 80
    port = validate_port(port)
    
    path = parsed.path or "/"
    if parsed.query:
        path += "?" + parsed.query
    
    return scheme, host, port, path


def format_host_header(host: str, port: int) -> str:
    """Format the Host header value, omitting the default HTTP port."""
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    if port == 80:
        return host
    return f"{host}:{port}"


def validate_port(port: Union[int, str]) -> int:
    """
    Validate and convert port to integer.
    
    Raises:
        ValueError: If port is invalid
    """
    try:
        port_int = int(port)
    except (ValueError, TypeError):
        raise ValueError(f"Invalid port: {port}")
    
    if not (1 <= port_int <= 65535):
        raise ValueError(f"Port must be between 1 and 65535, got {port_int}")
    
    return port_int
