"""
Pytest configuration for streaming_http tests.

Shared fixtures: mock network backends, clients wired to them, and
canned server responses.
"""

import logging

import pytest

from streaming_http import StreamingHTTPClient
from streaming_http.network.mock import MockNetworkBackend

HOST = "example.com"
PORT = 8080
URL = f"http://{HOST}:{PORT}/"


def http_response(body: str, status: str = "200 OK", content_length=None) -> bytes:
    """Build a raw response the way a push server frames it."""
    data = body.encode("utf-8")
    if content_length is None:
        content_length = len(data)
    return (
        f"HTTP/1.1 {status}\r\n"
        f"Connection: keep-alive\r\n"
        f"Content-Type: text/xml\r\n"
        f"Content-Length: {content_length}\r\n"
        f"Server: StreamingHttpServer\r\n"
        f"\r\n"
    ).encode("ascii") + data


@pytest.fixture
def quiet_logger():
    """Logger that swallows everything, for silent unit tests."""
    logger = logging.getLogger("streaming_http.tests")
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


@pytest.fixture
def mock_backend():
    """Backend whose idle streams report end-of-stream immediately."""
    return MockNetworkBackend()


@pytest.fixture
def waiting_backend():
    """Backend whose idle streams block until data arrives."""
    return MockNetworkBackend(wait_for_data=True)


@pytest.fixture
def client(mock_backend, quiet_logger):
    """Client wired to the mock backend."""
    return StreamingHTTPClient(backend=mock_backend, poll_interval=0.01, logger=quiet_logger)


@pytest.fixture
def waiting_client(waiting_backend, quiet_logger):
    """Client wired to the blocking mock backend."""
    return StreamingHTTPClient(backend=waiting_backend, poll_interval=0.01, logger=quiet_logger)


@pytest.fixture
def sample_push_body():
    """Push document as sent by the tee-sheet server."""
    return "<pushResponse><data><item>0</item><item>1</item><item>2</item></data></pushResponse>"


@pytest.fixture
def make_response():
    """Factory for raw HTTP responses."""
    return http_response
