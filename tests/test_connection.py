"""
Tests for the connection manager.
"""

import asyncio

import pytest

from streaming_http.connection import Connection, ConnectionState
from streaming_http.exceptions import StreamError
from streaming_http.network.backend import NetworkBackend
from streaming_http.network.mock import MockNetworkBackend

from conftest import HOST, PORT, URL


class SlowBackend(NetworkBackend):
    """Backend whose connects never complete."""
    
    async def connect_tcp(self, host, port, timeout=None):
        await asyncio.wait_for(asyncio.sleep(10), timeout)


class TestConnection:
    """Test Connection lifecycle."""
    
    @pytest.fixture
    def backend(self):
        return MockNetworkBackend()
    
    @pytest.fixture
    def connection(self, backend, quiet_logger):
        return Connection(backend=backend, logger=quiet_logger)
    
    def test_initial_state(self, connection):
        assert connection.state == ConnectionState.DISCONNECTED
        assert not connection.is_connected
        assert connection.read_timeout == Connection.DEFAULT_READ_TIMEOUT
    
    @pytest.mark.asyncio
    async def test_connect(self, connection, backend):
        assert await connection.connect(URL)
        
        assert connection.is_connected
        assert connection.state == ConnectionState.CONNECTED
        assert connection.host == HOST
        assert connection.port == PORT
        assert connection.stream is backend.get_connection(HOST, PORT)
    
    @pytest.mark.asyncio
    async def test_connect_refused(self, connection, backend):
        backend.refuse(HOST, PORT)
        
        assert not await connection.connect(URL)
        assert not connection.is_connected
        assert connection.state == ConnectionState.DISCONNECTED
    
    @pytest.mark.asyncio
    async def test_connect_timeout(self, quiet_logger):
        connection = Connection(backend=SlowBackend(), connect_timeout=0.05, logger=quiet_logger)
        
        assert not await connection.connect(URL)
        assert connection.state == ConnectionState.DISCONNECTED
    
    @pytest.mark.asyncio
    @pytest.mark.parametrize("uri", ["not a url", "https://example.com/", "http://example.com:99999/"])
    async def test_connect_invalid_uri(self, connection, uri):
        assert not await connection.connect(uri)
        assert connection.state == ConnectionState.DISCONNECTED
    
    @pytest.mark.asyncio
    async def test_connect_unencodable_hostname(self, quiet_logger):
        connection = Connection(logger=quiet_logger)
        
        assert not await connection.connect("http://" + "a" * 64 + ".example:8080/")
        assert not connection.is_connected
        assert connection.state == ConnectionState.DISCONNECTED
    
    def test_zero_read_timeout_is_kept(self, backend, quiet_logger):
        connection = Connection(backend=backend, read_timeout=0.0, logger=quiet_logger)
        
        assert connection.read_timeout == 0.0
    
    @pytest.mark.asyncio
    async def test_reconnect_discards_previous_stream(self, connection, backend):
        await connection.connect(URL)
        first = connection.stream
        
        assert await connection.connect(URL)
        
        assert first.is_closed
        assert connection.stream is not first
        assert backend.connection_count == 2
    
    @pytest.mark.asyncio
    async def test_failed_reconnect_leaves_disconnected(self, connection, backend):
        await connection.connect(URL)
        first = connection.stream
        backend.refuse(HOST, PORT)
        
        assert not await connection.connect(URL)
        assert first.is_closed
        assert not connection.is_connected
    
    @pytest.mark.asyncio
    async def test_disconnect_is_idempotent(self, connection):
        await connection.connect(URL)
        stream = connection.stream
        
        assert await connection.disconnect()
        assert not connection.is_connected
        assert stream.is_closed
        
        assert await connection.disconnect()
        assert await connection.disconnect()
        assert not connection.is_connected
    
    @pytest.mark.asyncio
    async def test_disconnect_without_connect(self, connection):
        assert await connection.disconnect()
        assert not connection.is_connected
    
    @pytest.mark.asyncio
    async def test_is_connected_reflects_stream(self, connection):
        await connection.connect(URL)
        
        await connection.stream.aclose()
        
        assert not connection.is_connected
        assert connection.state == ConnectionState.DISCONNECTED
    
    def test_stream_requires_connection(self, connection):
        with pytest.raises(StreamError):
            connection.stream
        with pytest.raises(StreamError):
            connection.line_reader
