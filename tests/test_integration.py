"""
End-to-end tests: StreamingHTTPClient over real sockets against PushPeer.
"""

import asyncio

import pytest

from streaming_http import ConnectionError, StreamingHTTPClient
from streaming_http.payload import (
    build_method_call,
    build_method_response,
    build_push_response,
    count_push_items,
    parse_method_call,
    parse_string_result,
)
from streaming_http.peer import PushPeer, frame_response


class TestPushPeerIntegration:
    """Client and peer talking over localhost."""
    
    @pytest.mark.asyncio
    async def test_hello_round_trip(self, quiet_logger):
        async with PushPeer() as peer:
            async with StreamingHTTPClient(poll_interval=0.01, logger=quiet_logger) as client:
                assert await client.connect(peer.url)
                assert client.is_connected
                
                assert await client.send_request("hello")
                response = await client.get_response(5.0)
                
                assert response.success
                assert response.status_code == 200
                assert response.body == "hello"
                assert response.complete
                assert peer.received == ["hello"]
    
    @pytest.mark.asyncio
    async def test_multibyte_payload(self, quiet_logger):
        payload = "Grüße 東京 🎉"
        async with PushPeer() as peer:
            async with StreamingHTTPClient(logger=quiet_logger) as client:
                await client.connect(peer.url)
                await client.send_request(payload)
                response = await client.get_response(5.0)
                
                assert response.body == payload
                assert peer.received == [payload]
    
    @pytest.mark.asyncio
    async def test_long_poll_receives_push(self, quiet_logger):
        async with PushPeer() as peer:
            async with StreamingHTTPClient(poll_interval=0.01, logger=quiet_logger) as client:
                await client.connect(peer.url)
                await client.send_request("subscribe")
                await client.get_response(5.0)
                
                async def push_later():
                    await asyncio.sleep(0.2)
                    await peer.push(build_push_response(7))
                
                pushing = asyncio.ensure_future(push_later())
                update = await client.get_response(10.0)
                await pushing
                
                assert update.success
                assert count_push_items(update.body) == 7
                assert 150 <= update.elapsed_ms < 10000
    
    @pytest.mark.asyncio
    async def test_pushed_error_status(self, quiet_logger):
        async with PushPeer() as peer:
            async with StreamingHTTPClient(logger=quiet_logger) as client:
                await client.connect(peer.url)
                await client.send_request("x")
                await client.get_response(5.0)
                
                await peer.push("gone", status_code=500)
                response = await client.get_response(5.0)
                
                assert not response.success
                assert response.status_code == 500
                assert response.body == "gone"
    
    @pytest.mark.asyncio
    async def test_no_push_times_out(self, quiet_logger):
        async with PushPeer() as peer:
            async with StreamingHTTPClient(poll_interval=0.01, logger=quiet_logger) as client:
                await client.connect(peer.url)
                loop = asyncio.get_running_loop()
                start = loop.time()
                
                response = await client.get_response(0.3)
                
                assert 0.25 <= loop.time() - start < 2.0
                assert not response.success
                assert response.body == ""
                assert client.is_connected
    
    @pytest.mark.asyncio
    async def test_cancel_long_poll(self, quiet_logger):
        async with PushPeer() as peer:
            async with StreamingHTTPClient(logger=quiet_logger) as client:
                await client.connect(peer.url)
                cancel_event = asyncio.Event()
                loop = asyncio.get_running_loop()
                loop.call_later(0.1, cancel_event.set)
                start = loop.time()
                
                response = await client.get_response(60.0, cancel_event)
                
                assert loop.time() - start < 2.0
                assert not response.success
    
    @pytest.mark.asyncio
    async def test_sequential_requests_on_one_connection(self, quiet_logger):
        async with PushPeer(handler=lambda body: body.upper()) as peer:
            async with StreamingHTTPClient(logger=quiet_logger) as client:
                await client.connect(peer.url)
                
                await client.send_request("request a")
                first = await client.get_response(5.0)
                await client.send_request("b")
                second = await client.get_response(5.0)
                
                assert first.body == "REQUEST A"
                assert second.body == "B"
                assert peer.received == ["request a", "b"]
    
    @pytest.mark.asyncio
    async def test_login_and_subscribe_flow(self, quiet_logger):
        def handler(body):
            method, params = parse_method_call(body)
            if method == "loginSubscriber":
                return build_method_response("R29sZk5vdywweDAwMDAwRjVD")
            return build_method_response(f"Subscription received for {params[0]}")
        
        async with PushPeer(handler=handler) as peer:
            async with StreamingHTTPClient(logger=quiet_logger) as client:
                await client.connect(peer.url)
                
                await client.send_request(build_method_call("loginSubscriber", ["username", "P4s5W0rd!"]))
                token = parse_string_result((await client.get_response(5.0)).body)
                assert token == "R29sZk5vdywweDAwMDAwRjVD"
                
                await client.send_request(build_method_call("subscribeTeesheetUpdate", [token]))
                subscription = await client.get_response(5.0)
                assert parse_string_result(subscription.body) == f"Subscription received for {token}"
                
                await peer.push(build_push_response(3))
                await peer.push(build_push_response(4))
                counts = [count_push_items((await client.get_response(5.0)).body) for _ in range(2)]
                assert counts == [3, 4]
    
    @pytest.mark.asyncio
    async def test_async_handler(self, quiet_logger):
        async def handler(body):
            await asyncio.sleep(0.05)
            return f"late {body}"
        
        async with PushPeer(handler=handler) as peer:
            async with StreamingHTTPClient(logger=quiet_logger) as client:
                await client.connect(peer.url)
                response = await client.exchange("reply", timeout=5.0)
                
                assert response.body == "late reply"
    
    @pytest.mark.asyncio
    async def test_connect_refused(self, quiet_logger):
        peer = PushPeer()
        await peer.start()
        url = peer.url
        await peer.stop()
        
        client = StreamingHTTPClient(logger=quiet_logger)
        assert not await client.connect(url)
        assert not client.is_connected
    
    @pytest.mark.asyncio
    async def test_push_without_client(self):
        async with PushPeer() as peer:
            with pytest.raises(ConnectionError):
                await peer.push("nobody listens")
    
    def test_frame_response(self):
        assert frame_response("hello") == (
            b"HTTP/1.1 200 OK\r\n"
            b"Connection: keep-alive\r\n"
            b"Content-Type: text/xml\r\n"
            b"Content-Length: 5\r\n"
            b"Server: StreamingHttpServer\r\n"
            b"\r\n"
            b"hello"
        )
