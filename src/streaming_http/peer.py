"""
In-process push server for tests and demos.

PushPeer accepts one client at a time, answers every request at once and
can later push unsolicited responses on the same connection, which is
what a waiting long-poll client reads.
"""

import asyncio
import logging
from http import HTTPStatus
from typing import Awaitable, Callable, List, Optional, Union

import h11

from .exceptions import ConnectionError

logger = logging.getLogger(__name__)

ReplyHandler = Callable[[str], Union[str, Awaitable[str]]]

SERVER_NAME = "StreamingHttpServer"


def _response_headers(body: bytes) -> List[tuple]:
    return [
        ("Connection", "keep-alive"),
        ("Content-Type", "text/xml"),
        ("Content-Length", str(len(body))),
        ("Server", SERVER_NAME),
    ]


def frame_response(payload: str, status_code: int = 200) -> bytes:
    """Serialize a Content-Length delimited response."""
    body = payload.encode("utf-8")
    head = f"HTTP/1.1 {status_code} {HTTPStatus(status_code).phrase}\r\n"
    for name, value in _response_headers(body):
        head += f"{name}: {value}\r\n"
    return (head + "\r\n").encode("ascii") + body


def echo_handler(body: str) -> str:
    return body


class PushPeer:
    """
    Minimal keep-alive HTTP server with server push.
    
    Requests are parsed with h11 and answered through it; pushes are
    written as raw response frames, since they do not answer a request.
    """
    
    def __init__(
        self,
        handler: Optional[ReplyHandler] = None,
        host: str = "127.0.0.1",
        port: int = 0,
    ):
        self._handler = handler or echo_handler
        self._host = host
        self._port = port
        self._server: Optional[asyncio.AbstractServer] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._clients: List[asyncio.StreamWriter] = []
        self.received: List[str] = []
    
    async def start(self) -> None:
        self._server = await asyncio.start_server(self._handle_client, self._host, self._port)
        self._port = self._server.sockets[0].getsockname()[1]
        logger.debug(f"Push peer listening on {self._host}:{self._port}")
    
    async def stop(self) -> None:
        for writer in self._clients:
            writer.close()
        self._clients.clear()
        self._writer = None
        if self._server is not None:
            self._server.close()
            await self._server.wait_closed()
            self._server = None
        logger.debug("Push peer stopped")
    
    @property
    def port(self) -> int:
        return self._port
    
    @property
    def url(self) -> str:
        return f"http://{self._host}:{self._port}/"
    
    @property
    def has_client(self) -> bool:
        return self._writer is not None and not self._writer.is_closing()
    
    async def push(self, payload: str, status_code: int = 200) -> None:
        """
        Send an unsolicited response to the connected client.
        
        Raises:
            ConnectionError: If no client is connected
        """
        if not self.has_client:
            raise ConnectionError("no client connected")
        logger.debug(f"Pushing {len(payload)} characters")
        self._writer.write(frame_response(payload, status_code))
        await self._writer.drain()
    
    async def _handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        self._writer = writer
        self._clients.append(writer)
        conn = h11.Connection(h11.SERVER)
        body = bytearray()
        
        try:
            while True:
                event = conn.next_event()
                
                if event is h11.NEED_DATA:
                    conn.receive_data(await reader.read(65536))
                elif isinstance(event, h11.Request):
                    body = bytearray()
                elif isinstance(event, h11.Data):
                    body.extend(event.data)
                elif isinstance(event, h11.EndOfMessage):
                    text = body.decode("utf-8", errors="replace")
                    self.received.append(text)
                    await self._reply(conn, writer, text)
                    if conn.our_state is not h11.DONE:
                        break
                    conn.start_next_cycle()
                elif isinstance(event, h11.ConnectionClosed):
                    break
        except h11.RemoteProtocolError as e:
            logger.warning(f"Bad request from client: {e}")
        except (ConnectionResetError, BrokenPipeError) as e:
            logger.debug(f"Client went away: {e}")
        finally:
            writer.close()
            if self._writer is writer:
                self._writer = None
    
    async def _reply(self, conn: h11.Connection, writer: asyncio.StreamWriter, request_body: str) -> None:
        reply = self._handler(request_body)
        if asyncio.iscoroutine(reply):
            reply = await reply
        
        data = reply.encode("utf-8")
        writer.write(conn.send(h11.Response(
            status_code=200, headers=_response_headers(data), reason=b"OK",
        )))
        writer.write(conn.send(h11.Data(data=data)))
        writer.write(conn.send(h11.EndOfMessage()))
        await writer.drain()
    
    async def __aenter__(self):
        await self.start()
        return self
    
    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
