"""
Streaming response reader for streaming_http.

Reads one HTTP/1.1 response off a keep-alive connection, line by line,
while the server may take minutes to send it. A read that finds no data
is not an error: the reader keeps polling until the caller's deadline
passes or the cancellation event is set, and then returns whatever it
has collected.
"""

import asyncio
import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from .connection import Connection
from .exceptions import OperationCancelled, ProtocolError, StreamError
from .lines import LineReader
from .primitives import Response
from .timeouts import Deadline, is_cancelled, wait_with_cancel

STATUS_LINE_RE = re.compile(r"^HTTP/\d+(?:\.\d+)?\s+(\d{3})(?:\s|$)", re.IGNORECASE)


@dataclass
class ReadState:
    """Progress of a single ``read`` call."""
    bytes_expected: int = 0
    header_phase: bool = True
    status_seen: bool = False
    status_code: Optional[int] = None
    success: bool = False
    complete: bool = False
    body: bytearray = field(default_factory=bytearray)
    
    @property
    def body_satisfied(self) -> bool:
        return not self.header_phase and len(self.body) >= self.bytes_expected


class StreamingResponseReader:
    """
    Incremental reader for Content-Length delimited responses.
    
    Headers are read line by line and the body in chunks capped at the
    remaining Content-Length. Each read is bounded by the time left in
    the call and raced against the cancellation event. A transient
    failure such as end-of-stream on an idle socket or a read timing out
    ends the current attempt; the reader pauses for ``poll_interval`` and tries
    again on the same state, since consumed bytes are never re-read.
    """
    
    DEFAULT_POLL_INTERVAL = 0.05  # seconds
    
    def __init__(
        self,
        poll_interval: Optional[float] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._poll_interval = (
            poll_interval if poll_interval is not None else self.DEFAULT_POLL_INTERVAL
        )
        self._logger = logger or logging.getLogger(__name__)
    
    async def read(
        self,
        connection: Connection,
        timeout: float,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> Response:
        """
        Read one response from ``connection``.
        
        Args:
            connection: Connection to read from
            timeout: Total time to wait for the response in seconds
            cancel_event: Optional event that aborts the wait when set
            
        Returns:
            The response; incomplete if the deadline passed, the wait was
            cancelled or the headers were malformed
        """
        deadline = Deadline(timeout)
        state = ReadState()
        attempts = 0
        
        self._logger.debug(f"Waiting up to {timeout}s for response")
        
        while not deadline.expired and not is_cancelled(cancel_event):
            attempts += 1
            try:
                await self._read_message(connection.line_reader, state, deadline, cancel_event)
            except OperationCancelled:
                self._logger.debug("Response read cancelled")
                break
            except (StreamError, OSError, RuntimeError, asyncio.TimeoutError) as e:
                self._logger.debug(f"Read attempt {attempts} interrupted: {e!r}")
                await self._pause(deadline, cancel_event)
                continue
            except ProtocolError as e:
                self._logger.warning(f"Malformed response: {e.message}")
            
            return self._build_response(state, deadline)
        
        self._logger.debug(
            f"No complete response after {deadline.elapsed_ms:.0f}ms ({attempts} attempts)"
        )
        return self._build_response(state, deadline)
    
    async def _read_message(
        self,
        lines: LineReader,
        state: ReadState,
        deadline: Deadline,
        cancel_event: Optional[asyncio.Event],
    ) -> None:
        while not is_cancelled(cancel_event):
            if state.body_satisfied:
                state.complete = True
                return
            
            if deadline.expired:
                raise asyncio.TimeoutError()
            
            if state.header_phase:
                raw = await wait_with_cancel(lines.readline(), deadline.remaining, cancel_event)
                self._handle_header_line(raw, state)
            else:
                limit = state.bytes_expected - len(state.body)
                chunk = await wait_with_cancel(lines.read(limit), deadline.remaining, cancel_event)
                state.body.extend(chunk)
        
        raise OperationCancelled()
    
    def _handle_header_line(self, raw: bytes, state: ReadState) -> None:
        line = raw.decode("utf-8", errors="replace").rstrip("\r\n")
        self._logger.debug(f"< {line}")
        
        if not state.status_seen:
            # Stray CRLFs left after a previous body are skipped
            if not line:
                return
            state.status_seen = True
            match = STATUS_LINE_RE.match(line)
            if match is None:
                self._logger.warning(f"Unexpected status line: {line!r}")
                return
            state.status_code = int(match.group(1))
            state.success = match.group(1).startswith("2")
            return
        
        if not line:
            state.header_phase = False
            return
        
        name, sep, value = line.partition(":")
        if sep and name.strip().lower() == "content-length":
            state.bytes_expected = self._parse_content_length(value.strip())
    
    @staticmethod
    def _parse_content_length(value: str) -> int:
        try:
            length = int(value)
        except ValueError as e:
            raise ProtocolError(f"Invalid Content-Length: {value!r}", e)
        if length < 0:
            raise ProtocolError(f"Invalid Content-Length: {value!r}")
        return length
    
    async def _pause(self, deadline: Deadline, cancel_event: Optional[asyncio.Event]) -> None:
        delay = min(self._poll_interval, deadline.remaining)
        if delay <= 0:
            return
        try:
            await wait_with_cancel(asyncio.sleep(delay), delay * 2, cancel_event)
        except OperationCancelled:
            pass
    
    def _build_response(self, state: ReadState, deadline: Deadline) -> Response:
        response = Response(
            body=state.body.decode("utf-8", errors="replace"),
            success=state.success,
            elapsed_ms=deadline.elapsed_ms,
            status_code=state.status_code,
            complete=state.complete,
        )
        self._logger.debug(
            f"Response status={response.status_code} success={response.success} "
            f"bytes={len(state.body)} in {response.elapsed_ms:.0f}ms"
        )
        return response
