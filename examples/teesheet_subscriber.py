"""
Tee-sheet subscription example using streaming_http.

A local PushPeer plays the tee-sheet server: it answers loginSubscriber
with a token, answers subscribeTeesheetUpdate with a confirmation and then
pushes update documents at random intervals. The client logs in,
subscribes and reports every push it receives.
"""

import asyncio
import logging
import random

from streaming_http import ConnectionError, StreamingHTTPClient
from streaming_http.peer import PushPeer
from streaming_http.payload import (
    build_fault_response,
    build_method_call,
    build_method_response,
    build_push_response,
    count_push_items,
    parse_method_call,
    parse_string_result,
)

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

LOGIN_METHOD = "loginSubscriber"
SUBSCRIBE_METHOD = "subscribeTeesheetUpdate"
USERNAME = "username"
PASSWORD = "P4s5W0rd!"
TOKEN = "R29sZk5vdywweDAwMDAwRjVD"

UPDATES_TO_RECEIVE = 5
MAX_PUSH_DELAY = 3.0  # seconds
UPDATE_WAIT = 30 * 60.0  # seconds


class TeesheetServer:
    """Request handler and push loop for the demo peer."""

    def __init__(self) -> None:
        self.peer = PushPeer(handler=self.handle)
        self._push_task = None

    def handle(self, body: str) -> str:
        try:
            method, params = parse_method_call(body)
        except ValueError as e:
            return build_fault_response(999, str(e))

        logger.info(f"[Server] Received {method}")
        if method == LOGIN_METHOD:
            return build_method_response(TOKEN)
        if method == SUBSCRIBE_METHOD:
            if not params or params[0] != TOKEN:
                return build_fault_response(401, "Invalid token")
            if self._push_task is None:
                self._push_task = asyncio.ensure_future(self._push_updates())
            return build_method_response(f"Subscription received for {USERNAME}")
        return build_fault_response(404, f"Unknown method {method}")

    async def _push_updates(self) -> None:
        while self.peer.has_client:
            delay = random.uniform(0, MAX_PUSH_DELAY)
            logger.info(f"[Server] Sending updates in {delay * 1000:.0f}ms")
            await asyncio.sleep(delay)
            try:
                await self.peer.push(build_push_response(random.randrange(1000)))
            except ConnectionError:
                break

    async def stop(self) -> None:
        if self._push_task is not None:
            self._push_task.cancel()
        await self.peer.stop()


async def subscribe(url: str) -> None:
    """Log in, subscribe and wait for pushed updates."""
    async with StreamingHTTPClient(read_timeout=15 * 60.0) as client:
        if not await client.connect(url):
            logger.error(f"[Client] Connecting to {url} failed!")
            return

        logger.info("[Client] Logging in ...")
        await client.send_request(build_method_call(LOGIN_METHOD, [USERNAME, PASSWORD]))
        login = await client.get_response()
        token = parse_string_result(login.body)
        if not login.success or not token:
            raise RuntimeError("Login failed!")

        logger.info("[Client] Subscribing ...")
        await client.send_request(build_method_call(SUBSCRIBE_METHOD, [token]))
        subscription = await client.get_response()
        if not subscription.success:
            raise RuntimeError("Subscribe failed!")

        for _ in range(UPDATES_TO_RECEIVE):
            update = await client.get_response(UPDATE_WAIT)
            if update.success:
                logger.info(
                    f"[Client] Received {count_push_items(update.body)} updates "
                    f"in {update.elapsed_ms:.0f}ms."
                )
            else:
                logger.warning(f"[Client] Failed getting updates: {update.body}")
            await asyncio.sleep(0.25)

        logger.info(f"[Client] Metrics: {client.metrics}")


async def main():
    """Run the demo server and client."""
    server = TeesheetServer()
    await server.peer.start()
    try:
        await subscribe(server.peer.url)
    finally:
        await server.stop()


if __name__ == "__main__":
    asyncio.run(main())
