"""WebSocket channel adapter for WebMessageRPC.

Wraps an aiohttp WebSocket (client or server side) and carries each
payload as one JSON text frame.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp
from aiohttp import web

from webmsgrpc.adapters import ListenerAdapter
from webmsgrpc.wire import deserialize_message, serialize_message

logger = logging.getLogger(__name__)


class WebSocketAdapter(ListenerAdapter):
    """Channel adapter over an aiohttp WebSocket.

    Call ``start()`` to begin reading frames; ``wait_closed()`` returns once
    the read loop ends.
    """

    def __init__(
        self,
        ws: aiohttp.ClientWebSocketResponse | web.WebSocketResponse,
    ) -> None:
        """Initialize the adapter.

        Args:
            ws: An open client or server WebSocket
        """
        super().__init__()
        self._ws = ws
        self._closed = False
        self._read_task: asyncio.Task[None] | None = None

    @property
    def closed(self) -> bool:
        return self._closed or self._ws.closed

    def start(self) -> None:
        """Start the frame read loop."""
        if self._read_task is None:
            self._read_task = asyncio.create_task(self._read_loop())

    async def wait_closed(self) -> None:
        """Wait until the read loop ends."""
        if self._read_task is not None:
            await asyncio.wait({self._read_task})

    async def post_message(self, payload: Any) -> None:
        """Send a payload to the peer as JSON text.

        Raises:
            ConnectionError: If the WebSocket is closed
            TypeError: If the payload is not JSON serializable
        """
        if self.closed:
            raise ConnectionError("WebSocket is closed")
        await self._ws.send_str(serialize_message(payload))

    async def _read_loop(self) -> None:
        try:
            async for msg in self._ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    self._dispatch_text(msg.data)
                elif msg.type == aiohttp.WSMsgType.BINARY:
                    try:
                        text = msg.data.decode("utf-8")
                    except UnicodeDecodeError:
                        logger.debug("Ignoring non-UTF-8 binary frame")
                        continue
                    self._dispatch_text(text)
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    logger.debug("WebSocket error: %s", self._ws.exception())
                    break
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("WebSocket read loop failed")
        finally:
            self._closed = True

    def _dispatch_text(self, text: str) -> None:
        try:
            payload = deserialize_message(text)
        except ValueError:
            logger.debug("Ignoring non-JSON frame: %s", text[:200])
            return
        self.dispatch(payload)

    async def close(self) -> None:
        """Close the WebSocket and stop reading."""
        self._closed = True
        if not self._ws.closed:
            await self._ws.close()
        if self._read_task is not None and not self._read_task.done():
            self._read_task.cancel()
            try:
                await self._read_task
            except asyncio.CancelledError:
                pass
