"""Pytest configuration for all tests."""

import asyncio
from typing import Any

from webmsgrpc.adapters import ListenerAdapter, LocalChannel
from webmsgrpc.rpc import WebMessageRPC


class RecordingAdapter(ListenerAdapter):
    """Adapter with no peer that records every posted payload."""

    def __init__(self) -> None:
        super().__init__()
        self.sent: list[Any] = []

    def post_message(self, payload: Any) -> None:
        self.sent.append(payload)


class FailingAdapter(ListenerAdapter):
    """Adapter whose post_message always raises."""

    def post_message(self, payload: Any) -> None:
        raise ConnectionError("channel down")


class AsyncFailingAdapter(ListenerAdapter):
    """Adapter with an async post_message that always raises."""

    async def post_message(self, payload: Any) -> None:
        await asyncio.sleep(0)
        raise ConnectionError("channel down")


def create_rpc_pair(
    methods_a: Any | None = None,
    methods_b: Any | None = None,
) -> tuple[WebMessageRPC, WebMessageRPC, LocalChannel, LocalChannel]:
    """Create two RPC instances connected by an in-memory channel."""
    left, right = LocalChannel.pair()
    a = WebMessageRPC(left, methods_a)
    b = WebMessageRPC(right, methods_b)
    return a, b, left, right


async def never_settles(future: asyncio.Future[Any], timeout: float = 0.05) -> bool:
    """Return True if ``future`` is still pending after ``timeout`` seconds."""
    done, _ = await asyncio.wait({future}, timeout=timeout)
    return not done
