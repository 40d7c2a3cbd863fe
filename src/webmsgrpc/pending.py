"""Pending-call table: outstanding local calls keyed by call token."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

logger = logging.getLogger(__name__)


class PendingCallTable:
    """Futures for local calls that are waiting for a remote result.

    Each entry is created once when a call is sent and removed once when
    its result arrives. Nothing here times out or retries.
    """

    def __init__(self) -> None:
        self._entries: dict[str, asyncio.Future[Any]] = {}

    def create(self, token: str, loop: asyncio.AbstractEventLoop | None = None) -> asyncio.Future[Any]:
        """Create the future for a freshly sent call.

        Args:
            token: The call token
            loop: Event loop owning the future (defaults to the running loop)

        Returns:
            The future that settles when the result for ``token`` arrives
        """
        if token in self._entries:
            # A colliding token would route two results to one caller
            logger.warning("Duplicate call token %s replaces a pending call", token)
        if loop is None:
            loop = asyncio.get_running_loop()
        future: asyncio.Future[Any] = loop.create_future()
        self._entries[token] = future
        return future

    def pop(self, token: str) -> asyncio.Future[Any] | None:
        """Remove and return the entry for ``token``, if any."""
        return self._entries.pop(token, None)

    def resolve(self, token: str, value: Any) -> bool:
        """Resolve and remove an entry. Returns False for unknown tokens."""
        future = self._entries.pop(token, None)
        if future is None:
            return False
        if not future.done():
            future.set_result(value)
        return True

    def reject(self, token: str, error: BaseException) -> bool:
        """Reject and remove an entry. Returns False for unknown tokens."""
        future = self._entries.pop(token, None)
        if future is None:
            return False
        if not future.done():
            future.set_exception(error)
        return True

    def clear(self) -> None:
        """Drop all entries without settling them."""
        self._entries.clear()

    def __contains__(self, token: object) -> bool:
        return token in self._entries

    def __len__(self) -> int:
        return len(self._entries)
