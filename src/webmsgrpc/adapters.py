"""Channel adapter contract and an in-memory channel.

An adapter moves opaque payloads between two sides. ``WebMessageRPC``
only needs three methods from it (see ``ChannelAdapter``); framing,
encoding, reliability and peer authentication all live in the adapter.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


class ChannelAdapter(Protocol):
    """Interface for bidirectional message channels.

    ``post_message`` may be a plain function or a coroutine function. When
    it returns an awaitable, the RPC layer awaits it (or runs it as a task)
    and reports its failure to the caller.
    """

    def add_event_listener(self, callback: Listener) -> None:
        """Subscribe ``callback`` to every inbound payload."""
        ...

    def remove_event_listener(self, callback: Listener) -> None:
        """Unsubscribe a previously added ``callback``."""
        ...

    def post_message(self, payload: Any) -> Any:
        """Send a payload to the peer."""
        ...


class ListenerAdapter:
    """Base class handling listener bookkeeping for adapters.

    Subclasses implement ``post_message`` and call ``dispatch`` for each
    inbound payload.
    """

    def __init__(self) -> None:
        self._listeners: list[Listener] = []

    def add_event_listener(self, callback: Listener) -> None:
        if callback not in self._listeners:
            self._listeners.append(callback)

    def remove_event_listener(self, callback: Listener) -> None:
        try:
            self._listeners.remove(callback)
        except ValueError:
            pass

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def dispatch(self, payload: Any) -> None:
        """Deliver a payload to every current listener."""
        for listener in list(self._listeners):
            listener(payload)

    def post_message(self, payload: Any) -> Any:
        raise NotImplementedError


class LocalChannel(ListenerAdapter):
    """One end of an in-memory channel.

    Payloads are deep-copied and delivered to the peer on a later loop
    iteration, like ``window.postMessage`` with structured cloning.

    Example:
        ```python
        left, right = LocalChannel.pair()
        ```
    """

    def __init__(self, name: str = "") -> None:
        super().__init__()
        self.name = name
        self.peer: LocalChannel | None = None
        self.closed = False

    @classmethod
    def pair(cls) -> tuple[LocalChannel, LocalChannel]:
        """Create two connected channel ends."""
        left = cls("left")
        right = cls("right")
        left.peer = right
        right.peer = left
        return left, right

    def post_message(self, payload: Any) -> None:
        """Queue a copy of ``payload`` for the peer's listeners.

        Raises:
            ConnectionError: If this end has been closed or has no peer
        """
        if self.closed or self.peer is None:
            raise ConnectionError("Channel is closed")
        cloned = copy.deepcopy(payload)
        if self.peer.closed:
            logger.debug("Dropping payload for closed peer %s", self.peer.name)
            return
        asyncio.get_running_loop().call_soon(self.peer.dispatch, cloned)

    def close(self) -> None:
        """Close this end; the peer stops receiving from it."""
        self.closed = True
