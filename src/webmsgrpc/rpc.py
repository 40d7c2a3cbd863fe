"""WebMessageRPC: request/response correlation over a message channel.

One instance sits on each side of an opaque, asynchronous channel (a
window/iframe boundary, a worker port, a socket). Each side:

- Registers local handlers in its method registry
- Calls the peer through ``call_proxy`` / ``use(namespace)``
- Handles every inbound payload in ``handle_message``

Function arguments are never sent. The caller registers them under a
generated ``callback-<token>`` key and sends a callback reference; the
receiving side swaps the reference for a function that calls that key
back through its own call proxy.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Self

from webmsgrpc.adapters import ChannelAdapter
from webmsgrpc.config import RpcOptions
from webmsgrpc.error import RpcError, format_error
from webmsgrpc.pending import PendingCallTable
from webmsgrpc.proxy import CallProxy, NamespaceView
from webmsgrpc.registry import MethodRegistry
from webmsgrpc.tokens import generate_token
from webmsgrpc.wire import (
    WireCall,
    WireCallbackRef,
    WireCallResult,
    parse_message,
)

logger = logging.getLogger(__name__)


class WebMessageRPC:
    """Bidirectional RPC endpoint bound to one channel adapter.

    Example:
        ```python
        a_side, b_side = LocalChannel.pair()
        a = WebMessageRPC(a_side, {"add": lambda x, y: x + y})
        b = WebMessageRPC(b_side)

        assert await b.call_proxy.add(1, 2) == 3
        ```
    """

    def __init__(
        self,
        adapter: ChannelAdapter,
        methods: Any | None = None,
        options: RpcOptions | None = None,
    ) -> None:
        """Initialize and subscribe to the adapter.

        Args:
            adapter: The channel adapter carrying payloads to and from the peer
            methods: Optional initial method set (mapping or object)
            options: Optional RPC options
        """
        self._options = options or RpcOptions()
        self._registry = MethodRegistry(separator=self._options.namespace_separator)
        if methods is not None:
            self._registry.register(methods)
        self._pending = PendingCallTable()

        # Background dispatch and send tasks, kept alive until done
        self._tasks: set[asyncio.Task[Any]] = set()
        self._destroyed = False

        self.call_proxy = CallProxy(self)
        self._listener: Callable[[Any], None] = self._on_message
        self.adapter: ChannelAdapter | None = adapter
        adapter.add_event_listener(self._listener)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    @property
    def options(self) -> RpcOptions:
        return self._options

    @property
    def registry(self) -> MethodRegistry:
        return self._registry

    @property
    def pending(self) -> PendingCallTable:
        return self._pending

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def destroy(self) -> None:
        """Unsubscribe from the adapter and clear all state.

        Calls still waiting for a result stay pending forever. Calling
        destroy() again is a no-op.
        """
        if self._destroyed:
            return
        adapter = self.adapter
        self._destroyed = True
        try:
            if adapter is not None:
                adapter.remove_event_listener(self._listener)
        finally:
            self._pending.clear()
            self._registry.clear()
            self.adapter = None
            logger.debug("WebMessageRPC destroyed")

    async def drain(self) -> None:
        """Wait for in-flight dispatch and send tasks to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def get_stats(self) -> dict[str, int]:
        """Get statistics about this instance.

        Returns:
            Dict with 'methods', 'callbacks', 'pending' and 'tasks' counts
        """
        prefix = self._options.callback_prefix
        return {
            "methods": len(self._registry),
            "callbacks": sum(1 for key in self._registry.keys() if key.startswith(prefix)),
            "pending": len(self._pending),
            "tasks": len(self._tasks),
        }

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args: object) -> None:
        self.destroy()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: object) -> None:
        self.destroy()

    def _check_alive(self) -> None:
        if self._destroyed:
            raise RpcError.destroyed()

    # -------------------------------------------------------------------------
    # Registry
    # -------------------------------------------------------------------------

    def register(self, methods: Any, namespace: Any | None = None) -> Any:
        """Register a method set, optionally under a namespace.

        Both ``register(methods, "ns")`` and ``register("ns", methods)`` are
        accepted.

        Returns:
            The method set, unchanged

        Raises:
            RpcError: INVALID_ARGUMENT if no method set is given
        """
        self._check_alive()
        methods, namespace = _split_method_args(methods, namespace)
        return self._registry.register(methods, namespace)

    def deregister(self, methods: Any, namespace: Any | None = None) -> Any:
        """Remove a method set, optionally under a namespace.

        Returns:
            The method set, unchanged

        Raises:
            RpcError: INVALID_ARGUMENT if no method set is given
        """
        self._check_alive()
        methods, namespace = _split_method_args(methods, namespace)
        return self._registry.deregister(methods, namespace)

    def release_callbacks(self) -> int:
        """Drop every generated callback entry from the registry.

        Callback entries are never removed automatically, so a long-lived
        instance that passes many callbacks grows without bound. Call this
        once the peer can no longer invoke them.

        Returns:
            Number of entries removed
        """
        prefix = self._options.callback_prefix
        keys = [key for key in self._registry.keys() if key.startswith(prefix)]
        for key in keys:
            self._registry.remove(key)
        return len(keys)

    def use(self, namespace: str) -> NamespaceView:
        """Get a call proxy whose method names are prefixed with ``namespace``."""
        self._check_alive()
        return NamespaceView(self, namespace)

    # -------------------------------------------------------------------------
    # Outgoing calls
    # -------------------------------------------------------------------------

    def call(self, method: str, args: list[Any]) -> asyncio.Future[Any]:
        """Send a call to the peer and return a future for its result.

        This is what ``call_proxy.<name>(...)`` invokes. The message is
        handed to the adapter before this method returns.

        Args:
            method: The method key on the peer
            args: Positional arguments; callables become callback references

        Returns:
            A future resolved with the result, or rejected with a REMOTE
            RpcError. No timeout is applied.
        """
        self._check_alive()
        loop = asyncio.get_running_loop()
        wire_args = [self._marshal_arg(arg) for arg in args]
        token = generate_token()

        sent = self.adapter.post_message(WireCall(method, token, wire_args).to_json())
        future = self._pending.create(token, loop)

        if inspect.isawaitable(sent):
            task = asyncio.ensure_future(sent)
            self._track(task)
            task.add_done_callback(lambda t: self._on_call_sent(token, t))
        return future

    def _marshal_arg(self, arg: Any) -> Any:
        if not callable(arg):
            return arg
        key = f"{self._options.callback_prefix}{generate_token()}"
        self._registry.set(key, arg)
        return WireCallbackRef(key).to_json()

    def _on_call_sent(self, token: str, task: asyncio.Task[Any]) -> None:
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.debug("Sending call %s failed: %s", token, error)
            self._pending.reject(token, error)

    # -------------------------------------------------------------------------
    # Incoming messages
    # -------------------------------------------------------------------------

    def _on_message(self, payload: Any) -> None:
        """Adapter listener: schedule handling of one inbound payload."""
        if self._destroyed:
            return
        task = asyncio.get_running_loop().create_task(self._run_dispatch(payload))
        self._track(task)

    async def _run_dispatch(self, payload: Any) -> None:
        try:
            await self.handle_message(payload)
        except Exception:
            logger.exception("Error handling inbound message")

    def _track(self, task: asyncio.Task[Any]) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def handle_message(self, payload: Any) -> None:
        """Handle one inbound payload.

        Payloads that are not RPC messages, results for unknown tokens and
        calls to unknown methods are dropped without a reply.
        """
        if self._destroyed:
            return
        message = parse_message(payload)
        if message is None:
            logger.debug("Ignoring non-RPC payload: %r", payload)
            return
        if isinstance(message, WireCallResult):
            self._handle_result(message)
        else:
            await self._handle_call(message)

    async def _handle_call(self, call: WireCall) -> None:
        handler = self._registry.get(call.method)
        if handler is None:
            logger.debug("Dropping call to unknown method %r", call.method)
            return

        args = [self._revive_arg(arg) for arg in call.args]
        try:
            data = handler(*args)
            if inspect.isawaitable(data):
                data = await data
        except Exception as e:
            logger.debug("Handler %r failed: %s", call.method, e)
            reply = WireCallResult.fail(call.token, self._encode_error(e))
        else:
            reply = WireCallResult.success(call.token, data)

        if self._destroyed or self.adapter is None:
            logger.debug("Dropping result for %s: instance destroyed", call.token)
            return
        sent = self.adapter.post_message(reply.to_json())
        if inspect.isawaitable(sent):
            await sent

    def _revive_arg(self, arg: Any) -> Any:
        if not WireCallbackRef.matches(arg):
            return arg
        callback_name = WireCallbackRef.from_json(arg).callback_method_name

        def forward(*callback_args: Any) -> asyncio.Future[Any]:
            return self.call(callback_name, list(callback_args))

        forward.__name__ = callback_name
        return forward

    def _encode_error(self, error: Exception) -> Any:
        hook = self._options.on_send_error
        if hook is not None:
            try:
                replacement = hook(error)
            except Exception:
                logger.exception("on_send_error hook failed; sending the original error")
            else:
                if replacement is not None:
                    return format_error(replacement)
        return format_error(error)

    def _handle_result(self, result: WireCallResult) -> None:
        if result.is_success:
            known = self._pending.resolve(result.token, result.data)
        elif result.is_fail:
            known = self._pending.reject(result.token, RpcError.remote(result.error))
        else:
            known = self._pending.pop(result.token) is not None
            if known:
                logger.debug("Unknown result kind %r for token %s", result.result, result.token)
        if not known:
            logger.debug("Ignoring result for unknown token %s", result.token)

    def __repr__(self) -> str:
        state = "destroyed" if self._destroyed else f"{len(self._pending)} pending"
        return f"WebMessageRPC({state})"


def _split_method_args(first: Any, second: Any) -> tuple[Any, str | None]:
    """Accept (methods, namespace) as well as (namespace, methods)."""
    if isinstance(first, str):
        return second, first
    return first, second
