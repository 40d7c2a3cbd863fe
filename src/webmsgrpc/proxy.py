"""User-facing call proxy and namespace view.

Attribute access on these objects yields callables for remote methods, so
no method has to be declared ahead of time:

    result = await rpc.call_proxy.add(1, 2)
    total = await rpc.use("math").sum([1, 2, 3])

Keys that are not valid identifiers (or start with an underscore) are
reachable by subscription: ``rpc.call_proxy["ns:method"](...)``.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from webmsgrpc.registry import method_key

if TYPE_CHECKING:
    from webmsgrpc.rpc import WebMessageRPC


class RemoteMethod:
    """Callable bound to one remote method key."""

    __slots__ = ("_rpc", "key")

    def __init__(self, rpc: WebMessageRPC, key: str) -> None:
        self._rpc = rpc
        self.key = key

    def __call__(self, *args: Any, **kwargs: Any) -> asyncio.Future[Any]:
        """Call the remote method.

        Args:
            *args: Positional arguments; callables are passed as callbacks

        Returns:
            A future for the remote result
        """
        if kwargs:
            msg = "Keyword arguments are not supported in remote calls"
            raise TypeError(msg)
        return self._rpc.call(self.key, list(args))

    def __repr__(self) -> str:
        return f"RemoteMethod({self.key!r})"


class CallProxy:
    """Dynamic proxy turning attribute access into remote calls."""

    __slots__ = ("_rpc",)

    def __init__(self, rpc: WebMessageRPC) -> None:
        object.__setattr__(self, "_rpc", rpc)

    def __getattr__(self, name: str) -> RemoteMethod:
        if name.startswith("_"):
            # Keep Python protocol lookups (__await__, _ipython_*, ...) local
            msg = f"'{type(self).__name__}' object has no attribute '{name}'"
            raise AttributeError(msg)
        return RemoteMethod(self._rpc, name)

    def __getitem__(self, key: str) -> RemoteMethod:
        return RemoteMethod(self._rpc, key)

    def __setattr__(self, name: str, value: Any) -> None:
        msg = f"'{type(self).__name__}' object is read-only"
        raise AttributeError(msg)

    def __repr__(self) -> str:
        return f"CallProxy({self._rpc!r})"


class NamespaceView:
    """Call proxy that prefixes every method name with a namespace."""

    __slots__ = ("_rpc", "_namespace")

    def __init__(self, rpc: WebMessageRPC, namespace: str) -> None:
        object.__setattr__(self, "_rpc", rpc)
        object.__setattr__(self, "_namespace", namespace)

    @property
    def namespace(self) -> str:
        return self._namespace

    def _key(self, name: str) -> str:
        return method_key(name, self._namespace, self._rpc.options.namespace_separator)

    def __getattr__(self, name: str) -> RemoteMethod:
        if name.startswith("_"):
            msg = f"'{type(self).__name__}' object has no attribute '{name}'"
            raise AttributeError(msg)
        return RemoteMethod(self._rpc, self._key(name))

    def __getitem__(self, name: str) -> RemoteMethod:
        return RemoteMethod(self._rpc, self._key(name))

    def __setattr__(self, name: str, value: Any) -> None:
        msg = f"'{type(self).__name__}' object is read-only"
        raise AttributeError(msg)

    def __repr__(self) -> str:
        return f"NamespaceView({self._namespace!r})"
