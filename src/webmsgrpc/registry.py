"""Method registry: flat method keys mapped to local handlers."""

from __future__ import annotations

import inspect
from collections.abc import Iterator, Mapping
from typing import Any, Callable

from webmsgrpc.error import RpcError

Handler = Callable[..., Any]


def method_key(name: str, namespace: str | None = None, separator: str = ":") -> str:
    """Build the flat key for ``name``, prefixed when a namespace is given."""
    return f"{namespace}{separator}{name}" if namespace else name


def iter_methods(methods: Any) -> Iterator[tuple[str, Any]]:
    """Yield (name, handler) pairs from a method set.

    A method set is either a mapping of names to callables or an object
    whose public callable attributes are the methods, e.g.:

        class Calculator:
            def add(self, a, b):
                return a + b

        rpc.register(Calculator())

    Raises:
        RpcError: If no method set is given
    """
    if methods is None or isinstance(methods, (str, bytes)):
        msg = f"Method set must be a mapping or an object, got {type(methods).__name__}"
        raise RpcError.invalid_argument(msg)
    if isinstance(methods, Mapping):
        yield from methods.items()
        return
    for name, member in inspect.getmembers(methods):
        if name.startswith("_") or not callable(member):
            continue
        yield name, member


class MethodRegistry:
    """Mutable mapping from method key to handler.

    Keys are plain strings; namespaces are only a naming convention
    (``"ns:method"``), not a nested structure.
    """

    def __init__(
        self,
        methods: Any | None = None,
        separator: str = ":",
    ) -> None:
        self._handlers: dict[str, Handler] = {}
        self._separator = separator
        if methods is not None:
            self.register(methods)

    def register(self, methods: Any, namespace: str | None = None) -> Any:
        """Insert or overwrite every method of ``methods``.

        Returns:
            The same method set, unchanged
        """
        for name, handler in iter_methods(methods):
            self._handlers[method_key(name, namespace, self._separator)] = handler
        return methods

    def deregister(self, methods: Any, namespace: str | None = None) -> Any:
        """Remove every method of ``methods``; absent keys are ignored.

        Returns:
            The same method set, unchanged
        """
        for name, _ in iter_methods(methods):
            self._handlers.pop(method_key(name, namespace, self._separator), None)
        return methods

    def set(self, key: str, handler: Handler) -> None:
        """Store a handler under an already computed key."""
        self._handlers[key] = handler

    def remove(self, key: str) -> bool:
        """Remove a key. Returns True if it was present."""
        return self._handlers.pop(key, None) is not None

    def has(self, key: str) -> bool:
        return key in self._handlers

    def get(self, key: str) -> Handler | None:
        return self._handlers.get(key)

    def keys(self) -> list[str]:
        return list(self._handlers)

    def clear(self) -> None:
        """Clear all entries."""
        self._handlers.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)
