"""Tests for the method registry."""

import pytest

from webmsgrpc.error import ErrorCode, RpcError
from webmsgrpc.registry import MethodRegistry, iter_methods, method_key


class Greeter:
    greeting = "Hello"

    def greet(self, name: str) -> str:
        return f"{self.greeting}, {name}!"

    def _internal(self) -> None:
        pass


class TestMethodKey:
    """Tests for method_key()."""

    def test_plain(self) -> None:
        assert method_key("add") == "add"

    def test_namespaced(self) -> None:
        assert method_key("add", "math") == "math:add"

    def test_empty_namespace_is_ignored(self) -> None:
        assert method_key("add", "") == "add"

    def test_custom_separator(self) -> None:
        assert method_key("add", "math", ".") == "math.add"


class TestIterMethods:
    """Tests for method set discovery."""

    def test_mapping(self) -> None:
        handler = lambda: None  # noqa: E731
        assert list(iter_methods({"a": handler})) == [("a", handler)]

    def test_object_public_callables(self) -> None:
        names = [name for name, _ in iter_methods(Greeter())]
        assert names == ["greet"]

    @pytest.mark.parametrize("value", [None, "ns", b"ns"])
    def test_invalid(self, value: object) -> None:
        with pytest.raises(RpcError) as exc_info:
            list(iter_methods(value))
        assert exc_info.value.code is ErrorCode.INVALID_ARGUMENT


class TestMethodRegistry:
    """Tests for MethodRegistry."""

    def test_initial_methods(self) -> None:
        registry = MethodRegistry({"add": lambda a, b: a + b})
        assert registry.has("add")
        assert len(registry) == 1

    def test_register_returns_same_object(self) -> None:
        registry = MethodRegistry()
        methods = {"add": lambda a, b: a + b}
        assert registry.register(methods) is methods

    def test_register_namespace(self) -> None:
        registry = MethodRegistry()
        registry.register(Greeter(), "greeter")
        assert registry.keys() == ["greeter:greet"]
        assert registry.get("greeter:greet")("Ada") == "Hello, Ada!"

    def test_overwrite(self) -> None:
        registry = MethodRegistry()
        registry.register({"f": lambda: 1})
        registry.register({"f": lambda: 2})
        assert registry.get("f")() == 2
        assert len(registry) == 1

    def test_deregister(self) -> None:
        registry = MethodRegistry()
        methods = {"f": lambda: 1, "g": lambda: 2}
        registry.register(methods, "ns")
        registry.deregister({"f": None}, "ns")
        assert "ns:f" not in registry
        assert "ns:g" in registry

    def test_deregister_absent_is_noop(self) -> None:
        registry = MethodRegistry()
        methods = {"missing": lambda: None}
        assert registry.deregister(methods) is methods
        assert len(registry) == 0

    def test_deregister_other_namespace_untouched(self) -> None:
        registry = MethodRegistry()
        registry.register({"f": lambda: 1}, "a")
        registry.deregister({"f": lambda: 1}, "b")
        assert registry.has("a:f")

    def test_set_and_remove(self) -> None:
        registry = MethodRegistry()
        registry.set("callback-1", print)
        assert registry.get("callback-1") is print
        assert registry.remove("callback-1") is True
        assert registry.remove("callback-1") is False
        assert registry.get("callback-1") is None

    def test_clear(self) -> None:
        registry = MethodRegistry({"a": print, "b": print})
        registry.clear()
        assert len(registry) == 0
