"""Tests for the pending-call table."""

import asyncio

import pytest

from webmsgrpc.pending import PendingCallTable


@pytest.mark.asyncio
class TestPendingCallTable:
    """Tests for PendingCallTable."""

    async def test_resolve_once(self) -> None:
        table = PendingCallTable()
        future = table.create("t1")

        assert table.resolve("t1", "value") is True
        assert table.resolve("t1", "other") is False
        assert future.result() == "value"
        assert len(table) == 0

    async def test_reject(self) -> None:
        table = PendingCallTable()
        future = table.create("t1")

        assert table.reject("t1", RuntimeError("failed")) is True
        with pytest.raises(RuntimeError, match="failed"):
            future.result()
        assert "t1" not in table

    async def test_unknown_token(self) -> None:
        table = PendingCallTable()
        assert table.resolve("nope", 1) is False
        assert table.reject("nope", RuntimeError()) is False
        assert table.pop("nope") is None

    async def test_entries_are_independent(self) -> None:
        table = PendingCallTable()
        first = table.create("a")
        second = table.create("b")

        table.resolve("b", 2)

        assert second.result() == 2
        assert not first.done()
        assert "a" in table

    async def test_clear_leaves_futures_pending(self) -> None:
        table = PendingCallTable()
        future = table.create("t")

        table.clear()

        assert len(table) == 0
        assert not future.done()

    async def test_resolve_after_cancel(self) -> None:
        table = PendingCallTable()
        future = table.create("t")
        future.cancel()

        assert table.resolve("t", 1) is True
        assert future.cancelled()

    async def test_explicit_loop(self) -> None:
        table = PendingCallTable()
        loop = asyncio.get_running_loop()
        assert table.create("t", loop).get_loop() is loop
