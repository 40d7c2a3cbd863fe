"""Calculator server over WebSocket RPC.

Run:
    uv run python examples/calculator/server.py
"""

import asyncio
import logging
from typing import Any

from webmsgrpc.config import WebSocketServerConfig
from webmsgrpc.ws_session import WebSocketRpcServer


class Calculator:
    """A simple calculator that supports basic arithmetic."""

    def add(self, a: float, b: float) -> float:
        return a + b

    def subtract(self, a: float, b: float) -> float:
        return a - b

    def multiply(self, a: float, b: float) -> float:
        return a * b

    def divide(self, a: float, b: float) -> float:
        if b == 0:
            raise ZeroDivisionError("Division by zero")
        return a / b

    async def accumulate(self, values: list[float], on_progress: Any) -> float:
        """Sum values, reporting each running total through a callback."""
        total = 0.0
        for value in values:
            total += value
            await on_progress(total)
        return total


class Statistics:
    """Registered under the "stats" namespace."""

    def mean(self, values: list[float]) -> float:
        return sum(values) / len(values)


async def main() -> None:
    """Run the calculator server."""
    logging.basicConfig(level=logging.INFO)

    server = WebSocketRpcServer(
        Calculator(),
        WebSocketServerConfig(host="127.0.0.1", port=8080, path="/rpc"),
        on_connect=lambda rpc: rpc.register(Statistics(), "stats"),
    )
    await server.start()

    print("🧮 Calculator server running on", server.url)
    print()
    print("Run client with: uv run python examples/calculator/client.py")
    print("Press Ctrl+C to stop")

    try:
        await asyncio.Event().wait()
    finally:
        await server.stop()


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nShutting down...")
