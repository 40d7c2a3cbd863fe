"""Calculator client over WebSocket RPC.

Run (after starting server):
    uv run python examples/calculator/client.py
"""

import asyncio

from webmsgrpc.error import RpcError
from webmsgrpc.ws_session import WebSocketRpcClient


async def main() -> None:
    """Run the calculator client."""
    print("🧮 Calculator Client")
    print("=" * 40)

    async with WebSocketRpcClient("ws://127.0.0.1:8080/rpc") as client:
        calc = client.call_proxy

        print(f"\n  5 + 3 = {await calc.add(5, 3)}")
        print(f"  10 - 4 = {await calc.subtract(10, 4)}")
        print(f"  7 × 6 = {await calc.multiply(7, 6)}")
        print(f"  20 ÷ 4 = {await calc.divide(20, 4)}")

        print("\nTesting divide(10, 0) - should fail...")
        try:
            result = await calc.divide(10, 0)
            print(f"  Unexpected success: {result}")
        except RpcError as e:
            print(f"  Expected error: {e.name}: {e.message}")

        print("\nTesting accumulate() with a progress callback...")
        total = await calc.accumulate([1, 2, 3, 4], lambda t: print(f"  running total: {t}"))
        print(f"  total = {total}")

        print(f"\n  mean = {await client.use('stats').mean([2, 4, 6])}")

    print("\n" + "=" * 40)
    print("✅ All tests completed!")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except OSError as e:
        print(f"\n❌ Error: {e}")
        print("Make sure the server is running: uv run python examples/calculator/server.py")
