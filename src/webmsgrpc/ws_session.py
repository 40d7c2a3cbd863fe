"""WebSocket sessions built on WebMessageRPC.

Each WebSocket connection gets its own ``WebMessageRPC`` instance, so both
ends can register methods and call each other.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable

import aiohttp
from aiohttp import web

from webmsgrpc.config import RpcOptions, WebSocketClientConfig, WebSocketServerConfig
from webmsgrpc.proxy import CallProxy, NamespaceView
from webmsgrpc.rpc import WebMessageRPC
from webmsgrpc.ws_transport import WebSocketAdapter

logger = logging.getLogger(__name__)

ConnectHook = Callable[[WebMessageRPC], Any]


class WebSocketRpcClient:
    """WebSocket RPC client.

    Example:
        ```python
        async with WebSocketRpcClient("ws://localhost:8080/rpc") as client:
            result = await client.call_proxy.add(1, 2)
            print(result)  # 3
        ```
    """

    def __init__(
        self,
        config: WebSocketClientConfig | str,
        methods: Any | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client configuration, or just the WebSocket URL
            methods: Optional method set the server may call
        """
        if isinstance(config, str):
            config = WebSocketClientConfig(url=config)
        self.config = config
        self._methods = methods
        self._http_session: aiohttp.ClientSession | None = None
        self._adapter: WebSocketAdapter | None = None
        self._rpc: WebMessageRPC | None = None

    async def __aenter__(self) -> WebSocketRpcClient:
        """Connect to the server."""
        await self.connect()
        return self

    async def __aexit__(self, *args: object) -> None:
        """Disconnect from the server."""
        await self.close()

    async def connect(self) -> None:
        """Open the WebSocket and start the RPC instance."""
        self._http_session = aiohttp.ClientSession()
        try:
            ws = await self._http_session.ws_connect(
                self.config.url,
                heartbeat=self.config.heartbeat,
            )
        except Exception:
            await self._http_session.close()
            self._http_session = None
            raise

        self._adapter = WebSocketAdapter(ws)
        self._rpc = WebMessageRPC(self._adapter, self._methods, self.config.options)
        self._adapter.start()
        logger.debug("Connected to %s", self.config.url)

    async def close(self) -> None:
        """Close the connection."""
        if self._rpc:
            self._rpc.destroy()
            self._rpc = None
        if self._adapter:
            await self._adapter.close()
            self._adapter = None
        if self._http_session:
            await self._http_session.close()
            self._http_session = None

    @property
    def rpc(self) -> WebMessageRPC:
        """The RPC instance for this connection."""
        if self._rpc is None:
            raise RuntimeError("Not connected")
        return self._rpc

    @property
    def call_proxy(self) -> CallProxy:
        return self.rpc.call_proxy

    def use(self, namespace: str) -> NamespaceView:
        return self.rpc.use(namespace)

    def register(self, methods: Any, namespace: Any | None = None) -> Any:
        return self.rpc.register(methods, namespace)

    def deregister(self, methods: Any, namespace: Any | None = None) -> Any:
        return self.rpc.deregister(methods, namespace)


async def handle_websocket_rpc(
    request: web.Request,
    methods: Any | None = None,
    options: RpcOptions | None = None,
    on_connect: ConnectHook | None = None,
) -> web.WebSocketResponse:
    """Handle a WebSocket RPC connection on the server side.

    This function should be called from an aiohttp route handler.

    Args:
        request: The aiohttp request
        methods: Method set exposed to the client
        options: Optional RPC options
        on_connect: Optional hook called with the connection's WebMessageRPC

    Returns:
        The WebSocket response

    Example:
        ```python
        async def websocket_handler(request):
            return await handle_websocket_rpc(request, {"add": add})

        app.router.add_get("/rpc", websocket_handler)
        ```
    """
    ws = web.WebSocketResponse()
    await ws.prepare(request)

    adapter = WebSocketAdapter(ws)
    rpc = WebMessageRPC(adapter, methods, options)
    adapter.start()

    try:
        if on_connect is not None:
            result = on_connect(rpc)
            if inspect.isawaitable(result):
                await result
        await adapter.wait_closed()
    except Exception as e:
        logger.debug("WebSocket session ended: %s", e)
    finally:
        rpc.destroy()
        await adapter.close()

    return ws


class WebSocketRpcServer:
    """WebSocket RPC server.

    Example:
        ```python
        server = WebSocketRpcServer({"add": add}, WebSocketServerConfig(port=8080))
        await server.start()
        # ... server is running ...
        await server.stop()
        ```
    """

    def __init__(
        self,
        methods: Any | None = None,
        config: WebSocketServerConfig | None = None,
        on_connect: ConnectHook | None = None,
    ) -> None:
        """Initialize the server.

        Args:
            methods: Method set exposed to every client
            config: Server configuration
            on_connect: Optional hook called with each connection's WebMessageRPC
        """
        self._methods = methods
        self.config = config or WebSocketServerConfig()
        self._on_connect = on_connect
        self._app: web.Application | None = None
        self._runner: web.AppRunner | None = None
        self._site: web.TCPSite | None = None
        self.connections: list[WebMessageRPC] = []

    @property
    def port(self) -> int:
        """The bound port (useful when configured with port 0)."""
        if self._runner is None or not self._runner.addresses:
            raise RuntimeError("Server not started")
        return self._runner.addresses[0][1]

    @property
    def url(self) -> str:
        return f"ws://{self.config.host}:{self.port}{self.config.path}"

    async def start(self) -> None:
        """Start the server."""
        self._app = web.Application()
        self._app.router.add_get(self.config.path, self._handle_ws)

        self._runner = web.AppRunner(self._app)
        await self._runner.setup()

        self._site = web.TCPSite(self._runner, self.config.host, self.config.port)
        await self._site.start()

        logger.info("WebSocket RPC server started on %s", self.url)

    async def stop(self) -> None:
        """Stop the server."""
        for rpc in list(self.connections):
            adapter = rpc.adapter
            rpc.destroy()
            if isinstance(adapter, WebSocketAdapter):
                await adapter.close()
        self.connections.clear()

        if self._site:
            await self._site.stop()
            self._site = None
        if self._runner:
            await self._runner.cleanup()
            self._runner = None
        self._app = None

    async def _handle_ws(self, request: web.Request) -> web.WebSocketResponse:
        """Handle incoming WebSocket connection."""

        def track(rpc: WebMessageRPC) -> Any:
            self.connections.append(rpc)
            if self._on_connect is not None:
                return self._on_connect(rpc)
            return None

        try:
            return await handle_websocket_rpc(
                request,
                self._methods,
                self.config.options,
                on_connect=track,
            )
        finally:
            self.connections[:] = [rpc for rpc in self.connections if not rpc.destroyed]
