"""Web Message RPC - Python Implementation

Call functions across an asynchronous message channel (window/iframe
boundary, worker port, WebSocket) as if they were local, including
passing callbacks in both directions.
"""

from webmsgrpc.adapters import ChannelAdapter, ListenerAdapter, LocalChannel
from webmsgrpc.config import RpcOptions, WebSocketClientConfig, WebSocketServerConfig
from webmsgrpc.error import ErrorCode, RpcError, format_error
from webmsgrpc.pending import PendingCallTable
from webmsgrpc.proxy import CallProxy, NamespaceView, RemoteMethod
from webmsgrpc.registry import MethodRegistry, method_key
from webmsgrpc.rpc import WebMessageRPC
from webmsgrpc.tokens import generate_token
from webmsgrpc.ws_session import (
    WebSocketRpcClient,
    WebSocketRpcServer,
    handle_websocket_rpc,
)
from webmsgrpc.ws_transport import WebSocketAdapter

__version__ = "0.1.0"

__all__ = [
    # Core
    "WebMessageRPC",
    "CallProxy",
    "NamespaceView",
    "RemoteMethod",
    "MethodRegistry",
    "PendingCallTable",
    "method_key",
    "generate_token",
    # Errors
    "RpcError",
    "ErrorCode",
    "format_error",
    # Configuration (Pydantic models)
    "RpcOptions",
    "WebSocketClientConfig",
    "WebSocketServerConfig",
    # Adapters
    "ChannelAdapter",
    "ListenerAdapter",
    "LocalChannel",
    "WebSocketAdapter",
    # WebSocket sessions
    "WebSocketRpcClient",
    "WebSocketRpcServer",
    "handle_websocket_rpc",
]
