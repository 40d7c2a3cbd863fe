"""Pydantic configuration models for web message RPC.

These are only used at construction time. Wire messages stay plain dicts
and frozen dataclasses (see wire.py).
"""

from __future__ import annotations

from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RpcOptions(BaseModel):
    """Options for a ``WebMessageRPC`` instance.

    Attributes:
        on_send_error: Optional callback to transform handler errors before
            they are sent to the peer. Return an exception or any other
            value to send instead, or None to keep the original error.
        callback_prefix: Prefix of the method keys generated for callback
            arguments.
        namespace_separator: Separator between namespace and method name.
    """

    model_config = ConfigDict(
        frozen=False,
        arbitrary_types_allowed=True,
    )

    on_send_error: Callable[[Exception], Any] | None = None
    callback_prefix: str = Field(default="callback-", min_length=1)
    namespace_separator: str = Field(default=":", min_length=1)


class WebSocketClientConfig(BaseModel):
    """Configuration for ``WebSocketRpcClient``.

    Attributes:
        url: The WebSocket endpoint URL (ws:// or wss://)
        heartbeat: Optional ping interval in seconds
        options: Optional RPC options
    """

    model_config = ConfigDict(
        frozen=False,
        arbitrary_types_allowed=True,
    )

    url: str = Field(..., description="WebSocket endpoint URL")
    heartbeat: float | None = Field(
        default=None,
        gt=0,
        description="Ping interval in seconds",
    )
    options: RpcOptions | None = None

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate URL format."""
        if not v:
            raise ValueError("URL cannot be empty")

        valid_schemes = ("ws://", "wss://")
        if not any(v.startswith(scheme) for scheme in valid_schemes):
            raise ValueError(
                f"URL must start with one of: {', '.join(valid_schemes)}"
            )
        return v


class WebSocketServerConfig(BaseModel):
    """Configuration for ``WebSocketRpcServer``.

    Attributes:
        host: Host to bind to
        port: Port to bind to (0 picks a free port)
        path: WebSocket endpoint path
        options: Optional RPC options applied to every connection
    """

    model_config = ConfigDict(
        frozen=False,
        arbitrary_types_allowed=True,
    )

    host: str = Field(default="localhost", description="Host to bind to")
    port: int = Field(default=8080, ge=0, le=65535, description="Port to bind to")
    path: str = Field(default="/rpc", description="WebSocket endpoint path")
    options: RpcOptions | None = None

    @field_validator("path")
    @classmethod
    def validate_path(cls, v: str) -> str:
        """Validate the endpoint path."""
        if not v.startswith("/"):
            raise ValueError("Path must start with '/'")
        return v

