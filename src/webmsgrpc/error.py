"""Error types for web message RPC."""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Error codes raised locally by the RPC layer."""

    INVALID_ARGUMENT = "invalid_argument"
    REMOTE = "remote"
    DESTROYED = "destroyed"

    def __str__(self) -> str:
        return self.value


class RpcError(Exception):
    """RPC error with code, message, and optional data.

    For ``ErrorCode.REMOTE`` errors, ``data`` holds the error value exactly
    as the peer sent it (usually ``{"message": ..., "name": ...}``).
    """

    def __init__(self, code: ErrorCode, message: str, data: Any | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"

    def __repr__(self) -> str:
        return f"RpcError({self.code!r}, {self.message!r}, {self.data!r})"

    @property
    def name(self) -> str | None:
        """Name of the remote error type, when the peer sent one."""
        if isinstance(self.data, dict):
            name = self.data.get("name")
            if isinstance(name, str):
                return name
        return None

    @staticmethod
    def invalid_argument(message: str, data: Any | None = None) -> RpcError:
        """Create an INVALID_ARGUMENT error."""
        return RpcError(ErrorCode.INVALID_ARGUMENT, message, data)

    @staticmethod
    def destroyed(message: str = "RPC instance has been destroyed") -> RpcError:
        """Create a DESTROYED error."""
        return RpcError(ErrorCode.DESTROYED, message)

    @staticmethod
    def remote(error: Any) -> RpcError:
        """Create a REMOTE error from the error value of a ``fail`` result."""
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            message = error["message"]
        else:
            message = str(error)
        return RpcError(ErrorCode.REMOTE, message, error)


def format_error(error: Any) -> Any:
    """Reduce an exception to the ``{"message", "name"}`` wire form.

    Only exceptions are normalised. A REMOTE error relays the value the
    peer originally sent, and any other value is returned as is.
    """
    if isinstance(error, RpcError):
        if error.code is ErrorCode.REMOTE:
            return error.data
        return {"message": error.message, "name": type(error).__name__}
    if isinstance(error, BaseException):
        return {"message": str(error), "name": type(error).__name__}
    return error
