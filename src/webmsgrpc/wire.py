"""Wire message shapes for web message RPC.

Messages travel as plain dicts so that any structured-clone style channel
(window.postMessage, worker ports, JSON over a socket) can carry them:

    Call:        {"type": "call", "method": str, "args": list, "token": str}
    CallResult:  {"type": "call-result", "result": "success" | "fail",
                  "data"?: any, "error"?: any, "token": str}
    CallbackRef: {"__rpc_callback__": True, "callbackMethodName": str}

This module only converts between dicts and dataclasses. Turning callback
references into callables is the job of ``WebMessageRPC``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Final

CALL: Final[str] = "call"
CALL_RESULT: Final[str] = "call-result"
RESULT_SUCCESS: Final[str] = "success"
RESULT_FAIL: Final[str] = "fail"
CALLBACK_MARKER: Final[str] = "__rpc_callback__"


@dataclass(frozen=True, slots=True)
class WireCallbackRef:
    """Stand-in for a function argument: {"__rpc_callback__": true, ...}"""

    callback_method_name: str

    def to_json(self) -> dict[str, Any]:
        """Convert to JSON object."""
        return {CALLBACK_MARKER: True, "callbackMethodName": self.callback_method_name}

    @staticmethod
    def matches(value: Any) -> bool:
        """Check whether a decoded argument is a callback reference."""
        return (
            isinstance(value, dict)
            and bool(value.get(CALLBACK_MARKER))
            and isinstance(value.get("callbackMethodName"), str)
        )

    @staticmethod
    def from_json(value: Any) -> WireCallbackRef:
        """Parse from JSON object."""
        if not WireCallbackRef.matches(value):
            msg = f"Not a callback reference: {value!r}"
            raise ValueError(msg)
        return WireCallbackRef(value["callbackMethodName"])


@dataclass(frozen=True, slots=True)
class WireCall:
    """Call message: invoke ``method`` on the peer with ``args``."""

    method: str
    token: str
    args: list[Any] = field(default_factory=list)

    def to_json(self) -> dict[str, Any]:
        """Convert to JSON object."""
        return {"type": CALL, "method": self.method, "args": self.args, "token": self.token}

    @staticmethod
    def from_json(obj: dict[str, Any]) -> WireCall:
        """Parse from JSON object."""
        method = obj.get("method")
        if not isinstance(method, str) or not method:
            msg = f"Call method must be a non-empty string, got {method!r}"
            raise ValueError(msg)
        token = obj.get("token")
        if not isinstance(token, str):
            msg = f"Call token must be string, got {type(token).__name__}"
            raise ValueError(msg)
        args = obj.get("args")
        if args is None:
            args = []
        if not isinstance(args, (list, tuple)):
            msg = f"Call args must be a list, got {type(args).__name__}"
            raise ValueError(msg)
        return WireCall(method, token, list(args))


@dataclass(frozen=True, slots=True)
class WireCallResult:
    """Result message for the call carrying the same token."""

    token: str
    result: str
    data: Any = None
    error: Any = None

    @property
    def is_success(self) -> bool:
        return self.result == RESULT_SUCCESS

    @property
    def is_fail(self) -> bool:
        return self.result == RESULT_FAIL

    def to_json(self) -> dict[str, Any]:
        """Convert to JSON object.

        Success results carry ``data``, failures carry ``error``.
        """
        obj: dict[str, Any] = {"type": CALL_RESULT, "result": self.result}
        if self.result == RESULT_FAIL:
            obj["error"] = self.error
        else:
            obj["data"] = self.data
        obj["token"] = self.token
        return obj

    @staticmethod
    def success(token: str, data: Any) -> WireCallResult:
        return WireCallResult(token, RESULT_SUCCESS, data=data)

    @staticmethod
    def fail(token: str, error: Any) -> WireCallResult:
        return WireCallResult(token, RESULT_FAIL, error=error)

    @staticmethod
    def from_json(obj: dict[str, Any]) -> WireCallResult:
        """Parse from JSON object."""
        token = obj.get("token")
        if not isinstance(token, str):
            msg = f"Result token must be string, got {type(token).__name__}"
            raise ValueError(msg)
        result = obj.get("result")
        if not isinstance(result, str):
            msg = f"Result kind must be string, got {type(result).__name__}"
            raise ValueError(msg)
        return WireCallResult(token, result, obj.get("data"), obj.get("error"))


WireMessage = WireCall | WireCallResult


def parse_message(payload: Any) -> WireMessage | None:
    """Parse an inbound payload, returning None for anything unrecognised.

    Channels may carry unrelated traffic, so a payload that is not an RPC
    message is not an error.
    """
    if not isinstance(payload, dict):
        return None
    kind = payload.get("type")
    try:
        if kind == CALL:
            return WireCall.from_json(payload)
        if kind == CALL_RESULT:
            return WireCallResult.from_json(payload)
    except ValueError:
        return None
    return None


def serialize_message(message: WireMessage | dict[str, Any]) -> str:
    """Encode a message as JSON text for text-based channels."""
    if isinstance(message, (WireCall, WireCallResult)):
        message = message.to_json()
    return json.dumps(message)


def deserialize_message(text: str | bytes) -> Any:
    """Decode JSON text from a text-based channel.

    Raises:
        ValueError: If the text is not valid JSON
    """
    return json.loads(text)
