"""JSON-RPC 2.0 envelopes and the method dispatcher.

The dispatcher is the single protocol surface shared by all transports.
Transports only frame and deframe messages; everything about methods,
error codes and id echoing lives here.

Error codes:
    -32700  Parse error        (transport could not decode the message)
    -32601  Method not found   (also for a missing or non-string method)
    -32000  Handler error      (the handler raised; message is passed through)

The response echoes the request's ``id`` exactly as received, whatever its
JSON type, and ``null`` when there is none.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Awaitable, Callable, Literal, Optional, Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)

JSONRPC_VERSION = "2.0"

PARSE_ERROR = -32700
METHOD_NOT_FOUND = -32601
HANDLER_ERROR = -32000

Handler = Callable[[Any], Union[Any, Awaitable[Any]]]


# ── Envelopes ────────────────────────────────────────────────────────────────

class JsonRpcError(BaseModel):
    code: int
    message: str
    data: Any = None


class JsonRpcResponse(BaseModel):
    jsonrpc: Literal["2.0"] = JSONRPC_VERSION
    result: Any = None
    error: Optional[JsonRpcError] = None
    id: Any = None

    def to_wire(self) -> dict[str, Any]:
        """Exactly one of ``result``/``error`` is emitted; ``id`` always is."""
        wire: dict[str, Any] = {"jsonrpc": self.jsonrpc}
        if self.error is not None:
            wire["error"] = self.error.model_dump(exclude_none=True)
        else:
            wire["result"] = self.result
        wire["id"] = self.id
        return wire


def error_response(code: int, message: str, request_id: Any = None) -> dict[str, Any]:
    return JsonRpcResponse(
        error=JsonRpcError(code=code, message=message), id=request_id,
    ).to_wire()


def parse_error_response() -> dict[str, Any]:
    return error_response(PARSE_ERROR, "Parse error")


def is_notification(message: Any) -> bool:
    """MCP notifications carry no id and expect no reply."""
    return (
        isinstance(message, dict)
        and "id" not in message
        and str(message.get("method", "")).startswith("notifications/")
    )


# ── Dispatcher ───────────────────────────────────────────────────────────────

class ProtocolDispatcher:
    """Registry of method name → handler, executing one request at a time.

    Usage:
        dispatcher = ProtocolDispatcher()
        dispatcher.register("list_tools", lambda params: {"tools": []})
        response = await dispatcher.handle({"jsonrpc": "2.0", "method": "list_tools", "id": 1})
    """

    def __init__(self) -> None:
        self._handlers: dict[str, Handler] = {}

    def register(self, method: str, handler: Handler) -> None:
        """Register *handler* for *method*.  The last registration wins."""
        if method in self._handlers:
            logger.debug("Replacing handler for method %s", method)
        self._handlers[method] = handler

    @property
    def methods(self) -> list[str]:
        return list(self._handlers)

    async def handle(self, message: Any) -> dict[str, Any]:
        """Execute one decoded JSON message and return the response envelope."""
        fields = message if isinstance(message, dict) else {}
        request_id = fields.get("id")
        method = fields.get("method")

        handler = self._handlers.get(method) if isinstance(method, str) else None
        if handler is None:
            logger.info("Method not found: %r", method)
            return error_response(METHOD_NOT_FOUND, "Method not found", request_id)

        try:
            result = handler(fields.get("params"))
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            logger.error("Handler for %s failed: %s", method, exc, exc_info=True)
            return error_response(HANDLER_ERROR, str(exc), request_id)

        return JsonRpcResponse(result=result, id=request_id).to_wire()
