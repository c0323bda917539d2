"""HTTP endpoints: generic JSON-RPC dispatch plus thin convenience routes.

Paths:
    POST /mcp                   one JSON-RPC request per body
    POST /advanced-reasoning    one-shot reasoning step from {"prompt"}
    GET  /providers             registered generation providers
    GET  /models?provider=      known models for a provider
    POST /session               create a session {"goal", "libraryName"?}
    GET  /health                library and memory counts

Protocol-level failures on /mcp are normal JSON-RPC envelopes with status
200.  A failure while handling the body itself (including malformed JSON)
is a 500 with {"message": ...}.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from advanced_reason.providers.registry import ProviderError
from advanced_reason.server import ServerContext

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


async def _json_body(request: Request) -> Any:
    raw = await request.body()
    return json.loads(raw.decode("utf-8"))


def create_mcp_router(context: ServerContext) -> APIRouter:
    """Factory that wires POST /mcp to the dispatcher."""

    router = APIRouter(tags=["protocol"])

    @router.post("/mcp")
    async def dispatch(request: Request) -> JSONResponse:
        try:
            message = await _json_body(request)
            response = await context.dispatcher.handle(message)
        except Exception as exc:
            logger.warning("Failed to handle /mcp body: %s", exc)
            return _error(500, str(exc))
        return JSONResponse(status_code=200, content=response)

    return router


def create_reasoning_router(context: ServerContext) -> APIRouter:
    """Factory for the convenience routes over engine, store and providers."""

    router = APIRouter(tags=["reasoning"])

    @router.post("/advanced-reasoning")
    async def advanced_reasoning(request: Request) -> JSONResponse:
        try:
            body = await _json_body(request)
            result = context.engine.process_step({
                "thought": body.get("prompt"),
                "thoughtNumber": 1,
                "totalThoughts": 1,
                "nextThoughtNeeded": False,
            })
        except Exception as exc:
            logger.warning("Failed to handle /advanced-reasoning body: %s", exc)
            return _error(500, str(exc))
        return JSONResponse(status_code=200, content=result.to_wire())

    @router.get("/providers")
    async def providers() -> list[str]:
        return context.providers.providers

    @router.get("/models")
    async def models(provider: Optional[str] = None) -> JSONResponse:
        if not provider:
            return _error(400, "Provider not specified")
        try:
            names = context.providers.list_models(provider)
        except ProviderError as exc:
            return _error(404, str(exc))
        return JSONResponse(status_code=200, content=names)

    @router.post("/session")
    async def create_session(request: Request) -> JSONResponse:
        try:
            body = await _json_body(request)
            goal = body.get("goal")
            if not isinstance(goal, str) or not goal:
                raise ValueError("Invalid goal: must be a non-empty string")
            session_id = await context.store.create_session(goal, body.get("libraryName"))
        except Exception as exc:
            logger.warning("Failed to create session over HTTP: %s", exc)
            return _error(500, str(exc))
        return JSONResponse(status_code=200, content={"sessionId": session_id})

    @router.get("/health")
    async def health() -> dict[str, Any]:
        return {
            "status": "ok",
            "library": context.store.library_name,
            "memory": context.store.stats().model_dump(),
            "history_length": len(context.engine.history),
            "branches": context.engine.branch_ids,
            "providers": context.providers.providers,
        }

    return router
