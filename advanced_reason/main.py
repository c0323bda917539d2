"""advanced-reason: HTTP and WebSocket application.

``create_app`` is the ASGI factory::

    uvicorn advanced_reason.main:create_app --factory

Called without a context it configures logging and builds the
ServerContext from the environment settings.  The CLI
(``python -m advanced_reason --transport http``) builds the context from
its arguments and passes it in.  Importing this module builds nothing.
"""

from __future__ import annotations

import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI

from advanced_reason.api.http_routes import create_mcp_router, create_reasoning_router
from advanced_reason.api.ws_mcp import create_ws_router
from advanced_reason.config import APP_VERSION, LOG_FORMAT, settings
from advanced_reason.server import ServerContext, build_context


# ── App factory ──────────────────────────────────────────────────────────────

def create_app(context: ServerContext | None = None) -> FastAPI:
    """Build the FastAPI app around *context*, or one wired from settings."""
    if context is None:
        logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, stream=sys.stderr)
        context = build_context(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await context.start()
        try:
            yield
        finally:
            await context.stop()

    app = FastAPI(
        title=context.settings.app_name,
        description="Reasoning steps and graph memory over JSON-RPC",
        version=APP_VERSION,
        lifespan=lifespan,
    )
    app.state.context = context

    app.include_router(create_mcp_router(context))
    app.include_router(create_reasoning_router(context))
    app.include_router(create_ws_router(context))
    return app
