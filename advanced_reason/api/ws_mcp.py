"""WebSocket transport for JSON-RPC.

Path: /ws

Every inbound text message is one request and gets exactly one response
on the same socket.  A socket carries any number of request/response
pairs; sockets share nothing but the dispatcher.
"""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from advanced_reason.protocol.jsonrpc import parse_error_response
from advanced_reason.server import ServerContext

logger = logging.getLogger(__name__)


def create_ws_router(context: ServerContext) -> APIRouter:
    """Factory that wires the /ws endpoint to the dispatcher."""

    router = APIRouter()

    @router.websocket("/ws")
    async def protocol_socket(websocket: WebSocket) -> None:
        await websocket.accept()
        logger.info("Client connected")

        try:
            while True:
                raw = await websocket.receive_text()

                try:
                    message = json.loads(raw)
                except json.JSONDecodeError:
                    await websocket.send_json(parse_error_response())
                    continue

                response = await context.dispatcher.handle(message)
                await websocket.send_json(response)

        except WebSocketDisconnect:
            logger.info("Client disconnected")

    return router
