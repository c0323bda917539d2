"""Stdio transport: newline-delimited JSON-RPC on stdin/stdout.

Each non-blank input line is one request and produces one output line.
A line that is not valid UTF-8 or not valid JSON produces a parse-error
line and the loop carries on.  MCP notifications are executed but never
answered.  Only protocol lines are written to stdout; logging goes to
stderr.
"""

from __future__ import annotations

import asyncio
import json
import logging
import sys
from typing import BinaryIO, TextIO, Union

from advanced_reason.protocol.jsonrpc import (
    ProtocolDispatcher,
    is_notification,
    parse_error_response,
)

logger = logging.getLogger(__name__)


class StdioTransport:
    """Reads requests from *reader* and writes responses to *writer*.

    The reader defaults to the raw stdin byte stream so that undecodable
    input is handled per line; text readers are accepted as well.
    """

    def __init__(
        self,
        dispatcher: ProtocolDispatcher,
        reader: Union[BinaryIO, TextIO, None] = None,
        writer: TextIO | None = None,
    ) -> None:
        self._dispatcher = dispatcher
        self._reader = reader or sys.stdin.buffer
        self._writer = writer or sys.stdout

    async def handle_line(self, line: Union[str, bytes]) -> str | None:
        """Process one input line and return the output line, if any."""
        if isinstance(line, bytes):
            try:
                line = line.decode("utf-8")
            except UnicodeDecodeError:
                logger.warning("Dropping stdin line that is not valid UTF-8")
                return json.dumps(parse_error_response())

        if not line.strip():
            return None
        try:
            message = json.loads(line)
        except json.JSONDecodeError:
            return json.dumps(parse_error_response())

        response = await self._dispatcher.handle(message)
        if is_notification(message):
            return None
        return json.dumps(response)

    async def serve(self) -> None:
        """Run until the input stream reaches EOF."""
        logger.info("Reasoning server running on stdio")
        while True:
            line = await asyncio.to_thread(self._reader.readline)
            if not line:
                break
            output = await self.handle_line(line)
            if output is not None:
                self._writer.write(output + "\n")
                self._writer.flush()
        logger.info("Stdio input closed")
