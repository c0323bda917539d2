"""Command-line entry point.

    python -m advanced_reason                      # stdio transport
    python -m advanced_reason --transport http     # HTTP + WebSocket on --port

Options override the REASON_* environment settings.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from advanced_reason.api.stdio import StdioTransport
from advanced_reason.config import LOG_FORMAT, Settings
from advanced_reason.server import ServerContext, build_context

logger = logging.getLogger("advanced_reason")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="advanced-reason", description="Reasoning memory server")
    parser.add_argument("--transport", choices=["stdio", "http"], default="stdio")
    parser.add_argument("--host", help="HTTP bind address")
    parser.add_argument("--port", type=int, help="HTTP port")
    parser.add_argument("--memory-dir", help="Directory for libraries and system JSON")
    parser.add_argument("--library", help="Library to open at start-up")
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> Settings:
    overrides = {
        "host": args.host,
        "port": args.port,
        "memory_dir": args.memory_dir,
        "default_library": args.library,
    }
    return Settings(**{key: value for key, value in overrides.items() if value is not None})


async def run_stdio(context: ServerContext) -> None:
    await context.start()
    try:
        await StdioTransport(context.dispatcher).serve()
    finally:
        await context.stop()


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = settings_from_args(args)

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, stream=sys.stderr, force=True)
    try:
        context = build_context(settings)
        if args.transport == "stdio":
            asyncio.run(run_stdio(context))
        else:
            import uvicorn

            from advanced_reason.main import create_app

            uvicorn.run(create_app(context), host=settings.host, port=settings.port)
    except KeyboardInterrupt:
        return 0
    except Exception as exc:
        logger.critical("Fatal error running server: %s", exc, exc_info=True)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
