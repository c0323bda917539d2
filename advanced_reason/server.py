"""ServerContext: every long-lived component, built once at start-up.

The context is constructed from a Settings object and passed by reference
to the transports.  Components never reach for module-level singletons;
they receive what they need through their constructors.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from advanced_reason.config import APP_VERSION, Settings
from advanced_reason.core.reasoning_engine import ReasoningEngine
from advanced_reason.protocol.jsonrpc import ProtocolDispatcher
from advanced_reason.protocol.tools import ToolRouter
from advanced_reason.providers.registry import ProviderRegistry
from advanced_reason.store.memory_store import MemoryStore
from advanced_reason.store.system_json_store import SystemJsonStore

logger = logging.getLogger(__name__)

MCP_PROTOCOL_VERSION = "2024-11-05"


@dataclass
class ServerContext:
    settings: Settings
    store: MemoryStore
    system_json: SystemJsonStore
    engine: ReasoningEngine
    providers: ProviderRegistry
    tools: ToolRouter
    dispatcher: ProtocolDispatcher

    async def start(self) -> None:
        await self.store.open()
        logger.info(
            "%s ready: library=%s nodes=%d providers=%s",
            self.settings.app_name,
            self.store.library_name,
            self.store.stats().nodes,
            self.providers.providers,
        )

    async def stop(self) -> None:
        await self.store.close()
        logger.info("%s stopped", self.settings.app_name)


def build_context(
    settings: Settings,
    providers: ProviderRegistry | None = None,
) -> ServerContext:
    """Wire store → engine → tools → dispatcher from *settings*."""
    store = MemoryStore(
        memory_dir=settings.memory_dir,
        default_library=settings.default_library,
        relevance_threshold=settings.relevance_threshold,
    )
    system_json = SystemJsonStore(settings.memory_dir)
    engine = ReasoningEngine(
        store,
        related_memory_limit=settings.related_memory_limit,
        query_memory_limit=settings.query_memory_limit,
        log_thoughts=not settings.disable_reasoning_logging,
    )
    providers = providers or ProviderRegistry()
    tools = ToolRouter(engine, system_json, providers)

    dispatcher = ProtocolDispatcher()
    dispatcher.register("list_tools", tools.list_tools)
    dispatcher.register("call_tool", tools.call_tool)
    # MCP method names for off-the-shelf clients
    dispatcher.register("tools/list", tools.list_tools)
    dispatcher.register("tools/call", tools.call_tool)
    dispatcher.register("initialize", lambda params: _initialize_result(settings))
    dispatcher.register("ping", lambda params: {})
    dispatcher.register("notifications/initialized", lambda params: None)

    return ServerContext(
        settings=settings,
        store=store,
        system_json=system_json,
        engine=engine,
        providers=providers,
        tools=tools,
        dispatcher=dispatcher,
    )


def _initialize_result(settings: Settings) -> dict[str, Any]:
    return {
        "protocolVersion": MCP_PROTOCOL_VERSION,
        "serverInfo": {"name": settings.app_name, "version": APP_VERSION},
        "capabilities": {"tools": {}},
    }
