"""Tool catalogue and ``call_tool`` routing.

Each tool has a descriptor (name, description, JSON input schema) returned
by ``list_tools`` and an async handler that turns tool arguments into a
ToolResult.  Tool failures never become protocol errors: an unknown tool,
a missing argument or a failing handler all come back as ``isError``
results.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from pydantic import BaseModel, Field

from advanced_reason.core.reasoning_engine import ReasoningEngine
from advanced_reason.domain.results import ToolResult
from advanced_reason.providers.registry import ProviderError, ProviderRegistry
from advanced_reason.store.system_json_store import SystemJsonError, SystemJsonStore

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], Awaitable[ToolResult]]


class ToolDescriptor(BaseModel):
    name: str
    description: str
    input_schema: dict[str, Any] = Field(..., alias="inputSchema")

    model_config = {"populate_by_name": True}


def _schema(properties: dict[str, Any], required: list[str] | None = None) -> dict[str, Any]:
    return {"type": "object", "properties": properties, "required": required or []}


_TEXT = {"type": "string"}
_TEXT_LIST = {"type": "array", "items": {"type": "string"}}


# ── Descriptors ──────────────────────────────────────────────────────────────

ADVANCED_REASONING_TOOL = ToolDescriptor(
    name="advanced_reasoning",
    description=(
        "Record one step of a multi-step reasoning process with confidence tracking, "
        "hypothesis testing, branching and revision.  When session_id is given the step "
        "is stored in graph memory and related earlier steps are returned.\n\n"
        "Required: thought, thoughtNumber, totalThoughts, nextThoughtNeeded.  "
        "Optional: confidence (0-1, default 0.5), reasoning_quality (low|medium|high, "
        "default medium), meta_thought, goal, progress, hypothesis, test_plan, "
        "test_result, evidence, session_id, builds_on, challenges, isRevision, "
        "revisesThought, branchFromThought, branchId, needsMoreThoughts."
    ),
    inputSchema=_schema(
        {
            "thought": {**_TEXT, "description": "Your current reasoning step"},
            "nextThoughtNeeded": {"type": "boolean", "description": "Whether another step is needed"},
            "thoughtNumber": {"type": "integer", "minimum": 1, "description": "Current step number"},
            "totalThoughts": {"type": "integer", "minimum": 1, "description": "Estimated total steps"},
            "confidence": {"type": "number", "minimum": 0, "maximum": 1},
            "reasoning_quality": {"type": "string", "enum": ["low", "medium", "high"]},
            "meta_thought": {**_TEXT, "description": "Reflection on the reasoning process"},
            "goal": _TEXT,
            "progress": {"type": "number", "minimum": 0, "maximum": 1},
            "hypothesis": _TEXT,
            "test_plan": _TEXT,
            "test_result": _TEXT,
            "evidence": _TEXT_LIST,
            "session_id": {**_TEXT, "description": "Reasoning session to record the step in"},
            "builds_on": _TEXT_LIST,
            "challenges": _TEXT_LIST,
            "isRevision": {"type": "boolean"},
            "revisesThought": {"type": "integer", "minimum": 1},
            "branchFromThought": {"type": "integer", "minimum": 1},
            "branchId": _TEXT,
            "needsMoreThoughts": {"type": "boolean"},
        },
        ["thought", "nextThoughtNeeded", "thoughtNumber", "totalThoughts"],
    ),
)

CREATE_REASONING_SESSION_TOOL = ToolDescriptor(
    name="create_reasoning_session",
    description="Create a reasoning session for a goal.  Returns a session id for advanced_reasoning.",
    inputSchema=_schema({"goal": {**_TEXT, "description": "The problem to solve"}}, ["goal"]),
)

QUERY_MEMORY_TOOL = ToolDescriptor(
    name="query_reasoning_memory",
    description="Find stored reasoning steps related to a query, with the session's current context.",
    inputSchema=_schema({"session_id": _TEXT, "query": _TEXT}, ["session_id", "query"]),
)

CREATE_LIBRARY_TOOL = ToolDescriptor(
    name="create_memory_library",
    description="Create a named memory library.  Names may contain letters, numbers, underscores and hyphens.",
    inputSchema=_schema({"library_name": _TEXT}, ["library_name"]),
)

LIST_LIBRARIES_TOOL = ToolDescriptor(
    name="list_memory_libraries",
    description="List memory libraries with node counts and last-modified times.",
    inputSchema=_schema({}),
)

SWITCH_LIBRARY_TOOL = ToolDescriptor(
    name="switch_memory_library",
    description="Save the current memory library and switch to another one (created empty if new).",
    inputSchema=_schema({"library_name": _TEXT}, ["library_name"]),
)

LIBRARY_INFO_TOOL = ToolDescriptor(
    name="get_current_library_info",
    description="Name and node/session/connection counts of the current memory library.",
    inputSchema=_schema({}),
)

CREATE_SYSTEM_JSON_TOOL = ToolDescriptor(
    name="create_system_json",
    description="Store structured, searchable data or workflows for a domain under a name.",
    inputSchema=_schema(
        {
            "name": {**_TEXT, "description": "Letters, numbers, underscores and hyphens only"},
            "domain": _TEXT,
            "description": _TEXT,
            "data": {"type": "object"},
            "tags": _TEXT_LIST,
        },
        ["name", "domain", "description", "data"],
    ),
)

GET_SYSTEM_JSON_TOOL = ToolDescriptor(
    name="get_system_json",
    description="Retrieve a system JSON document by name.",
    inputSchema=_schema({"name": _TEXT}, ["name"]),
)

SEARCH_SYSTEM_JSON_TOOL = ToolDescriptor(
    name="search_system_json",
    description="Search system JSON documents by name, domain, description and tags.",
    inputSchema=_schema({"query": _TEXT}, ["query"]),
)

LIST_SYSTEM_JSON_TOOL = ToolDescriptor(
    name="list_system_json",
    description="List system JSON documents with their domains and descriptions.",
    inputSchema=_schema({}),
)

LIST_MODELS_TOOL = ToolDescriptor(
    name="list_langchain_models",
    description="List known models for a text generation provider.",
    inputSchema=_schema({"provider": _TEXT}, ["provider"]),
)

GENERATE_TEXT_TOOL = ToolDescriptor(
    name="generate_langchain_text",
    description="Generate text with a provider's chat model.",
    inputSchema=_schema(
        {
            "provider": _TEXT,
            "modelName": _TEXT,
            "prompt": _TEXT,
            "systemMessage": _TEXT,
            "apiKey": _TEXT,
        },
        ["provider", "modelName", "prompt"],
    ),
)

CREATE_SESSION_TOOL = ToolDescriptor(
    name="create_session",
    description="Create a reasoning session, optionally in a named library (switching to it).",
    inputSchema=_schema({"goal": _TEXT, "libraryName": _TEXT}, ["goal"]),
)

ALL_TOOLS: tuple[ToolDescriptor, ...] = (
    ADVANCED_REASONING_TOOL,
    CREATE_REASONING_SESSION_TOOL,
    QUERY_MEMORY_TOOL,
    CREATE_LIBRARY_TOOL,
    LIST_LIBRARIES_TOOL,
    SWITCH_LIBRARY_TOOL,
    LIBRARY_INFO_TOOL,
    CREATE_SYSTEM_JSON_TOOL,
    GET_SYSTEM_JSON_TOOL,
    SEARCH_SYSTEM_JSON_TOOL,
    LIST_SYSTEM_JSON_TOOL,
    LIST_MODELS_TOOL,
    GENERATE_TEXT_TOOL,
    CREATE_SESSION_TOOL,
)


# ── Router ───────────────────────────────────────────────────────────────────

class ToolRouter:
    """Routes ``call_tool`` requests to the engine, stores and providers."""

    def __init__(
        self,
        engine: ReasoningEngine,
        system_json: SystemJsonStore,
        providers: ProviderRegistry,
    ) -> None:
        self._engine = engine
        self._system_json = system_json
        self._providers = providers
        self._descriptors = {tool.name: tool for tool in ALL_TOOLS}
        self._handlers: dict[str, ToolHandler] = {
            "advanced_reasoning": self._advanced_reasoning,
            "create_reasoning_session": self._create_reasoning_session,
            "query_reasoning_memory": self._query_memory,
            "create_memory_library": self._create_library,
            "list_memory_libraries": self._list_libraries,
            "switch_memory_library": self._switch_library,
            "get_current_library_info": self._library_info,
            "create_system_json": self._create_system_json,
            "get_system_json": self._get_system_json,
            "search_system_json": self._search_system_json,
            "list_system_json": self._list_system_json,
            "list_langchain_models": self._list_models,
            "generate_langchain_text": self._generate_text,
            "create_session": self._create_session,
        }

    # ── Protocol handlers ────────────────────────────────────────────────

    def list_tools(self, params: Any = None) -> dict[str, Any]:
        return {"tools": [tool.model_dump(by_alias=True) for tool in self._descriptors.values()]}

    async def call_tool(self, params: Any) -> dict[str, Any]:
        """``call_tool`` method: ``{name, arguments}`` → ToolResult wire dict."""
        if not isinstance(params, dict) or not isinstance(params.get("name"), str):
            raise ValueError("call_tool requires params with a string 'name'")
        arguments = params.get("arguments") or {}
        result = await self.call(params["name"], arguments)
        return result.to_wire()

    async def call(self, name: str, arguments: Any) -> ToolResult:
        handler = self._handlers.get(name)
        if handler is None:
            return ToolResult.text(f"Unknown tool: {name}", is_error=True)
        if not isinstance(arguments, dict):
            return ToolResult.failure("Tool arguments must be an object")

        missing = [
            key for key in self._descriptors[name].input_schema.get("required", [])
            if arguments.get(key) is None
        ]
        if missing:
            return ToolResult.failure(f"Missing required argument: {', '.join(missing)}")

        logger.debug("Calling tool %s", name)
        return await handler(arguments)

    # ── Reasoning ────────────────────────────────────────────────────────

    async def _advanced_reasoning(self, args: dict[str, Any]) -> ToolResult:
        return self._engine.process_step(args)

    async def _create_reasoning_session(self, args: dict[str, Any]) -> ToolResult:
        return await self._engine.create_reasoning_session(args["goal"])

    async def _create_session(self, args: dict[str, Any]) -> ToolResult:
        return await self._engine.create_reasoning_session(args["goal"], args.get("libraryName"))

    async def _query_memory(self, args: dict[str, Any]) -> ToolResult:
        return self._engine.query_memory(args["session_id"], args["query"])

    # ── Libraries ────────────────────────────────────────────────────────

    async def _create_library(self, args: dict[str, Any]) -> ToolResult:
        return await self._engine.create_library(args["library_name"])

    async def _list_libraries(self, args: dict[str, Any]) -> ToolResult:
        return await self._engine.list_libraries()

    async def _switch_library(self, args: dict[str, Any]) -> ToolResult:
        return await self._engine.switch_library(args["library_name"])

    async def _library_info(self, args: dict[str, Any]) -> ToolResult:
        return await self._engine.library_info()

    # ── System JSON ──────────────────────────────────────────────────────

    async def _create_system_json(self, args: dict[str, Any]) -> ToolResult:
        try:
            doc = await self._system_json.create(
                name=args["name"],
                domain=args["domain"],
                description=args["description"],
                data=args["data"],
                tags=args.get("tags"),
            )
        except SystemJsonError as exc:
            return ToolResult.failure(exc)
        return ToolResult.from_payload({
            "success": True,
            "name": doc.name,
            "message": f"System JSON '{doc.name}' saved",
        })

    async def _get_system_json(self, args: dict[str, Any]) -> ToolResult:
        try:
            doc = await self._system_json.get(args["name"])
        except SystemJsonError as exc:
            return ToolResult.failure(exc)
        return ToolResult.from_payload(doc.model_dump(mode="json"))

    async def _search_system_json(self, args: dict[str, Any]) -> ToolResult:
        hits = await self._system_json.search(str(args["query"]))
        return ToolResult.from_payload({
            "query": args["query"],
            "results": [
                {**doc.summary(), "relevance": round(score, 4)} for doc, score in hits
            ],
        })

    async def _list_system_json(self, args: dict[str, Any]) -> ToolResult:
        docs = await self._system_json.list_documents()
        return ToolResult.from_payload({
            "count": len(docs),
            "documents": [doc.summary() for doc in docs],
        })

    # ── Providers ────────────────────────────────────────────────────────

    async def _list_models(self, args: dict[str, Any]) -> ToolResult:
        try:
            models = self._providers.list_models(args["provider"])
        except ProviderError as exc:
            return ToolResult.failure(exc)
        return ToolResult.from_payload({"provider": args["provider"], "models": models})

    async def _generate_text(self, args: dict[str, Any]) -> ToolResult:
        try:
            text = await self._providers.generate(
                provider=args["provider"],
                model_name=args["modelName"],
                prompt=args["prompt"],
                system_message=args.get("systemMessage"),
                api_key=args.get("apiKey"),
            )
        except ProviderError as exc:
            return ToolResult.failure(exc)
        return ToolResult.text(text)
