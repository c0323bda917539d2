"""ReasoningEngine: records reasoning steps and answers memory queries.

Design principles:
    1. Every public operation returns a ToolResult.  Nothing raises past the
       engine: validation problems and unexpected failures both become
       ``isError`` results with ``{"error": ..., "status": "failed"}``.
    2. The engine owns the step history and branch bookkeeping for the
       process lifetime.  The MemoryStore owns nodes and sessions.
    3. No ``await`` happens between reading and writing session state, so a
       step is applied atomically on the event loop.

Step pipeline (process_step):
    validate → raise totalThoughts to thoughtNumber → record node and merge
    session (if session_id) → append history → append branch (if
    branchFromThought + branchId) → related memories (if session_id) →
    payload
"""

from __future__ import annotations

import logging
from typing import Any

from advanced_reason.domain import MemoryNode, NodeKind, ThoughtRecord, ThoughtValidationError, ToolResult
from advanced_reason.explain.formatter import ThoughtFormatter
from advanced_reason.store.memory_store import LibraryError, MemoryStore

logger = logging.getLogger(__name__)


class ReasoningEngine:
    """Stateful driver of multi-step reasoning over a MemoryStore.

    Args:
        store: The memory store that nodes and sessions are recorded in.
        related_memory_limit: Related memories returned with each step.
        query_memory_limit: Results returned by ``query_memory``.
        log_thoughts: Whether to log a framed rendering of every step.
    """

    def __init__(
        self,
        store: MemoryStore,
        related_memory_limit: int = 3,
        query_memory_limit: int = 10,
        log_thoughts: bool = True,
    ) -> None:
        self._store = store
        self._related_memory_limit = related_memory_limit
        self._query_memory_limit = query_memory_limit
        self._log_thoughts = log_thoughts
        self._history: list[ThoughtRecord] = []
        self._branches: dict[str, list[ThoughtRecord]] = {}

    # ── Read-only views ──────────────────────────────────────────────────

    @property
    def store(self) -> MemoryStore:
        return self._store

    @property
    def history(self) -> list[ThoughtRecord]:
        return list(self._history)

    @property
    def branch_ids(self) -> list[str]:
        return list(self._branches)

    def branch(self, branch_id: str) -> list[ThoughtRecord]:
        """Steps recorded on *branch_id*, oldest first (empty if unknown)."""
        return list(self._branches.get(branch_id, []))

    # ── Reasoning steps ──────────────────────────────────────────────────

    def process_step(self, arguments: Any) -> ToolResult:
        try:
            record = ThoughtRecord.from_arguments(arguments)

            if record.thought_number > record.total_thoughts:
                record.total_thoughts = record.thought_number

            if record.session_id:
                self._record_in_session(record)

            self._history.append(record)

            if record.branch_from_thought and record.branch_id:
                self._branches.setdefault(record.branch_id, []).append(record)

            if self._log_thoughts:
                logger.info("\n%s", ThoughtFormatter.format_plain(record))

            related: list[MemoryNode] = []
            if record.session_id:
                related = self._store.query_related(record.thought, self._related_memory_limit)

            payload: dict[str, Any] = {
                "thoughtNumber": record.thought_number,
                "totalThoughts": record.total_thoughts,
                "nextThoughtNeeded": record.next_thought_needed,
                "confidence": record.confidence,
                "reasoning_quality": record.reasoning_quality.value,
                "meta_assessment": record.meta_thought,
                "branches": self.branch_ids,
                "thoughtHistoryLength": len(self._history),
                "memoryStats": self._store.stats().model_dump(),
                "relatedMemories": [
                    {"content": node.content, "confidence": node.confidence}
                    for node in related
                ],
            }
            if record.hypothesis is not None:
                payload["hypothesis"] = record.hypothesis
            return ToolResult.from_payload(payload)

        except ThoughtValidationError as exc:
            logger.warning("Rejected reasoning step: %s", exc)
            return ToolResult.failure(exc)
        except Exception as exc:
            logger.error("Reasoning step failed: %s", exc, exc_info=True)
            return ToolResult.failure(exc)

    def _record_in_session(self, record: ThoughtRecord) -> None:
        """Add the step as a thought node and fold it into its session."""
        node_id = self._store.add_node(
            record.thought,
            NodeKind.THOUGHT,
            {
                "confidence": record.confidence,
                "reasoning_quality": record.reasoning_quality.value,
                "thoughtNumber": record.thought_number,
                "hypothesis": record.hypothesis,
            },
        )

        updates: dict[str, Any] = {
            "current_focus": record.thought,
            "confidence": record.confidence,
            "quality_level": record.reasoning_quality,
            "meta_assessment": record.meta_thought,
        }

        session = self._store.get_session(record.session_id)
        if session is not None:
            updates["working_memory"] = [*session.working_memory, node_id]
            if record.hypothesis:
                updates["active_hypotheses"] = [*session.active_hypotheses, node_id]

        self._store.update_session(record.session_id, updates)

    # ── Sessions and queries ─────────────────────────────────────────────

    async def create_reasoning_session(
        self, goal: Any, library_name: str | None = None,
    ) -> ToolResult:
        try:
            if not isinstance(goal, str) or not goal:
                raise ValueError("Invalid goal: must be a non-empty string")
            session_id = await self._store.create_session(goal, library_name)
            return ToolResult.from_payload({
                "sessionId": session_id,
                "goal": goal,
                "library": self._store.library_name,
                "status": "created",
                "message": "Reasoning session created successfully",
            })
        except Exception as exc:
            logger.warning("Could not create reasoning session: %s", exc)
            return ToolResult.failure(exc)

    def query_memory(self, session_id: Any, query: Any) -> ToolResult:
        try:
            if not isinstance(query, str):
                raise ValueError("Invalid query: must be a string")
            related = self._store.query_related(query, self._query_memory_limit)
            session = self._store.get_session(session_id) if isinstance(session_id, str) else None
            return ToolResult.from_payload({
                "query": query,
                "sessionContext": session.model_dump(mode="json") if session else None,
                "relatedMemories": [
                    {
                        "content": node.content,
                        "type": node.kind.value,
                        "confidence": node.confidence,
                        "connections": len(node.connections),
                    }
                    for node in related
                ],
                "memoryStats": self._store.stats().model_dump(),
            })
        except Exception as exc:
            logger.warning("Memory query failed: %s", exc)
            return ToolResult.failure(exc)

    # ── Libraries ────────────────────────────────────────────────────────

    async def create_library(self, name: Any) -> ToolResult:
        try:
            info = await self._store.create_library(name)
        except LibraryError as exc:
            return ToolResult.failure(exc)
        return ToolResult.from_payload({
            "success": True,
            "library": info.name,
            "message": f"Library '{info.name}' created",
        })

    async def list_libraries(self) -> ToolResult:
        try:
            libraries = await self._store.list_libraries()
        except Exception as exc:
            logger.error("Listing libraries failed: %s", exc, exc_info=True)
            return ToolResult.failure(exc)
        return ToolResult.from_payload({
            "current": self._store.library_name,
            "libraries": [
                {
                    "name": info.name,
                    "nodes": info.node_count,
                    "lastModified": info.last_modified.isoformat() if info.last_modified else None,
                    "current": info.current,
                }
                for info in libraries
            ],
        })

    async def switch_library(self, name: Any) -> ToolResult:
        try:
            previous = self._store.library_name
            await self._store.switch_library(name)
        except LibraryError as exc:
            return ToolResult.failure(exc)
        except Exception as exc:
            logger.error("Switching library failed: %s", exc, exc_info=True)
            return ToolResult.failure(exc)
        return ToolResult.from_payload({
            "success": True,
            "previous": previous,
            "library": self._store.library_name,
            "message": f"Switched to library '{self._store.library_name}'",
            "memoryStats": self._store.stats().model_dump(),
        })

    async def library_info(self) -> ToolResult:
        try:
            return ToolResult.from_payload(await self._store.current_library_info())
        except Exception as exc:
            logger.error("Reading library info failed: %s", exc, exc_info=True)
            return ToolResult.failure(exc)
