"""In-memory graph of reasoning nodes and sessions, persisted per library.

Design notes:
    - The store exclusively owns the current library's node and session
      maps.  No other component mutates them.
    - Every mutation is plain synchronous code with no ``await`` inside it,
      so on a single event loop a mutation always completes before the next
      request runs.  No lock is needed.
    - Each mutation serialises the whole library and schedules it on the
      SnapshotWriter (fire-and-forget, FIFO, last writer wins).
    - A library is one JSON document:
          {"nodes": [[id, node], ...], "sessions": [[id, session], ...],
           "timestamp": <epoch-ms>}
      A missing document is an empty library.  A corrupt one is logged and
      treated as empty; callers never see a persistence error.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from advanced_reason.core.relevance import relevance
from advanced_reason.domain.enums import NodeKind
from advanced_reason.domain.memory import (
    DEFAULT_CONFIDENCE,
    LibraryInfo,
    MemoryNode,
    MemoryStats,
    ReasoningSession,
    clamp_unit,
)
from advanced_reason.foundation.clock import epoch_ms
from advanced_reason.foundation.identifiers import new_id
from advanced_reason.store.persistence import SnapshotWriter, write_atomic

logger = logging.getLogger(__name__)

LIBRARY_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

_NodeMap = dict[str, MemoryNode]
_SessionMap = dict[str, ReasoningSession]


class LibraryError(ValueError):
    """Raised for an illegal library name or a library that already exists."""


def validate_library_name(name: Any) -> str:
    if not isinstance(name, str) or not LIBRARY_NAME_PATTERN.fullmatch(name):
        raise LibraryError(
            f"Invalid library name {name!r}: use only letters, numbers, underscores and hyphens"
        )
    return name


class MemoryStore:
    """Graph memory for reasoning artifacts with switchable named libraries.

    Args:
        memory_dir: Root directory for persisted data.  Libraries live in
            ``<memory_dir>/libraries/<name>.json``.
        default_library: Library that is current after ``open()``.
        relevance_threshold: Minimum relevance for ``query_related`` hits.
        writer: Snapshot writer; a private one is created when omitted.
    """

    def __init__(
        self,
        memory_dir: Path | str,
        default_library: str = "cognitive_memory",
        relevance_threshold: float = 0.1,
        writer: SnapshotWriter | None = None,
    ) -> None:
        self._libraries_dir = Path(memory_dir) / "libraries"
        self._library = validate_library_name(default_library)
        self._relevance_threshold = relevance_threshold
        self._writer = writer or SnapshotWriter()
        self._nodes: _NodeMap = {}
        self._sessions: _SessionMap = {}

    # ── Lifecycle ────────────────────────────────────────────────────────

    async def open(self) -> None:
        """Create the storage directory and load the current library."""
        try:
            await asyncio.to_thread(self._libraries_dir.mkdir, parents=True, exist_ok=True)
        except OSError as exc:
            logger.error("Failed to initialise memory storage at %s: %s", self._libraries_dir, exc)
        self._nodes, self._sessions = await self._read_library(self._library)
        self._writer.start()

    async def flush(self) -> None:
        """Wait for every scheduled snapshot to reach disk."""
        await self._writer.flush()

    async def close(self) -> None:
        await self._writer.stop()

    # ── Properties ───────────────────────────────────────────────────────

    @property
    def library_name(self) -> str:
        return self._library

    @property
    def library_path(self) -> Path:
        return self._library_path(self._library)

    @property
    def nodes(self) -> list[MemoryNode]:
        """All nodes in insertion order."""
        return list(self._nodes.values())

    # ── Nodes ────────────────────────────────────────────────────────────

    def add_node(
        self,
        content: str,
        kind: NodeKind = NodeKind.THOUGHT,
        metadata: Mapping[str, Any] | None = None,
    ) -> str:
        """Record a new node and return its id.

        Confidence comes from ``metadata["confidence"]`` when it is a
        number, otherwise 0.5.
        """
        meta = dict(metadata or {})
        node_id = new_id("node")
        while node_id in self._nodes:
            node_id = new_id("node")

        self._nodes[node_id] = MemoryNode(
            id=node_id,
            content=content,
            kind=kind,
            metadata=meta,
            confidence=clamp_unit(meta.get("confidence"), DEFAULT_CONFIDENCE),
        )
        self._schedule_save()
        logger.debug("Added %s node %s", NodeKind(kind).value, node_id)
        return node_id

    def get_node(self, node_id: str) -> MemoryNode | None:
        return self._nodes.get(node_id)

    def connect_nodes(self, node_a: str, node_b: str) -> None:
        """Link two nodes symmetrically.  Unknown ids and self-links are ignored."""
        first = self._nodes.get(node_a)
        second = self._nodes.get(node_b)
        if first is None or second is None or node_a == node_b:
            return

        changed = False
        if node_b not in first.connections:
            first.connections.append(node_b)
            changed = True
        if node_a not in second.connections:
            second.connections.append(node_a)
            changed = True
        if changed:
            self._schedule_save()

    def query_related(self, text: str, max_results: int = 5) -> list[MemoryNode]:
        """Nodes whose content is lexically related to *text*, best first.

        Only scores above the relevance threshold count.  Ties keep
        insertion order.
        """
        scored = [
            (relevance(text, node.content), node)
            for node in self._nodes.values()
        ]
        hits = [(score, node) for score, node in scored if score > self._relevance_threshold]
        hits.sort(key=lambda pair: pair[0], reverse=True)
        return [node for _, node in hits[:max(max_results, 0)]]

    # ── Sessions ─────────────────────────────────────────────────────────

    async def create_session(self, goal: str, library_name: str | None = None) -> str:
        """Start a reasoning session, switching library first if asked to."""
        if library_name is not None and library_name != self._library:
            await self.switch_library(library_name)

        session_id = new_id("session")
        while session_id in self._sessions:
            session_id = new_id("session")

        self._sessions[session_id] = ReasoningSession(
            session_id=session_id,
            goal=goal,
            current_focus=goal,
        )
        self._schedule_save()
        logger.info("Created session %s in library %s", session_id, self._library)
        return session_id

    def update_session(self, session_id: str, updates: Mapping[str, Any]) -> None:
        """Shallow-merge *updates* into a session.  Unknown sessions are ignored."""
        session = self._sessions.get(session_id)
        if session is None:
            logger.debug("Ignoring update for unknown session %s", session_id)
            return

        for field_name, value in updates.items():
            if field_name not in ReasoningSession.model_fields or field_name == "session_id":
                logger.debug("Ignoring unknown session field %r", field_name)
                continue
            setattr(session, field_name, value)
        self._schedule_save()

    def get_session(self, session_id: str) -> ReasoningSession | None:
        return self._sessions.get(session_id)

    # ── Statistics ───────────────────────────────────────────────────────

    def stats(self) -> MemoryStats:
        adjacency = sum(len(node.connections) for node in self._nodes.values())
        return MemoryStats(
            nodes=len(self._nodes),
            sessions=len(self._sessions),
            connections=adjacency // 2,
        )

    # ── Libraries ────────────────────────────────────────────────────────

    async def create_library(self, name: str) -> LibraryInfo:
        """Create an empty, persisted library without switching to it.

        Raises:
            LibraryError: If the name is illegal or the library exists.
        """
        validate_library_name(name)
        path = self._library_path(name)
        if name == self._library or await asyncio.to_thread(path.exists):
            raise LibraryError(f"Library '{name}' already exists")

        try:
            await asyncio.to_thread(write_atomic, path, self._encode({}, {}))
        except OSError as exc:
            raise LibraryError(f"Could not create library '{name}': {exc}") from exc

        logger.info("Created memory library %s", name)
        return LibraryInfo(name=name, node_count=0, last_modified=await self._modified_at(path))

    async def list_libraries(self) -> list[LibraryInfo]:
        """Every known library, including the current one even if never written."""
        paths = await asyncio.to_thread(self._library_files)
        infos: dict[str, LibraryInfo] = {}

        for path in paths:
            name = path.stem
            if name == self._library:
                count = len(self._nodes)
            else:
                nodes, _ = await self._read_library(name)
                count = len(nodes)
            infos[name] = LibraryInfo(
                name=name,
                node_count=count,
                last_modified=await self._modified_at(path),
                current=name == self._library,
            )

        if self._library not in infos:
            infos[self._library] = LibraryInfo(
                name=self._library, node_count=len(self._nodes), current=True,
            )

        return [infos[name] for name in sorted(infos)]

    async def switch_library(self, name: str) -> None:
        """Persist the current library, then load *name* (empty if new)."""
        validate_library_name(name)
        if name == self._library:
            return

        previous = self._library
        self._schedule_save()
        await self._writer.flush()

        self._nodes, self._sessions = await self._read_library(name)
        self._library = name
        logger.info("Switched memory library %s → %s", previous, name)

    async def current_library_info(self) -> dict[str, Any]:
        stats = self.stats()
        return {
            "name": self._library,
            "nodes": stats.nodes,
            "sessions": stats.sessions,
            "connections": stats.connections,
            "path": str(self.library_path),
            "last_modified": _isoformat(await self._modified_at(self.library_path)),
        }

    # ── Persistence internals ────────────────────────────────────────────

    def _library_path(self, name: str) -> Path:
        return self._libraries_dir / f"{name}.json"

    def _library_files(self) -> list[Path]:
        if not self._libraries_dir.is_dir():
            return []
        return sorted(
            p for p in self._libraries_dir.glob("*.json")
            if LIBRARY_NAME_PATTERN.fullmatch(p.stem)
        )

    def _schedule_save(self) -> None:
        self._writer.schedule(self.library_path, self._encode(self._nodes, self._sessions))

    @staticmethod
    def _encode(nodes: _NodeMap, sessions: _SessionMap) -> str:
        state = {
            "nodes": [[nid, node.model_dump(mode="json")] for nid, node in nodes.items()],
            "sessions": [[sid, s.model_dump(mode="json")] for sid, s in sessions.items()],
            "timestamp": epoch_ms(),
        }
        return json.dumps(state, indent=2)

    @staticmethod
    def _decode(text: str) -> tuple[_NodeMap, _SessionMap]:
        state = json.loads(text)
        if not isinstance(state, dict):
            raise ValueError("library document is not a JSON object")
        nodes = {
            nid: MemoryNode.model_validate(node)
            for nid, node in state.get("nodes", [])
        }
        sessions = {
            sid: ReasoningSession.model_validate(session)
            for sid, session in state.get("sessions", [])
        }
        return nodes, sessions

    async def _read_library(self, name: str) -> tuple[_NodeMap, _SessionMap]:
        path = self._library_path(name)
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return {}, {}
        except OSError as exc:
            logger.error("Failed to read memory library %s: %s", path, exc)
            return {}, {}

        try:
            nodes, sessions = self._decode(text)
        except (ValueError, TypeError) as exc:
            logger.warning("Memory library %s is corrupt, starting empty: %s", path, exc)
            return {}, {}

        logger.info(
            "Loaded %d memory nodes and %d sessions from library %s",
            len(nodes), len(sessions), name,
        )
        return nodes, sessions

    @staticmethod
    async def _modified_at(path: Path) -> datetime | None:
        try:
            stat = await asyncio.to_thread(path.stat)
        except OSError:
            return None
        return datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)


def _isoformat(moment: datetime | None) -> str | None:
    return moment.isoformat() if moment is not None else None
