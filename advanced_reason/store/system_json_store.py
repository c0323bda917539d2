"""File-backed store for named system JSON documents.

One document per file: ``<memory_dir>/system_json/<name>.json``.  Unlike
library snapshots, these writes are explicit user actions, so they are
awaited and failures surface to the caller as SystemJsonError.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from advanced_reason.core.relevance import coverage
from advanced_reason.domain.system_json import SystemJsonDocument
from advanced_reason.foundation.clock import utc_now
from advanced_reason.store.memory_store import LIBRARY_NAME_PATTERN
from advanced_reason.store.persistence import write_atomic

logger = logging.getLogger(__name__)


class SystemJsonError(ValueError):
    """Raised for an illegal document name or a document that does not exist."""


class SystemJsonStore:
    """Create, fetch, list and search system JSON documents."""

    def __init__(self, memory_dir: Path | str) -> None:
        self._dir = Path(memory_dir) / "system_json"

    # ── Public API ───────────────────────────────────────────────────────

    async def create(
        self,
        name: str,
        domain: str,
        description: str,
        data: dict[str, Any],
        tags: list[str] | None = None,
    ) -> SystemJsonDocument:
        """Store a document, replacing one with the same name.

        ``created_at`` survives a replacement; ``updated_at`` does not.
        """
        self._check_name(name)
        existing = await self._load(name)
        try:
            doc = SystemJsonDocument(
                name=name,
                domain=domain,
                description=description,
                data=data,
                tags=tags or [],
                created_at=existing.created_at if existing else utc_now(),
                updated_at=utc_now(),
            )
        except ValidationError as exc:
            raise SystemJsonError(f"Invalid system JSON '{name}': {exc.errors()[0]['msg']}") from exc

        try:
            await asyncio.to_thread(
                write_atomic, self._path(name), doc.model_dump_json(indent=2),
            )
        except OSError as exc:
            raise SystemJsonError(f"Could not save system JSON '{name}': {exc}") from exc

        logger.info("%s system JSON %s (%s)", "Updated" if existing else "Created", name, domain)
        return doc

    async def get(self, name: str) -> SystemJsonDocument:
        self._check_name(name)
        doc = await self._load(name)
        if doc is None:
            raise SystemJsonError(f"System JSON '{name}' not found")
        return doc

    async def list_documents(self) -> list[SystemJsonDocument]:
        docs = []
        for path in await asyncio.to_thread(self._files):
            doc = await self._load(path.stem)
            if doc is not None:
                docs.append(doc)
        return docs

    async def search(self, query: str) -> list[tuple[SystemJsonDocument, float]]:
        """Documents matching any word of *query*, best coverage first."""
        hits = []
        for doc in await self.list_documents():
            score = coverage(query, doc.search_text())
            if score > 0.0:
                hits.append((doc, score))
        hits.sort(key=lambda pair: pair[1], reverse=True)
        return hits

    # ── Internals ────────────────────────────────────────────────────────

    @staticmethod
    def _check_name(name: Any) -> None:
        if not isinstance(name, str) or not LIBRARY_NAME_PATTERN.fullmatch(name):
            raise SystemJsonError(
                f"Invalid system JSON name {name!r}: use only letters, numbers, underscores and hyphens"
            )

    def _path(self, name: str) -> Path:
        return self._dir / f"{name}.json"

    def _files(self) -> list[Path]:
        if not self._dir.is_dir():
            return []
        return sorted(p for p in self._dir.glob("*.json") if LIBRARY_NAME_PATTERN.fullmatch(p.stem))

    async def _load(self, name: str) -> SystemJsonDocument | None:
        path = self._path(name)
        try:
            text = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            logger.error("Failed to read system JSON %s: %s", path, exc)
            return None
        try:
            return SystemJsonDocument.model_validate(json.loads(text))
        except ValueError as exc:
            logger.warning("Skipping corrupt system JSON %s: %s", path, exc)
            return None
