"""Single-writer persistence queue for library snapshots.

Design notes:
    - Mutations never await a write.  They serialise the store's *current*
      state synchronously and hand ``(path, text)`` to the writer.
    - At most one snapshot per path is held in memory.  Scheduling a path
      that is already pending replaces its text in place; the path keeps
      its position in the FIFO of paths.
    - One background task drains the paths in order and writes whatever
      text is pending for each at that moment, so the last snapshot
      scheduled for a path is the last one written to it.
    - Write failures are logged and dropped.  Durability is best-effort and
      callers are never told a write failed.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def write_atomic(path: Path, text: str) -> None:
    """Write *text* to *path* through a temp file so readers never see half a file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    os.replace(tmp, path)


class SnapshotWriter:
    """Coalescing FIFO background writer for JSON snapshots.

    Must be used from inside a running event loop; the writer task is
    started lazily on the first scheduled write.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[Path] = asyncio.Queue()
        self._latest: dict[Path, str] = {}
        self._task: asyncio.Task | None = None
        self.completed_writes: int = 0
        self.failed_writes: int = 0

    # ── Public API ───────────────────────────────────────────────────────

    def start(self) -> None:
        if self._task is None or self._task.done():
            self._task = asyncio.get_running_loop().create_task(self._run())

    def schedule(self, path: Path, text: str) -> None:
        """Make *text* the pending snapshot for *path*.  Never blocks, never raises on I/O."""
        self.start()
        if path not in self._latest:
            self._queue.put_nowait(path)
        self._latest[path] = text

    @property
    def pending(self) -> int:
        """Number of paths with a snapshot not yet written."""
        return len(self._latest)

    async def flush(self) -> None:
        """Wait until every snapshot scheduled so far has been written (or failed)."""
        if self._task is None:
            return
        await self._queue.join()

    async def stop(self) -> None:
        await self.flush()
        if self._task is not None:
            self._task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._task
            self._task = None

    # ── Internals ────────────────────────────────────────────────────────

    async def _run(self) -> None:
        while True:
            path = await self._queue.get()
            text = self._latest.pop(path)
            try:
                await asyncio.to_thread(write_atomic, path, text)
                self.completed_writes += 1
            except Exception as exc:
                self.failed_writes += 1
                logger.error("Failed to persist snapshot to %s: %s", path, exc)
            finally:
                self._queue.task_done()
