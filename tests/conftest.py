"""Shared fixtures: temporary memory directories and a fake chat model."""

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from advanced_reason.config import Settings
from advanced_reason.core.reasoning_engine import ReasoningEngine
from advanced_reason.providers.registry import ProviderRegistry
from advanced_reason.store.memory_store import MemoryStore


def mock_llm(text: str = "generated answer") -> MagicMock:
    """A chat model double whose ainvoke returns a message with *text*."""
    llm = MagicMock()
    llm.ainvoke = AsyncMock(return_value=SimpleNamespace(content=text))
    return llm


@pytest.fixture
def memory_dir(tmp_path: Path) -> Path:
    return tmp_path / "memory"


@pytest.fixture
def settings(memory_dir: Path) -> Settings:
    return Settings(memory_dir=str(memory_dir), disable_reasoning_logging=True)


@pytest.fixture
def llm() -> MagicMock:
    return mock_llm()


@pytest.fixture
def providers(llm: MagicMock) -> ProviderRegistry:
    return ProviderRegistry(model_factory=lambda provider, model, api_key: llm)


@pytest_asyncio.fixture
async def store(memory_dir: Path):
    memory = MemoryStore(memory_dir)
    await memory.open()
    yield memory
    await memory.close()


@pytest_asyncio.fixture
async def engine(store: MemoryStore) -> ReasoningEngine:
    return ReasoningEngine(store, log_thoughts=False)
