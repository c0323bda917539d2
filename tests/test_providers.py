"""Tests for the LangChain provider registry."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import HumanMessage, SystemMessage

from advanced_reason.providers.registry import (
    DEFAULT_PROVIDERS,
    ProviderError,
    ProviderRegistry,
    ProviderSpec,
    message_text,
)

from tests.conftest import mock_llm


class TestRegistration:
    def test_factory_registers_every_default(self, providers: ProviderRegistry) -> None:
        assert providers.providers == [spec.name for spec in DEFAULT_PROVIDERS]

    def test_unimportable_provider_is_skipped(self) -> None:
        registry = ProviderRegistry(specs=(
            ProviderSpec(name="ghost", module="no_such_langchain_module", class_name="Chat"),
        ))
        assert registry.providers == []

    def test_list_models(self, providers: ProviderRegistry) -> None:
        assert "gpt-4o" in providers.list_models("openai")

    def test_list_models_unknown_provider(self, providers: ProviderRegistry) -> None:
        with pytest.raises(ProviderError, match="not supported"):
            providers.list_models("acme")


class TestGenerate:
    @pytest.mark.asyncio
    async def test_generate_sends_system_and_prompt(self, providers: ProviderRegistry, llm: MagicMock) -> None:
        text = await providers.generate("anthropic", "claude-3-5-haiku-latest", "Hi", system_message="Be brief")
        assert text == "generated answer"
        messages = llm.ainvoke.await_args.args[0]
        assert isinstance(messages[0], SystemMessage)
        assert isinstance(messages[1], HumanMessage)
        assert messages[1].content == "Hi"

    @pytest.mark.asyncio
    async def test_generate_without_system_message(self, providers: ProviderRegistry, llm: MagicMock) -> None:
        await providers.generate("openai", "gpt-4o", "Hi")
        messages = llm.ainvoke.await_args.args[0]
        assert len(messages) == 1

    @pytest.mark.asyncio
    async def test_factory_receives_key(self) -> None:
        calls = []

        def factory(provider, model, api_key):
            calls.append((provider, model, api_key))
            return mock_llm("ok")

        registry = ProviderRegistry(model_factory=factory)
        await registry.generate("google", "gemini-2.0-flash", "Hi", api_key="secret")
        assert calls == [("google", "gemini-2.0-flash", "secret")]

    @pytest.mark.asyncio
    async def test_model_failure_becomes_provider_error(self) -> None:
        llm = MagicMock()
        llm.ainvoke = AsyncMock(side_effect=RuntimeError("rate limited"))
        registry = ProviderRegistry(model_factory=lambda *args: llm)
        with pytest.raises(ProviderError, match="rate limited"):
            await registry.generate("openai", "gpt-4o", "Hi")

    @pytest.mark.asyncio
    async def test_unknown_provider(self, providers: ProviderRegistry) -> None:
        with pytest.raises(ProviderError, match="not supported"):
            await providers.generate("acme", "m", "Hi")


class TestMessageText:
    def test_plain_string(self) -> None:
        assert message_text(SimpleNamespace(content="hello")) == "hello"

    def test_content_blocks(self) -> None:
        blocks = [{"type": "text", "text": "a"}, {"type": "image", "url": "x"}, "b"]
        assert message_text(SimpleNamespace(content=blocks)) == "ab"
