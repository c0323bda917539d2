"""Provider registry: text generation through LangChain chat models.

The reasoning core treats generation as an opaque async capability:
``generate(provider, model_name, prompt, system_message, api_key) -> str``.
This module realises it with LangChain chat model classes that are
resolved by import path when the registry is built.  A provider whose
integration package is not installed is logged and left unregistered.

Tests inject ``model_factory`` to replace model construction entirely.
"""

from __future__ import annotations

import importlib
import logging
from dataclasses import dataclass, field
from typing import Any, Callable

from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage

logger = logging.getLogger(__name__)

# (provider, model_name, api_key) -> langchain BaseChatModel
ModelFactory = Callable[[str, str, "str | None"], Any]


class ProviderError(Exception):
    """Raised for an unsupported provider or a failed generation call."""


@dataclass(frozen=True)
class ProviderSpec:
    """Where to find a provider's chat model and how it takes its key."""

    name: str
    module: str
    class_name: str
    api_key_param: str = "api_key"
    models: tuple[str, ...] = field(default_factory=tuple)


DEFAULT_PROVIDERS: tuple[ProviderSpec, ...] = (
    ProviderSpec(
        name="anthropic",
        module="langchain_anthropic",
        class_name="ChatAnthropic",
        models=("claude-3-5-sonnet-latest", "claude-3-5-haiku-latest", "claude-3-opus-latest"),
    ),
    ProviderSpec(
        name="openai",
        module="langchain_openai",
        class_name="ChatOpenAI",
        models=("gpt-4o", "gpt-4o-mini", "gpt-4-turbo"),
    ),
    ProviderSpec(
        name="google",
        module="langchain_google_genai",
        class_name="ChatGoogleGenerativeAI",
        api_key_param="google_api_key",
        models=("gemini-2.0-flash", "gemini-1.5-pro", "gemini-1.5-flash"),
    ),
)


def message_text(response: Any) -> str:
    """Extract plain text from a chat model response."""
    content = response.content if hasattr(response, "content") else response
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return str(content)


class ProviderRegistry:
    """Registered LangChain providers and their known model names.

    Args:
        specs: Providers to register, in order.
        model_factory: Optional override for model construction.  When
            given, every spec is registered without importing anything.
    """

    def __init__(
        self,
        specs: tuple[ProviderSpec, ...] = DEFAULT_PROVIDERS,
        model_factory: ModelFactory | None = None,
    ) -> None:
        self._specs: dict[str, ProviderSpec] = {}
        self._classes: dict[str, Any] = {}
        self._model_factory = model_factory
        for spec in specs:
            self.register(spec)

    # ── Registration ─────────────────────────────────────────────────────

    def register(self, spec: ProviderSpec) -> bool:
        """Register *spec*.  Returns False if its chat model class cannot be loaded."""
        if self._model_factory is None:
            try:
                module = importlib.import_module(spec.module)
                self._classes[spec.name] = getattr(module, spec.class_name)
            except (ImportError, AttributeError) as exc:
                logger.warning("Failed to register provider %s: %s", spec.name, exc)
                return False
        self._specs[spec.name] = spec
        logger.info("Registered provider: %s", spec.name)
        return True

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def providers(self) -> list[str]:
        return list(self._specs)

    def list_models(self, provider: str) -> list[str]:
        return list(self._spec(provider).models)

    # ── Generation ───────────────────────────────────────────────────────

    async def generate(
        self,
        provider: str,
        model_name: str,
        prompt: str,
        system_message: str | None = None,
        api_key: str | None = None,
    ) -> str:
        """Generate text with *model_name* from *provider*.

        Raises:
            ProviderError: If the provider is unknown or the call fails.
        """
        spec = self._spec(provider)
        messages: list[BaseMessage] = []
        if system_message:
            messages.append(SystemMessage(content=system_message))
        messages.append(HumanMessage(content=prompt))

        try:
            model = self._build_model(spec, model_name, api_key)
            response = await model.ainvoke(messages)
        except Exception as exc:
            logger.error("Generation with %s/%s failed: %s", provider, model_name, exc)
            raise ProviderError(f"Generation with {provider}/{model_name} failed: {exc}") from exc

        text = message_text(response)
        logger.info("Generated %d chars with %s/%s", len(text), provider, model_name)
        return text

    # ── Internals ────────────────────────────────────────────────────────

    def _spec(self, provider: str) -> ProviderSpec:
        spec = self._specs.get(provider)
        if spec is None:
            raise ProviderError(f"Provider '{provider}' is not supported.")
        return spec

    def _build_model(self, spec: ProviderSpec, model_name: str, api_key: str | None) -> Any:
        if self._model_factory is not None:
            return self._model_factory(spec.name, model_name, api_key)
        kwargs: dict[str, Any] = {"model": model_name}
        if api_key:
            kwargs[spec.api_key_param] = api_key
        return self._classes[spec.name](**kwargs)
