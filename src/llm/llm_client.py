import logging
import os
from typing import Optional

from llm.providers.base import LLMProvider

logger = logging.getLogger(__name__)


def provider_from_env() -> LLMProvider:
    """Build the provider named by LLM_PROVIDER (openai, ollama or mock)."""
    name = os.getenv("LLM_PROVIDER", "openai").strip().lower()
    if name == "ollama":
        from llm.providers.ollama_provider import OllamaProvider
        return OllamaProvider()
    if name == "mock":
        from llm.providers.mock_provider import MockProvider
        return MockProvider()
    if name != "openai":
        raise RuntimeError(f"Unknown LLM_PROVIDER: {name}")
    from llm.providers.openai_provider import OpenAIProvider
    return OpenAIProvider()


class LLMClient:
    """Thin wrapper over a text-generation provider.

    The provider is resolved on first use, so a missing API key shows up
    as a failed ``complete`` call rather than a failed construction.
    """

    def __init__(self, provider: Optional[LLMProvider] = None):
        self._provider = provider

    @property
    def provider(self) -> LLMProvider:
        if self._provider is None:
            self._provider = provider_from_env()
        return self._provider

    def complete(self, system: str, user: str, temperature: float = 0.1) -> str:
        logger.debug("LLM request (temperature=%s): %r", temperature, user)
        content = self.provider.generate(
            system=system, user=user, temperature=temperature
        )
        logger.debug("LLM response: %r", content)
        return content or ""
