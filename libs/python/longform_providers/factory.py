"""Factory utilities for instantiating backends."""

from __future__ import annotations

from typing import Dict, Type

from .base import LLMProvider
from .config import ProviderConfig
from .exceptions import ProviderConfigError
from .gemini import GeminiProvider
from .mock import MockProvider
from .openai import DeepSeekProvider, MistralProvider, OpenAIProvider

PROVIDER_MAP: Dict[str, Type[LLMProvider]] = {
    "gemini": GeminiProvider,
    "openai": OpenAIProvider,
    "deepseek": DeepSeekProvider,
    "mistral": MistralProvider,
    "mock": MockProvider,
}


class ProviderFactory:
    """Factory for creating backends based on configuration."""

    @staticmethod
    def create(config: ProviderConfig) -> LLMProvider:
        provider_cls = PROVIDER_MAP.get(config.name.lower())
        if provider_cls is None:
            raise ProviderConfigError(f"Unknown provider: {config.name}")
        return provider_cls(config)
