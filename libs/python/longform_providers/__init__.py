"""Unified backend abstraction for OpenAI, Gemini, DeepSeek and Mistral."""

from .base import LLMProvider, ProviderCapabilities, ProviderRequest, ProviderResponse
from .config import (
    ProviderConfig,
    ProviderSettings,
    load_candidate_configs,
    load_provider_config,
)
from .factory import ProviderFactory
from .gateway import ModelGateway
from .mock import MockProvider

__all__ = [
    "LLMProvider",
    "ProviderCapabilities",
    "ProviderRequest",
    "ProviderResponse",
    "ProviderConfig",
    "ProviderSettings",
    "load_candidate_configs",
    "load_provider_config",
    "ProviderFactory",
    "ModelGateway",
    "MockProvider",
]
