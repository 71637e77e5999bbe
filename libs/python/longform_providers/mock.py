"""Deterministic mock backend for tests and offline development."""

from __future__ import annotations

from .base import LLMProvider, ProviderCapabilities, ProviderRequest, ProviderResponse
from .config import ProviderConfig, mock_provider_config

DEFAULT_TEXT = "Mock response generated for testing."
MOCK_OUTLINE = (
    "Introduction",
    "Background",
    "Analysis",
    "Discussion",
    "Conclusion",
)


class MockProvider(LLMProvider):
    name = "mock"

    def __init__(self, config: ProviderConfig | None = None) -> None:
        self._config = config or mock_provider_config()

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            max_input_tokens=32000,
            max_output_tokens=2000,
        )

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        if request.metadata.get("stage") == "planning":
            text = "\n".join(f"{index}. {title}" for index, title in enumerate(MOCK_OUTLINE, 1))
        else:
            text = f"{DEFAULT_TEXT}\nPrompt: {request.prompt[:80]}"
        return ProviderResponse(
            text=text,
            raw={"mock": True, "payload": text},
            model="mock",
            prompt_tokens=len(request.prompt.split()),
            completion_tokens=len(text.split()),
            cost_usd=0.0,
            latency_ms=1.0,
        )
