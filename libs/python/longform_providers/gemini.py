"""Google Gemini backend implementation."""

from __future__ import annotations

import time
from typing import Any, Dict

from google import genai
from google.genai import types

from .base import LLMProvider, ProviderCapabilities, ProviderRequest, ProviderResponse
from .config import ProviderConfig
from .exceptions import ProviderResponseError
from .pricing import estimate_cost


class GeminiProvider(LLMProvider):
    name = "gemini"

    def __init__(self, config: ProviderConfig) -> None:
        self._config = config
        self._client = genai.Client(api_key=config.api_key)

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(
            max_input_tokens=None,
            max_output_tokens=self._config.settings.max_output_tokens,
        )

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        temperature = (
            request.temperature
            if request.temperature is not None
            else self._config.settings.temperature
        )

        generation_config: Dict[str, Any] = {"temperature": temperature}
        if request.system_prompt:
            generation_config["system_instruction"] = request.system_prompt

        if request.top_p is not None:
            generation_config["top_p"] = request.top_p
        elif self._config.settings.top_p is not None:
            generation_config["top_p"] = self._config.settings.top_p

        max_output = (
            request.max_output_tokens
            if request.max_output_tokens is not None
            else self._config.settings.max_output_tokens
        )
        if max_output:
            generation_config["max_output_tokens"] = max_output

        start = time.perf_counter()
        response = await self._client.aio.models.generate_content(
            model=self._config.model,
            contents=request.prompt,
            config=types.GenerateContentConfig(**generation_config),
        )
        latency_ms = (time.perf_counter() - start) * 1000

        try:
            text = response.text or ""
        except (AttributeError, ValueError) as err:
            raise ProviderResponseError("Gemini response missing text content") from err

        usage = getattr(response, "usage_metadata", None)
        prompt_tokens = getattr(usage, "prompt_token_count", 0) or 0 if usage else 0
        completion_tokens = getattr(usage, "candidates_token_count", 0) or 0 if usage else 0
        cost_usd = estimate_cost(
            provider=self._config.name,
            model=self._config.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )

        return ProviderResponse(
            text=text,
            raw=response,
            model=self._config.model,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            cost_usd=cost_usd,
            latency_ms=latency_ms,
        )
