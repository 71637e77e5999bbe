"""Scripted backends for exercising the pipeline without network calls."""

from __future__ import annotations

import asyncio
from typing import Callable, List, Optional, Union

from longform_providers.base import (
    LLMProvider,
    ProviderCapabilities,
    ProviderRequest,
    ProviderResponse,
)
from longform_providers.exceptions import ProviderError

Reply = Union[str, Exception]


class ScriptedProvider(LLMProvider):
    """Answer each request from ``reply`` (a fixed value or a callable).

    Exceptions returned by ``reply`` are raised instead of answered, and every
    request is kept in ``requests`` so tests can inspect the prompts.
    """

    def __init__(
        self,
        name: str,
        reply: Union[Reply, Callable[[ProviderRequest], Reply]] = "Generated section text.",
        *,
        eu_hosted: bool = False,
        delay: float = 0.0,
    ) -> None:
        self.name = name
        self._reply = reply
        self._eu_hosted = eu_hosted
        self._delay = delay
        self.requests: List[ProviderRequest] = []

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(max_output_tokens=4000, eu_hosted=self._eu_hosted)

    @property
    def stages(self) -> List[Optional[str]]:
        return [request.metadata.get("stage") for request in self.requests]

    async def generate(self, request: ProviderRequest) -> ProviderResponse:
        self.requests.append(request)
        if self._delay:
            await asyncio.sleep(self._delay)
        reply = self._reply(request) if callable(self._reply) else self._reply
        if isinstance(reply, Exception):
            raise reply
        return ProviderResponse(
            text=reply,
            raw={"scripted": True},
            model=f"{self.name}-model",
            prompt_tokens=len(request.prompt.split()),
            completion_tokens=len(reply.split()),
            cost_usd=0.0,
            latency_ms=1.0,
        )


def outline_then(outline: str, section_text: str = "Generated section text.") -> Callable[[ProviderRequest], Reply]:
    """Reply with ``outline`` to planning calls and ``section_text`` to everything else."""

    def reply(request: ProviderRequest) -> Reply:
        if request.metadata.get("stage") == "planning":
            return outline
        return section_text

    return reply


def always_fail(message: str = "backend down") -> Callable[[ProviderRequest], Reply]:
    def reply(request: ProviderRequest) -> Reply:
        return ProviderError(message)

    return reply
