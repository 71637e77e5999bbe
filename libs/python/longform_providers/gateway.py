"""Backend gateway: one call surface over every registered backend."""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, Mapping

from longform_observability import observe_backend_failure, observe_provider_response

from .base import LLMProvider, ProviderRequest
from .config import ProviderConfig
from .exceptions import (
    ProviderConfigError,
    ProviderError,
    ProviderResponseError,
    ProviderTimeoutError,
    UnknownBackendError,
)
from .factory import ProviderFactory

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 120.0


class ModelGateway:
    """Route ``generate`` calls to backends by id.

    Every failure mode (unknown id, timeout, SDK error, empty text) surfaces
    as a :class:`ProviderError` so callers can treat them uniformly.
    """

    def __init__(
        self,
        providers: Mapping[str, LLMProvider],
        *,
        timeout_seconds: float | None = DEFAULT_TIMEOUT_SECONDS,
        service_name: str = "orchestrator",
    ) -> None:
        self._providers: dict[str, LLMProvider] = dict(providers)
        self._timeout_seconds = timeout_seconds
        self._service_name = service_name

    @classmethod
    def from_configs(cls, configs: Iterable[ProviderConfig], **kwargs) -> "ModelGateway":
        providers: dict[str, LLMProvider] = {}
        for config in configs:
            try:
                providers[config.name] = ProviderFactory.create(config)
            except ProviderConfigError as exc:
                logger.warning(
                    "Skipping unsupported backend",
                    extra={"backend": config.name, "reason": str(exc)},
                )
        return cls(providers, **kwargs)

    @property
    def candidates(self) -> list[str]:
        return list(self._providers)

    def candidates_for(self, *, eu_only: bool = False) -> list[str]:
        if not eu_only:
            return self.candidates
        return [
            backend_id
            for backend_id, provider in self._providers.items()
            if provider.capabilities().eu_hosted
        ]

    def has(self, backend_id: str | None) -> bool:
        return backend_id is not None and backend_id in self._providers

    async def generate(
        self,
        backend_id: str,
        system_instruction: str | None,
        user_instruction: str,
        *,
        stage: str = "writing",
        temperature: float | None = None,
        max_output_tokens: int | None = None,
    ) -> str:
        """Return stripped, non-empty text from ``backend_id`` or raise ``ProviderError``."""

        provider = self._providers.get(backend_id)
        if provider is None:
            observe_backend_failure(
                stage=stage, provider=backend_id, service_name=self._service_name, reason="unknown"
            )
            raise UnknownBackendError(f"Backend not registered: {backend_id}")

        request = ProviderRequest(
            prompt=user_instruction,
            system_prompt=system_instruction,
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            metadata={"stage": stage, "backend": backend_id},
        )

        try:
            if self._timeout_seconds:
                response = await asyncio.wait_for(
                    provider.generate(request), timeout=self._timeout_seconds
                )
            else:
                response = await provider.generate(request)
        except asyncio.TimeoutError as exc:
            observe_backend_failure(
                stage=stage, provider=backend_id, service_name=self._service_name, reason="timeout"
            )
            raise ProviderTimeoutError(
                f"{backend_id} did not respond within {self._timeout_seconds}s"
            ) from exc
        except ProviderError:
            observe_backend_failure(
                stage=stage, provider=backend_id, service_name=self._service_name, reason="provider"
            )
            raise
        except Exception as exc:
            observe_backend_failure(
                stage=stage, provider=backend_id, service_name=self._service_name, reason="error"
            )
            raise ProviderError(f"{backend_id} call failed: {exc}") from exc

        observe_provider_response(
            stage=stage,
            provider=backend_id,
            service_name=self._service_name,
            response=response,
        )

        text = (response.text or "").strip()
        if not text:
            observe_backend_failure(
                stage=stage, provider=backend_id, service_name=self._service_name, reason="empty"
            )
            raise ProviderResponseError(f"Empty response from {backend_id}")

        logger.debug(
            "Backend call succeeded",
            extra={
                "backend": backend_id,
                "stage": stage,
                "prompt_tokens": response.prompt_tokens,
                "completion_tokens": response.completion_tokens,
                "latency_ms": response.latency_ms or 0,
            },
        )
        return text
