"""Configuration models and helpers for backend selection."""

from __future__ import annotations

import logging
import os
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ProviderConfigError

BACKENDS_ENV_VAR = "LLM_BACKENDS"
DEFAULT_BACKENDS = "mock"

logger = logging.getLogger(__name__)


class ProviderSettings(BaseModel):
    """Per-call default parameters."""

    temperature: float = Field(0.7, ge=0, le=2)
    max_output_tokens: int | None = Field(None, ge=16)
    top_p: float | None = Field(None, ge=0, le=1)


class ProviderConfig(BaseModel):
    """Configuration for a single backend instance."""

    model_config = ConfigDict(frozen=True)

    name: str
    api_key: str
    model: str
    base_url: str | None = None
    settings: ProviderSettings = Field(default_factory=ProviderSettings)


def mock_provider_config() -> ProviderConfig:
    return ProviderConfig(name="mock", api_key="mock", model="mock")


def load_provider_config(prefix: str) -> ProviderConfig:
    """Load configuration for one backend from environment variables.

    Args:
        prefix: Backend id, upper-cased to form the variable prefix.

    Environment variables used (assuming prefix "OPENAI"):
        OPENAI_API_KEY
        OPENAI_MODEL
        OPENAI_BASE_URL (optional)
        OPENAI_TEMPERATURE (optional)
        OPENAI_MAX_OUTPUT_TOKENS (optional)
        OPENAI_TOP_P (optional)

    Returns:
        ProviderConfig object populated from environment variables.

    Raises:
        ProviderConfigError: If required variables are missing or invalid.
    """

    provider_name = prefix.strip().lower()
    if provider_name == "mock":
        return mock_provider_config()

    env_prefix = provider_name.upper()

    def read_env(key: str, default: Any | None = None) -> Any:
        return os.getenv(f"{env_prefix}_{key}", default)

    api_key = read_env("API_KEY")
    model = read_env("MODEL")
    if not api_key or not model:
        raise ProviderConfigError(f"{env_prefix}_API_KEY or {env_prefix}_MODEL not configured")

    try:
        temperature = float(read_env("TEMPERATURE", 0.7))
    except ValueError as exc:
        raise ProviderConfigError(f"{env_prefix}_TEMPERATURE must be a float") from exc

    max_output_raw = read_env("MAX_OUTPUT_TOKENS")
    max_output_tokens = None
    if max_output_raw not in (None, ""):
        try:
            parsed_max = int(str(max_output_raw).strip())
        except (TypeError, ValueError) as exc:
            raise ProviderConfigError(
                f"{env_prefix}_MAX_OUTPUT_TOKENS must be a positive integer"
            ) from exc
        max_output_tokens = parsed_max if parsed_max > 0 else None

    top_p_raw = read_env("TOP_P", "")
    try:
        top_p = float(top_p_raw) if str(top_p_raw).strip() else None
    except ValueError as exc:
        raise ProviderConfigError(f"{env_prefix}_TOP_P must be a float between 0 and 1") from exc

    base_url = read_env("BASE_URL") or None

    settings = ProviderSettings(
        temperature=temperature,
        max_output_tokens=max_output_tokens,
        top_p=top_p,
    )
    return ProviderConfig(
        name=provider_name,
        api_key=api_key,
        model=model,
        base_url=base_url,
        settings=settings,
    )


def load_candidate_configs(raw: str | None = None) -> list[ProviderConfig]:
    """Resolve the ordered backend candidate list.

    ``raw`` defaults to the ``LLM_BACKENDS`` environment variable. Backends
    lacking credentials are skipped so the pipeline can still fall back to
    the remaining candidates (or to templates when none are left).
    """

    value = raw if raw is not None else os.getenv(BACKENDS_ENV_VAR, DEFAULT_BACKENDS)
    configs: list[ProviderConfig] = []
    seen: set[str] = set()
    for item in value.split(","):
        backend_id = item.strip().lower()
        if not backend_id or backend_id in seen:
            continue
        seen.add(backend_id)
        try:
            configs.append(load_provider_config(backend_id))
        except ProviderConfigError as exc:
            logger.warning(
                "Skipping unconfigured backend",
                extra={"backend": backend_id, "reason": str(exc)},
            )
    return configs
