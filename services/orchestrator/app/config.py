"""Environment-driven settings for the orchestration service."""

from __future__ import annotations

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field, model_validator

_ENV_FIELDS = {
    "LONGFORM_SECTION_DELAY_SECONDS": "section_delay_seconds",
    "LONGFORM_MIN_SECTIONS": "min_sections",
    "LONGFORM_MAX_SECTIONS": "max_sections",
    "LONGFORM_BACKEND_TIMEOUT_SECONDS": "backend_timeout_seconds",
    "LONGFORM_PLANNER_BACKEND": "planner_backend",
    "LONGFORM_REVIEWER_BACKEND": "reviewer_backend",
    "CONTEXT_TOKEN_LIMIT": "context_token_limit",
    "REDIS_URL": "redis_url",
}


class OrchestratorConfig(BaseModel):
    section_delay_seconds: float = Field(2.0, ge=0, description="Pause between sections")
    min_sections: int = Field(5, ge=1)
    max_sections: int = Field(15, ge=1)
    backend_timeout_seconds: Optional[float] = Field(120.0, gt=0)
    planner_backend: Optional[str] = Field(
        None, description="Backend used for outlining; first candidate when unset"
    )
    reviewer_backend: Optional[str] = Field(
        None, description="Backend used for review notes; first candidate when unset"
    )
    context_token_limit: int = Field(12000, ge=256)
    redis_url: Optional[str] = None
    service_name: str = "orchestrator"

    @model_validator(mode="after")
    def validate_section_bounds(self) -> "OrchestratorConfig":
        if self.min_sections > self.max_sections:
            raise ValueError("min_sections cannot exceed max_sections")
        return self


def load_orchestrator_config(environ: Mapping[str, str] | None = None) -> OrchestratorConfig:
    """Build an :class:`OrchestratorConfig` from environment variables."""

    env = os.environ if environ is None else environ
    values = {field: env[name] for name, field in _ENV_FIELDS.items() if env.get(name)}
    return OrchestratorConfig.model_validate(values)
