"""Logging and metrics helpers shared by the longform services."""

from .logging import log_context, setup_logging
from .metrics import (
    observe_backend_failure,
    observe_provider_response,
    observe_section_outcome,
    observe_stage_duration,
    setup_fastapi_metrics,
)

__all__ = [
    "setup_logging",
    "log_context",
    "setup_fastapi_metrics",
    "observe_backend_failure",
    "observe_provider_response",
    "observe_section_outcome",
    "observe_stage_duration",
]
