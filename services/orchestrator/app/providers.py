"""Wiring helpers that build the gateway and orchestrator from configuration."""

from __future__ import annotations

import logging

from longform_providers import ModelGateway, load_candidate_configs

from .config import OrchestratorConfig, load_orchestrator_config
from .orchestrator import DocumentOrchestrator, ProgressSink
from .store import ProjectStore, build_project_store

logger = logging.getLogger(__name__)


def build_gateway(
    config: OrchestratorConfig | None = None,
    *,
    backends: str | None = None,
) -> ModelGateway:
    """Create a gateway over the configured candidate backends (``LLM_BACKENDS``)."""

    config = config or load_orchestrator_config()
    gateway = ModelGateway.from_configs(
        load_candidate_configs(backends),
        timeout_seconds=config.backend_timeout_seconds,
        service_name=config.service_name,
    )
    if not gateway.candidates:
        logger.warning("No backends configured; sections will use template content")
    return gateway


def build_orchestrator(
    config: OrchestratorConfig | None = None,
    *,
    gateway: ModelGateway | None = None,
    store: ProjectStore | None = None,
    on_progress: ProgressSink | None = None,
) -> DocumentOrchestrator:
    config = config or load_orchestrator_config()
    return DocumentOrchestrator(
        gateway or build_gateway(config),
        store or build_project_store(config),
        config,
        on_progress=on_progress,
    )
