"""Prefect flow running a document end to end: plan, write, finalise, export."""

from __future__ import annotations

import logging
from time import perf_counter

from prefect import flow

from longform_observability import log_context, observe_stage_duration

from .config import load_orchestrator_config
from .models import DocumentRunRequest, DocumentRunResponse, ProjectView
from .providers import build_gateway, build_orchestrator

logger = logging.getLogger(__name__)
SERVICE_NAME = "orchestrator"


@flow(name="longform-document-flow", version="0.1.0")
async def run_document_flow(payload: DocumentRunRequest) -> DocumentRunResponse:
    config = load_orchestrator_config()
    gateway = build_gateway(config, backends=payload.backends)
    orchestrator = build_orchestrator(config, gateway=gateway)

    start = perf_counter()
    project = await orchestrator.create(payload.prompt, payload.settings)
    with log_context(project_id=str(project.id), stage="pipeline"):
        logger.info(
            "Starting document flow",
            extra={"section_count": len(project.sections), "backends": gateway.candidates},
        )
        project = await orchestrator.run(project.id)

        export_bytes = None
        if payload.export_format:
            export_bytes = len(await orchestrator.export(project.id, payload.export_format))

        observe_stage_duration(
            "pipeline",
            perf_counter() - start,
            service_name=SERVICE_NAME,
            status=project.status.value,
        )
        logger.info(
            "Document flow finished",
            extra={
                "status": project.status.value,
                "word_count": project.word_count,
                "progress": project.progress,
            },
        )

    return DocumentRunResponse(
        project=ProjectView.from_project(project),
        export_format=payload.export_format,
        export_bytes=export_bytes,
    )
