"""FastAPI entrypoint for the document orchestrator."""

from __future__ import annotations

import logging
import re
from typing import List
from uuid import UUID

from fastapi import BackgroundTasks, Depends, FastAPI, HTTPException, Query, Request, Response, status
from fastapi.responses import JSONResponse

from longform_observability import log_context, setup_fastapi_metrics, setup_logging
from longform_providers.exceptions import UnknownBackendError

from .errors import (
    ConcurrentRunError,
    EmptyDocumentError,
    InvalidTransitionError,
    OrchestratorError,
    ProjectNotFoundError,
    SectionNotFoundError,
)
from .export import RENDERERS, resolve_format
from .flows import run_document_flow
from .models import (
    AssignBackendRequest,
    CreateProjectRequest,
    DocumentRunRequest,
    DocumentRunResponse,
    EditSectionRequest,
    ProjectSummary,
    ProjectView,
)
from .orchestrator import DocumentOrchestrator
from .providers import build_orchestrator

SERVICE_NAME = "orchestrator"
setup_logging(SERVICE_NAME)
logger = logging.getLogger(__name__)

HTTP_UNPROCESSABLE = 422

_ERROR_STATUS = {
    ProjectNotFoundError: status.HTTP_404_NOT_FOUND,
    SectionNotFoundError: status.HTTP_404_NOT_FOUND,
    ConcurrentRunError: status.HTTP_409_CONFLICT,
    InvalidTransitionError: status.HTTP_409_CONFLICT,
    EmptyDocumentError: HTTP_UNPROCESSABLE,
    UnknownBackendError: HTTP_UNPROCESSABLE,
}


def get_orchestrator(request: Request) -> DocumentOrchestrator:
    return request.app.state.orchestrator


def _view(orchestrator: DocumentOrchestrator, project) -> ProjectView:
    return ProjectView.from_project(project, running=orchestrator.is_running(project.id))


async def _run_in_background(orchestrator: DocumentOrchestrator, project_id: UUID, resume: bool) -> None:
    with log_context(project_id=str(project_id)):
        try:
            if resume:
                await orchestrator.resume(project_id)
            else:
                await orchestrator.run(project_id)
        except OrchestratorError as exc:
            logger.warning("Background run rejected", extra={"error": str(exc)})


def create_app(orchestrator: DocumentOrchestrator | None = None) -> FastAPI:
    app = FastAPI(title="Longform Document Orchestrator", version="0.1.0")
    app.state.orchestrator = orchestrator or build_orchestrator()
    setup_fastapi_metrics(app, service_name=SERVICE_NAME)

    async def _domain_error(request: Request, exc: Exception) -> JSONResponse:
        code = next(
            (value for error_type, value in _ERROR_STATUS.items() if isinstance(exc, error_type)),
            status.HTTP_500_INTERNAL_SERVER_ERROR,
        )
        return JSONResponse(status_code=code, content={"detail": str(exc)})

    for error_type in _ERROR_STATUS:
        app.add_exception_handler(error_type, _domain_error)

    @app.get("/health", tags=["health"])
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/backends", tags=["orchestrator"])
    async def backends(orch: DocumentOrchestrator = Depends(get_orchestrator)) -> dict[str, List[str]]:
        gateway = orch.gateway
        return {"candidates": gateway.candidates, "eu_hosted": gateway.candidates_for(eu_only=True)}

    @app.post(
        "/projects",
        response_model=ProjectView,
        status_code=status.HTTP_201_CREATED,
        tags=["projects"],
    )
    async def create_project(
        payload: CreateProjectRequest,
        background_tasks: BackgroundTasks,
        orch: DocumentOrchestrator = Depends(get_orchestrator),
    ) -> ProjectView:
        project = await orch.create(payload.prompt, payload.settings)
        if payload.auto_run:
            background_tasks.add_task(_run_in_background, orch, project.id, False)
        return _view(orch, project)

    @app.get("/projects", response_model=List[ProjectSummary], tags=["projects"])
    async def list_projects(orch: DocumentOrchestrator = Depends(get_orchestrator)) -> List[ProjectSummary]:
        return [ProjectSummary.from_project(project) for project in await orch.list_projects()]

    @app.get("/projects/{project_id}", response_model=ProjectView, tags=["projects"])
    async def get_project(
        project_id: UUID, orch: DocumentOrchestrator = Depends(get_orchestrator)
    ) -> ProjectView:
        return _view(orch, await orch.get_project(project_id))

    @app.post(
        "/projects/{project_id}/run",
        response_model=ProjectView,
        status_code=status.HTTP_202_ACCEPTED,
        tags=["projects"],
    )
    async def run_project(
        project_id: UUID,
        background_tasks: BackgroundTasks,
        orch: DocumentOrchestrator = Depends(get_orchestrator),
    ) -> ProjectView:
        project = await orch.get_project(project_id)
        if orch.is_running(project_id):
            raise ConcurrentRunError(f"Project {project_id} is already running")
        background_tasks.add_task(_run_in_background, orch, project_id, False)
        return _view(orch, project)

    @app.post("/projects/{project_id}/pause", response_model=ProjectView, tags=["projects"])
    async def pause_project(
        project_id: UUID, orch: DocumentOrchestrator = Depends(get_orchestrator)
    ) -> ProjectView:
        return _view(orch, await orch.pause(project_id))

    @app.post(
        "/projects/{project_id}/resume",
        response_model=ProjectView,
        status_code=status.HTTP_202_ACCEPTED,
        tags=["projects"],
    )
    async def resume_project(
        project_id: UUID,
        background_tasks: BackgroundTasks,
        orch: DocumentOrchestrator = Depends(get_orchestrator),
    ) -> ProjectView:
        project = await orch.get_project(project_id)
        background_tasks.add_task(_run_in_background, orch, project_id, True)
        return _view(orch, project)

    @app.post(
        "/projects/{project_id}/sections/{section_id}/regenerate",
        response_model=ProjectView,
        tags=["sections"],
    )
    async def regenerate_section(
        project_id: UUID, section_id: UUID, orch: DocumentOrchestrator = Depends(get_orchestrator)
    ) -> ProjectView:
        return _view(orch, await orch.regenerate_section(project_id, section_id))

    @app.post(
        "/projects/{project_id}/sections/{section_id}/accept",
        response_model=ProjectView,
        tags=["sections"],
    )
    async def accept_section(
        project_id: UUID, section_id: UUID, orch: DocumentOrchestrator = Depends(get_orchestrator)
    ) -> ProjectView:
        return _view(orch, await orch.accept_section(project_id, section_id))

    @app.post(
        "/projects/{project_id}/sections/{section_id}/edit",
        response_model=ProjectView,
        tags=["sections"],
    )
    async def edit_section(
        project_id: UUID,
        section_id: UUID,
        payload: EditSectionRequest,
        orch: DocumentOrchestrator = Depends(get_orchestrator),
    ) -> ProjectView:
        try:
            project = await orch.edit_section(project_id, section_id, payload.content)
        except ValueError as exc:
            raise HTTPException(status_code=HTTP_UNPROCESSABLE, detail=str(exc)) from exc
        return _view(orch, project)

    @app.put(
        "/projects/{project_id}/sections/{section_id}/backend",
        response_model=ProjectView,
        tags=["sections"],
    )
    async def assign_backend(
        project_id: UUID,
        section_id: UUID,
        payload: AssignBackendRequest,
        orch: DocumentOrchestrator = Depends(get_orchestrator),
    ) -> ProjectView:
        return _view(orch, await orch.assign_backend(project_id, section_id, payload.backend_id))

    @app.get("/projects/{project_id}/export", tags=["projects"])
    async def export_project(
        project_id: UUID,
        fmt: str = Query("txt", alias="format"),
        orch: DocumentOrchestrator = Depends(get_orchestrator),
    ) -> Response:
        try:
            export_format = resolve_format(fmt)
        except ValueError as exc:
            raise HTTPException(
                status_code=HTTP_UNPROCESSABLE,
                detail=f"Unsupported export format: {fmt}",
            ) from exc
        project = await orch.get_project(project_id)
        payload = await orch.export(project_id, export_format)
        renderer = RENDERERS[export_format]
        filename = re.sub(r"[^A-Za-z0-9]+", "-", project.title).strip("-").lower() or "document"
        return Response(
            content=payload,
            media_type=renderer.media_type,
            headers={"Content-Disposition": f'attachment; filename="{filename}.{renderer.extension}"'},
        )

    @app.post("/documents/run", response_model=DocumentRunResponse, tags=["orchestrator"])
    async def run_document(payload: DocumentRunRequest) -> DocumentRunResponse:
        with log_context(stage="pipeline"):
            logger.info("Dispatching document flow", extra={"prompt_length": len(payload.prompt)})
        return await run_document_flow(payload)

    return app


app = create_app()
