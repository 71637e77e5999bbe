"""Project and section state machine driving the document pipeline."""

from __future__ import annotations

import asyncio
import inspect
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from time import perf_counter
from typing import AsyncIterator, Awaitable, Callable, Optional, Sequence, Union
from uuid import UUID

from longform_observability import log_context, observe_stage_duration
from longform_providers import ModelGateway
from longform_providers.exceptions import ProviderError, UnknownBackendError
from longform_schemas import (
    ExportFormat,
    PipelineStage,
    Project,
    ProjectSettings,
    ProjectStatus,
    Section,
    SectionStatus,
    count_words,
)

from .config import OrchestratorConfig
from .context import build_running_context, digest_section
from .errors import (
    ConcurrentRunError,
    EmptyDocumentError,
    InvalidTransitionError,
    PlanningError,
    ProjectNotFoundError,
    SectionNotFoundError,
)
from .export import assemble_document, export_document
from .planning import generate_title, plan_outline
from .review import review_section
from .stages import (
    PROGRESS_COMPLETE,
    PROGRESS_FINALIZING,
    PROGRESS_PLANNED,
    PROGRESS_REVIEWED,
    RUNNABLE_STATUSES,
    compute_progress,
)
from .store import InMemoryProjectStore, ProjectStore
from .writing import write_section

logger = logging.getLogger(__name__)

ProgressSink = Callable[[Project], Union[None, Awaitable[None]]]


@dataclass
class _RunHandle:
    """Live state for a project that currently has a run or section write in progress."""

    project: Optional[Project] = None
    looping: bool = False
    pause_requested: asyncio.Event = field(default_factory=asyncio.Event)


class DocumentOrchestrator:
    """Owns every project mutation: planning, the section loop, pause/resume and edits.

    Sections of one project are written strictly in order. Each project has at
    most one active run, tracked in a per-instance registry; distinct projects
    can run concurrently on the same event loop.
    """

    def __init__(
        self,
        gateway: ModelGateway,
        store: ProjectStore | None = None,
        config: OrchestratorConfig | None = None,
        *,
        on_progress: ProgressSink | None = None,
    ) -> None:
        self._gateway = gateway
        self._store = store or InMemoryProjectStore()
        self._config = config or OrchestratorConfig()
        self._on_progress = on_progress
        self._runs: dict[UUID, _RunHandle] = {}

    @property
    def gateway(self) -> ModelGateway:
        return self._gateway

    def is_running(self, project_id: UUID) -> bool:
        return project_id in self._runs

    # ------------------------------------------------------------------ queries

    async def get_project(self, project_id: UUID) -> Project:
        handle = self._runs.get(project_id)
        if handle is not None and handle.project is not None:
            return handle.project.model_copy(deep=True)
        return await self._load(project_id)

    async def list_projects(self) -> list[Project]:
        """All stored projects, most recently updated first."""

        projects = await self._store.list()
        return sorted(projects, key=lambda project: project.updated_at, reverse=True)

    async def export(self, project_id: UUID, fmt: ExportFormat | str) -> bytes:
        project = await self.get_project(project_id)
        with log_context(project_id=str(project_id), stage=PipelineStage.ASSEMBLY.value):
            return export_document(project, fmt)

    # --------------------------------------------------------------- lifecycle

    async def create(self, prompt: str, settings: ProjectSettings | None = None) -> Project:
        """Plan an outline and create all-pending sections."""

        settings = settings or ProjectSettings()
        project = Project(title=generate_title(prompt), prompt=prompt, settings=settings)

        with log_context(project_id=str(project.id), stage=PipelineStage.PLANNING.value):
            await self._save(project)
            candidates = self._candidates(project.settings)
            plan = await plan_outline(
                self._gateway,
                project.prompt,
                project.settings,
                backend_id=self._pick_backend(self._config.planner_backend, candidates),
                min_sections=self._config.min_sections,
                max_sections=self._config.max_sections,
            )
            if not plan.entries:
                project.status = ProjectStatus.ERROR
                await self._save(project)
                raise PlanningError(f"Planning produced no sections for project {project.id}")

            project.sections = [
                Section(
                    project_id=project.id,
                    title=entry.title,
                    order=index,
                    backend_id=candidates[index % len(candidates)] if candidates else None,
                    word_budget=plan.word_budget,
                )
                for index, entry in enumerate(plan.entries)
            ]
            project.status = ProjectStatus.WRITING
            project.progress = PROGRESS_PLANNED
            project.cursor = 0
            await self._save(project)

            logger.info(
                "Project created",
                extra={"section_count": len(project.sections), "fallback_used": plan.fallback_used},
            )
        return project.model_copy(deep=True)

    async def run(self, project_id: UUID) -> Project:
        """Write pending sections in order, then review and finalise.

        Returns the project untouched unless its status is writing. Raises
        ``ConcurrentRunError`` when the project already has an active run.
        """

        handle = self._claim(project_id)
        try:
            project = await self._load(project_id)
            handle.project = project
            handle.looping = True
            if project.status is not ProjectStatus.WRITING:
                logger.info(
                    "Run skipped",
                    extra={"project_id": str(project_id), "status": project.status.value},
                )
                return project.model_copy(deep=True)
            with log_context(project_id=str(project_id)):
                return await self._run_loop(handle)
        finally:
            self._runs.pop(project_id, None)

    async def pause(self, project_id: UUID) -> Project:
        """Request a pause; an in-flight section finishes and is kept."""

        handle = self._runs.get(project_id)
        if handle is not None:
            handle.pause_requested.set()
            if handle.project is not None:
                project = handle.project
                if project.status is ProjectStatus.WRITING:
                    project.status = ProjectStatus.PAUSED
                    await self._save(project)
                return project.model_copy(deep=True)

        project = await self._load(project_id)
        if project.status is ProjectStatus.WRITING:
            project.status = ProjectStatus.PAUSED
            await self._save(project)
        return project

    async def resume(self, project_id: UUID) -> Project:
        """Continue a paused (or errored) project from its first unfinished section."""

        handle = self._runs.get(project_id)
        if handle is not None:
            if not handle.looping or handle.project is None:
                raise ConcurrentRunError(f"Project {project_id} is busy")
            project = handle.project
            if project.status is ProjectStatus.PAUSED:
                # The live loop has not observed the pause yet; let it carry on.
                project.status = ProjectStatus.WRITING
                handle.pause_requested.clear()
                await self._save(project)
            return project.model_copy(deep=True)

        project = await self._load(project_id)
        resumable = project.status is ProjectStatus.PAUSED or (
            project.status is ProjectStatus.ERROR and bool(project.sections)
        )
        if not resumable:
            logger.info(
                "Resume ignored",
                extra={"project_id": str(project_id), "status": project.status.value},
            )
            return project

        project.status = ProjectStatus.WRITING
        await self._save(project)
        return await self.run(project_id)

    # ---------------------------------------------------------------- sections

    async def regenerate_section(self, project_id: UUID, section_id: UUID) -> Project:
        """Rewrite one completed or failed section; every other section is left as is."""

        async with self._claimed(project_id) as handle:
            project = await self._load(project_id)
            handle.project = project
            section = self._section(project, section_id)
            if section.status not in (SectionStatus.COMPLETED, SectionStatus.ERROR):
                raise InvalidTransitionError(
                    f"Section {section_id} is {section.status.value}; only completed or failed sections can be regenerated"
                )

            previous_status = project.status
            with log_context(project_id=str(project_id), stage=PipelineStage.WRITING.value):
                if previous_status is ProjectStatus.COMPLETED:
                    project.status = ProjectStatus.WRITING
                section.content = ""
                section.word_count = 0
                section.summary = None
                section.review_notes = None
                section.fallback_used = False
                section.status = SectionStatus.PENDING
                self._recompute(project)
                await self._save(project)

                context = build_running_context(project.sections, section.order)
                section.status = SectionStatus.WRITING
                await self._save(project)

                succeeded = await self._write(project, section, context)
                project.status = previous_status if succeeded else ProjectStatus.ERROR
                self._recompute(project)
                await self._save(project)
            return project.model_copy(deep=True)

    async def accept_section(self, project_id: UUID, section_id: UUID) -> Project:
        """Confirm a section's content as final."""

        async with self._claimed(project_id) as handle:
            project = await self._load(project_id)
            handle.project = project
            section = self._section(project, section_id)
            if section.status not in (SectionStatus.REVIEWING, SectionStatus.COMPLETED):
                raise InvalidTransitionError(
                    f"Section {section_id} is {section.status.value}; nothing to accept"
                )
            section.status = SectionStatus.COMPLETED
            section.updated_at = _utcnow()
            self._recompute(project)
            await self._save(project)
            return project.model_copy(deep=True)

    async def edit_section(
        self,
        project_id: UUID,
        section_id: UUID,
        content: str | None = None,
    ) -> Project:
        """Mark a completed section as manually edited, storing ``content`` verbatim when given."""

        async with self._claimed(project_id) as handle:
            project = await self._load(project_id)
            handle.project = project
            section = self._section(project, section_id)
            if section.status is not SectionStatus.COMPLETED:
                raise InvalidTransitionError(
                    f"Section {section_id} is {section.status.value}; only completed sections can be edited"
                )
            if content is not None:
                if not content.strip():
                    raise ValueError("Edited content must not be blank")
                section.content = content
                section.word_count = count_words(content)
                section.summary = digest_section(content)
                section.fallback_used = False
            section.status = SectionStatus.REVIEWING
            section.updated_at = _utcnow()
            self._recompute(project)
            await self._save(project)
            return project.model_copy(deep=True)

    async def assign_backend(self, project_id: UUID, section_id: UUID, backend_id: str) -> Project:
        """Reassign a pending section to another candidate backend."""

        handle = self._runs.get(project_id)
        if handle is not None and handle.project is None:
            raise ConcurrentRunError(f"Project {project_id} is busy")
        # Pending sections have not been reached by a live loop, so editing its copy is safe.
        project = handle.project if handle is not None else await self._load(project_id)

        section = self._section(project, section_id)
        if section.status is not SectionStatus.PENDING:
            raise InvalidTransitionError(
                f"Section {section_id} is {section.status.value}; backends can only change while pending"
            )
        if backend_id not in self._candidates(project.settings):
            raise UnknownBackendError(f"Backend {backend_id} is not an available candidate")

        section.backend_id = backend_id
        section.updated_at = _utcnow()
        await self._save(project)
        return project.model_copy(deep=True)

    # ---------------------------------------------------------------- internals

    async def _run_loop(self, handle: _RunHandle) -> Project:
        project = handle.project
        assert project is not None
        start = perf_counter()

        while True:
            if handle.pause_requested.is_set() or project.status is not ProjectStatus.WRITING:
                logger.info(
                    "Run loop stopped",
                    extra={"status": project.status.value, "progress": project.progress},
                )
                return project.model_copy(deep=True)

            section = self._next_runnable(project)
            if section is None:
                break

            project.cursor = section.order
            section.status = SectionStatus.WRITING
            section.updated_at = _utcnow()
            await self._save(project)

            context = build_running_context(project.sections, section.order)
            succeeded = await self._write(project, section, context)
            self._recompute(project)
            if not succeeded:
                project.status = ProjectStatus.ERROR
                await self._save(project)
                observe_stage_duration(
                    PipelineStage.WRITING.value,
                    perf_counter() - start,
                    service_name=self._config.service_name,
                    status="error",
                )
                return project.model_copy(deep=True)
            await self._save(project)

            if self._next_runnable(project) is not None:
                await self._pause_aware_delay(handle)

        observe_stage_duration(
            PipelineStage.WRITING.value,
            perf_counter() - start,
            service_name=self._config.service_name,
        )
        await self._finalize(project)
        return project.model_copy(deep=True)

    async def _write(self, project: Project, section: Section, context: str) -> bool:
        """Run the section writer and apply its draft; False leaves the section in error."""

        with log_context(section_id=str(section.id), section_order=section.order):
            try:
                draft = await write_section(
                    self._gateway,
                    project,
                    section,
                    context,
                    candidates=self._candidates(project.settings),
                    context_token_limit=self._config.context_token_limit,
                    service_name=self._config.service_name,
                )
            except Exception:
                logger.exception("Section generation failed, including template fallback")
                section.status = SectionStatus.ERROR
                section.updated_at = _utcnow()
                return False

            section.content = draft.content.strip()
            section.word_count = count_words(section.content)
            section.backend_id = draft.backend_id
            section.fallback_used = draft.fallback_used
            section.summary = digest_section(section.content)
            section.status = SectionStatus.COMPLETED
            section.updated_at = _utcnow()
            logger.info(
                "Section completed",
                extra={
                    "backend": draft.backend_id,
                    "word_count": section.word_count,
                    "fallback_used": draft.fallback_used,
                },
            )
            return True

    async def _finalize(self, project: Project) -> None:
        if project.settings.enable_review:
            start = perf_counter()
            project.status = ProjectStatus.REVIEWING
            await self._save(project)
            reviewer = self._pick_backend(
                self._config.reviewer_backend, self._candidates(project.settings)
            )
            with log_context(stage=PipelineStage.REVIEW.value):
                for section in project.sections:
                    if reviewer is None:
                        logger.warning("No reviewer backend available; skipping review")
                        break
                    try:
                        section.review_notes = await review_section(
                            self._gateway, section, backend_id=reviewer
                        )
                    except ProviderError as exc:
                        section.review_notes = None
                        logger.warning(
                            "Section review failed",
                            extra={"section_id": str(section.id), "error": str(exc)},
                        )
            project.progress = PROGRESS_REVIEWED
            await self._save(project)
            observe_stage_duration(
                PipelineStage.REVIEW.value,
                perf_counter() - start,
                service_name=self._config.service_name,
            )

        project.progress = PROGRESS_FINALIZING
        await self._save(project)

        with log_context(stage=PipelineStage.ASSEMBLY.value):
            try:
                document = assemble_document(project)
            except EmptyDocumentError as exc:
                logger.warning("Assembled document is empty", extra={"error": str(exc)})
            else:
                logger.info(
                    "Document assembled",
                    extra={
                        "section_count": len(document.sections),
                        "word_count": document.word_count,
                    },
                )

        project.word_count = sum(section.word_count for section in project.sections)
        project.progress = PROGRESS_COMPLETE
        project.status = ProjectStatus.COMPLETED
        await self._save(project)
        logger.info("Project completed", extra={"word_count": project.word_count})

    async def _pause_aware_delay(self, handle: _RunHandle) -> None:
        delay = self._config.section_delay_seconds
        if delay <= 0:
            await asyncio.sleep(0)
            return
        try:
            await asyncio.wait_for(handle.pause_requested.wait(), timeout=delay)
        except asyncio.TimeoutError:
            pass

    def _claim(self, project_id: UUID) -> _RunHandle:
        if project_id in self._runs:
            raise ConcurrentRunError(f"Project {project_id} is already running")
        handle = _RunHandle()
        self._runs[project_id] = handle
        return handle

    @asynccontextmanager
    async def _claimed(self, project_id: UUID) -> AsyncIterator[_RunHandle]:
        handle = self._claim(project_id)
        try:
            yield handle
        finally:
            self._runs.pop(project_id, None)

    def _candidates(self, settings: ProjectSettings) -> list[str]:
        return self._gateway.candidates_for(eu_only=settings.eu_backends_only)

    @staticmethod
    def _pick_backend(configured: str | None, candidates: Sequence[str]) -> str | None:
        if configured and configured in candidates:
            return configured
        return candidates[0] if candidates else None

    @staticmethod
    def _next_runnable(project: Project) -> Optional[Section]:
        for section in project.sections:
            if section.status in RUNNABLE_STATUSES:
                return section
        return None

    @staticmethod
    def _section(project: Project, section_id: UUID) -> Section:
        section = project.get_section(section_id)
        if section is None:
            raise SectionNotFoundError(f"Section {section_id} not found in project {project.id}")
        return section

    @staticmethod
    def _recompute(project: Project) -> None:
        project.word_count = sum(section.word_count for section in project.sections)
        project.progress = compute_progress(project)

    async def _load(self, project_id: UUID) -> Project:
        project = await self._store.get(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project {project_id} not found")
        return project

    async def _save(self, project: Project) -> None:
        project.touch()
        await self._store.save(project)
        if self._on_progress is None:
            return
        try:
            result = self._on_progress(project.model_copy(deep=True))
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Progress sink failed", extra={"project_id": str(project.id)})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


__all__ = ["DocumentOrchestrator", "ProgressSink"]
