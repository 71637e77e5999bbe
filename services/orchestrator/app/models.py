"""Pydantic models for the orchestrator API."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field

from longform_schemas import (
    DocumentFormat,
    Project,
    ProjectSettings,
    ProjectStatus,
    Section,
    SectionStatus,
)


class CreateProjectRequest(BaseModel):
    prompt: str = Field(..., min_length=1, description="What the document should be about")
    settings: ProjectSettings = Field(default_factory=ProjectSettings)
    auto_run: bool = Field(
        False, description="Start writing in the background as soon as planning finishes"
    )


class EditSectionRequest(BaseModel):
    content: Optional[str] = Field(
        None, min_length=1, description="Replacement text; omit to only flag the section"
    )


class AssignBackendRequest(BaseModel):
    backend_id: str = Field(..., min_length=1)


class SectionView(BaseModel):
    id: UUID
    title: str
    order: int
    backend_id: Optional[str] = None
    word_budget: int
    status: SectionStatus
    word_count: int
    content: str
    summary: Optional[str] = None
    review_notes: Optional[str] = None
    fallback_used: bool

    @classmethod
    def from_section(cls, section: Section) -> "SectionView":
        return cls.model_validate(section.model_dump(exclude={"project_id", "updated_at"}))


class ProjectView(BaseModel):
    id: UUID
    title: str
    prompt: str
    settings: ProjectSettings
    status: ProjectStatus
    progress: int
    word_count: int
    estimated_pages: int
    cursor: int
    running: bool = False
    sections: List[SectionView] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_project(cls, project: Project, *, running: bool = False) -> "ProjectView":
        return cls(
            id=project.id,
            title=project.title,
            prompt=project.prompt,
            settings=project.settings,
            status=project.status,
            progress=project.progress,
            word_count=project.word_count,
            estimated_pages=project.estimated_pages,
            cursor=project.cursor,
            running=running,
            sections=[SectionView.from_section(section) for section in project.sections],
            created_at=project.created_at,
            updated_at=project.updated_at,
        )


class ProjectSummary(BaseModel):
    id: UUID
    title: str
    format: DocumentFormat
    status: ProjectStatus
    progress: int
    word_count: int
    section_count: int
    updated_at: datetime

    @classmethod
    def from_project(cls, project: Project) -> "ProjectSummary":
        return cls(
            id=project.id,
            title=project.title,
            format=project.settings.format,
            status=project.status,
            progress=project.progress,
            word_count=project.word_count,
            section_count=len(project.sections),
            updated_at=project.updated_at,
        )


class DocumentRunRequest(BaseModel):
    """Synchronous create-and-run request executed through the Prefect flow."""

    prompt: str = Field(..., min_length=1)
    settings: ProjectSettings = Field(default_factory=ProjectSettings)
    backends: Optional[str] = Field(
        None, description="Comma-separated backend ids overriding LLM_BACKENDS"
    )
    export_format: Optional[str] = Field(
        None, description="pdf, docx or txt; when set the response carries the rendered size"
    )


class DocumentRunResponse(BaseModel):
    project: ProjectView
    export_format: Optional[str] = None
    export_bytes: Optional[int] = None
