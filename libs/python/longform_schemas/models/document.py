"""Domain models describing projects, sections and assembled documents."""

from __future__ import annotations

import math
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from ..enums import (
    DocumentFormat,
    ProjectStatus,
    SectionStatus,
    TargetLength,
    WritingStyle,
    WritingTone,
)
from ..utils.validators import ensure_not_blank

WORDS_PER_PAGE = 250

TARGET_LENGTH_PRESETS: dict[TargetLength, int] = {
    TargetLength.SHORT: 25_000,
    TargetLength.MEDIUM: 50_000,
    TargetLength.LONG: 100_000,
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProjectSettings(BaseModel):
    """User-selected knobs that shape planning and writing."""

    target_length: TargetLength = TargetLength.MEDIUM
    target_word_count: Optional[int] = Field(
        None, ge=1, description="Explicit word target; overrides the preset when set"
    )
    style: WritingStyle = WritingStyle.ACADEMIC
    tone: WritingTone = WritingTone.FORMAL
    format: DocumentFormat = DocumentFormat.GENERAL
    include_references: bool = False
    enable_review: bool = False
    eu_backends_only: bool = Field(
        False, description="Restrict generation to EU-hosted backends"
    )

    @model_validator(mode="after")
    def validate_custom_length(self) -> "ProjectSettings":
        if self.target_length is TargetLength.CUSTOM and self.target_word_count is None:
            raise ValueError("target_word_count is required for a custom target length")
        return self

    def resolved_word_count(self) -> int:
        if self.target_word_count is not None:
            return self.target_word_count
        return TARGET_LENGTH_PRESETS[self.target_length]


class Section(BaseModel):
    """One titled, independently generated chunk of the document."""

    id: UUID = Field(default_factory=uuid4)
    project_id: UUID
    title: str = Field(..., min_length=1, max_length=300)
    order: int = Field(..., ge=0)
    backend_id: Optional[str] = None
    word_budget: int = Field(0, ge=0)
    status: SectionStatus = SectionStatus.PENDING
    content: str = ""
    word_count: int = Field(0, ge=0)
    summary: Optional[str] = Field(None, description="Digest carried into later sections")
    review_notes: Optional[str] = None
    fallback_used: bool = False
    updated_at: datetime = Field(default_factory=_utcnow)

    @model_validator(mode="after")
    def validate_completed_content(self) -> "Section":
        if self.status is SectionStatus.COMPLETED and not self.content.strip():
            raise ValueError(f"Section '{self.title}' cannot be completed without content")
        return self


class Project(BaseModel):
    """A document being produced, with its ordered sections."""

    id: UUID = Field(default_factory=uuid4)
    title: str = Field(..., min_length=1, max_length=200)
    prompt: str = Field(..., min_length=1)
    settings: ProjectSettings = Field(default_factory=ProjectSettings)
    status: ProjectStatus = ProjectStatus.PLANNING
    sections: list[Section] = Field(default_factory=list)
    word_count: int = Field(0, ge=0)
    progress: int = Field(0, ge=0, le=100)
    cursor: int = Field(0, ge=0, description="Order index the run loop is positioned on")
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)

    @field_validator("prompt")
    @classmethod
    def validate_prompt(cls, value: str) -> str:
        return ensure_not_blank(value, field_name="Prompt")

    @field_validator("sections")
    @classmethod
    def validate_ordering(cls, sections: list[Section]) -> list[Section]:
        actual_order = sorted(section.order for section in sections)
        if actual_order != list(range(len(sections))):
            raise ValueError("Section order must be unique and contiguous starting at 0")
        return sorted(sections, key=lambda section: section.order)

    @computed_field  # type: ignore[prop-decorator]
    @property
    def section_ids(self) -> list[UUID]:
        return [section.id for section in self.sections]

    @computed_field  # type: ignore[prop-decorator]
    @property
    def estimated_pages(self) -> int:
        return math.ceil(self.word_count / WORDS_PER_PAGE)

    def get_section(self, section_id: UUID) -> Optional[Section]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def touch(self) -> None:
        self.updated_at = _utcnow()


class OutlineEntry(BaseModel):
    """Planned section before any content exists."""

    title: str = Field(..., min_length=1, max_length=300)
    summary: str = ""


class DocumentSection(BaseModel):
    title: str
    content: str


class DocumentModel(BaseModel):
    """Canonical representation handed to renderers."""

    title: str
    format: DocumentFormat = DocumentFormat.GENERAL
    sections: list[DocumentSection] = Field(default_factory=list)
    word_count: int = 0
    generated_at: datetime = Field(default_factory=_utcnow)
