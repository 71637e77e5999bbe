"""Pydantic models shared by the longform services."""

from .enums import (
    DocumentFormat,
    ExportFormat,
    PipelineStage,
    ProjectStatus,
    SectionStatus,
    TargetLength,
    WritingStyle,
    WritingTone,
)
from .models import (
    TARGET_LENGTH_PRESETS,
    DocumentModel,
    DocumentSection,
    OutlineEntry,
    Project,
    ProjectSettings,
    Section,
)
from .utils import count_words

__all__ = [
    "DocumentFormat",
    "ExportFormat",
    "PipelineStage",
    "ProjectStatus",
    "SectionStatus",
    "TargetLength",
    "WritingStyle",
    "WritingTone",
    "TARGET_LENGTH_PRESETS",
    "DocumentModel",
    "DocumentSection",
    "OutlineEntry",
    "Project",
    "ProjectSettings",
    "Section",
    "count_words",
]
