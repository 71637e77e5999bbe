"""Enum definitions shared across the pipeline."""

from __future__ import annotations

from enum import Enum


class ProjectStatus(str, Enum):
    PLANNING = "planning"
    WRITING = "writing"
    REVIEWING = "reviewing"
    COMPLETED = "completed"
    PAUSED = "paused"
    ERROR = "error"


class SectionStatus(str, Enum):
    PENDING = "pending"
    WRITING = "writing"
    COMPLETED = "completed"
    REVIEWING = "reviewing"
    ERROR = "error"


class DocumentFormat(str, Enum):
    RESEARCH_PAPER = "research-paper"
    REPORT = "report"
    NOVEL = "novel"
    ARTICLE = "article"
    MANUAL = "manual"
    PROPOSAL = "proposal"
    GENERAL = "general"


class WritingStyle(str, Enum):
    ACADEMIC = "academic"
    BUSINESS = "business"
    CREATIVE = "creative"
    TECHNICAL = "technical"
    JOURNALISTIC = "journalistic"


class WritingTone(str, Enum):
    FORMAL = "formal"
    CASUAL = "casual"
    PERSUASIVE = "persuasive"
    INFORMATIVE = "informative"
    ENGAGING = "engaging"


class TargetLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"
    CUSTOM = "custom"


class ExportFormat(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    TXT = "txt"


class PipelineStage(str, Enum):
    PLANNING = "planning"
    WRITING = "writing"
    REVIEW = "review"
    ASSEMBLY = "assembly"
