"""Builds the canonical document model from a project and hands it to a renderer."""

from __future__ import annotations

import logging

from longform_schemas import DocumentModel, DocumentSection, ExportFormat, Project, count_words

from ..errors import EmptyDocumentError
from .renderers import render, resolve_format

logger = logging.getLogger(__name__)


def assemble_document(project: Project) -> DocumentModel:
    """Concatenate section titles and content in order.

    Sections without text are skipped. Raises ``EmptyDocumentError`` when no
    body text remains, so callers fail before any renderer runs.
    """

    sections = [
        DocumentSection(title=section.title, content=section.content.strip())
        for section in sorted(project.sections, key=lambda item: item.order)
        if section.content and section.content.strip()
    ]
    if not sections:
        raise EmptyDocumentError(f"Project {project.id} has an empty document body")

    return DocumentModel(
        title=project.title,
        format=project.settings.format,
        sections=sections,
        word_count=sum(count_words(section.content) for section in sections),
    )


def export_document(project: Project, fmt: ExportFormat | str) -> bytes:
    document = assemble_document(project)
    payload = render(document, fmt)
    logger.info(
        "Document exported",
        extra={
            "project_id": str(project.id),
            "format": resolve_format(fmt).value,
            "bytes": len(payload),
            "section_count": len(document.sections),
        },
    )
    return payload
