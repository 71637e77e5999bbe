"""Tests for document assembly and the file renderers."""

from uuid import uuid4

import pytest

from longform_schemas import DocumentFormat, ExportFormat, Project, ProjectSettings, Section, SectionStatus

from services.orchestrator.app.errors import EmptyDocumentError
from services.orchestrator.app.export import (
    RENDERERS,
    assemble_document,
    export_document,
    render,
    resolve_format,
)


def _project(*contents: str) -> Project:
    project_id = uuid4()
    sections = [
        Section(
            project_id=project_id,
            title=f"Part {index + 1}",
            order=index,
            status=SectionStatus.COMPLETED if content.strip() else SectionStatus.PENDING,
            content=content,
            word_count=len(content.split()),
        )
        for index, content in enumerate(contents)
    ]
    return Project(
        id=project_id,
        title="Printing Press",
        prompt="history of the printing press",
        settings=ProjectSettings(format=DocumentFormat.ARTICLE),
        sections=sections,
    )


def test_assemble_orders_sections_and_counts_words() -> None:
    project = _project("# Part 1\n\nFirst body text.", "Second body.", "")
    document = assemble_document(project)
    assert document.title == "Printing Press"
    assert document.format is DocumentFormat.ARTICLE
    assert [section.title for section in document.sections] == ["Part 1", "Part 2"]
    assert document.word_count == 8


def test_empty_document_fails_before_rendering(monkeypatch: pytest.MonkeyPatch) -> None:
    project = _project("", "")
    for section in project.sections:
        section.status = SectionStatus.COMPLETED
        section.fallback_used = True

    def render_must_not_run(*args, **kwargs):
        raise AssertionError("renderer invoked for an empty document")

    monkeypatch.setattr("services.orchestrator.app.export.assembler.render", render_must_not_run)
    with pytest.raises(EmptyDocumentError):
        export_document(project, ExportFormat.PDF)


def test_whitespace_only_content_counts_as_empty() -> None:
    project = _project("   \n\t", "")
    with pytest.raises(EmptyDocumentError):
        assemble_document(project)


def test_plain_text_layout() -> None:
    document = assemble_document(_project("Opening words.", "Closing words."))
    text = render(document, "plain-text").decode("utf-8")
    assert text.startswith("Printing Press\n==============\n")
    assert "Part 1\n------\n\nOpening words." in text
    assert text.index("Part 1") < text.index("Part 2")


def test_word_and_pdf_produce_binary_files() -> None:
    document = assemble_document(
        _project("# Part 1\n\nIntro paragraph with <angle> & ampersand.\n\n## Detail\n\nMore.")
    )
    docx_bytes = render(document, "word")
    pdf_bytes = render(document, ExportFormat.PDF)
    assert docx_bytes.startswith(b"PK")
    assert pdf_bytes.startswith(b"%PDF")


def test_resolve_format_aliases() -> None:
    assert resolve_format("WORD") is ExportFormat.DOCX
    assert resolve_format("text") is ExportFormat.TXT
    assert resolve_format("pdf") is ExportFormat.PDF
    assert RENDERERS[ExportFormat.DOCX].extension == "docx"
    with pytest.raises(ValueError):
        resolve_format("epub")


def test_control_characters_are_dropped_from_word_and_pdf() -> None:
    document = assemble_document(
        _project("Opening\x00 line with a bell\x07 and\x0b a tab\tkept.\n\nSecond\x1b paragraph.")
    )
    document.title = "Printing\x0c Press"
    document.sections[0].title = "Part\x01 1"
    docx_bytes = render(document, ExportFormat.DOCX)
    pdf_bytes = render(document, ExportFormat.PDF)
    assert docx_bytes.startswith(b"PK")
    assert pdf_bytes.startswith(b"%PDF")
