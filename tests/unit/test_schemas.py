"""Smoke tests for Pydantic schema validation."""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from longform_schemas import (
    DocumentModel,
    Project,
    ProjectSettings,
    Section,
    SectionStatus,
    TargetLength,
    count_words,
)


def _sections(project_id, *orders):
    return [Section(project_id=project_id, title=f"Part {order}", order=order) for order in orders]


def test_settings_resolve_word_count_from_preset() -> None:
    assert ProjectSettings().resolved_word_count() == 50_000
    assert ProjectSettings(target_length=TargetLength.SHORT).resolved_word_count() == 25_000
    assert ProjectSettings(target_length="long").resolved_word_count() == 100_000


def test_custom_length_requires_word_count() -> None:
    with pytest.raises(ValidationError):
        ProjectSettings(target_length=TargetLength.CUSTOM)
    settings = ProjectSettings(target_length=TargetLength.CUSTOM, target_word_count=7_200)
    assert settings.resolved_word_count() == 7_200


def test_project_sorts_sections_by_order() -> None:
    project_id = uuid4()
    project = Project(
        id=project_id,
        title="Sample",
        prompt="Write about tides",
        sections=_sections(project_id, 2, 0, 1),
    )
    assert [section.order for section in project.sections] == [0, 1, 2]
    assert project.section_ids == [section.id for section in project.sections]


def test_project_rejects_gapped_orders() -> None:
    project_id = uuid4()
    with pytest.raises(ValidationError):
        Project(title="Sample", prompt="Tides", sections=_sections(project_id, 0, 2))
    with pytest.raises(ValidationError):
        Project(title="Sample", prompt="Tides", sections=_sections(project_id, 0, 0))


def test_project_rejects_blank_prompt() -> None:
    with pytest.raises(ValidationError):
        Project(title="Sample", prompt="   ")


def test_completed_section_requires_content() -> None:
    with pytest.raises(ValidationError):
        Section(project_id=uuid4(), title="Intro", order=0, status=SectionStatus.COMPLETED)
    section = Section(
        project_id=uuid4(),
        title="Intro",
        order=0,
        status=SectionStatus.COMPLETED,
        content="Some text",
    )
    assert section.status is SectionStatus.COMPLETED


def test_estimated_pages_rounds_up() -> None:
    project = Project(title="Sample", prompt="Tides", word_count=251)
    assert project.estimated_pages == 2
    assert Project(title="Sample", prompt="Tides").estimated_pages == 0


def test_count_words() -> None:
    assert count_words("  one two\nthree\tfour ") == 4
    assert count_words("") == 0
    assert count_words(None) == 0


def test_document_model_defaults() -> None:
    document = DocumentModel(title="Doc", format="report", sections=[], word_count=0)
    assert document.generated_at is not None
