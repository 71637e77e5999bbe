"""Tests for section digests and running context."""

from uuid import uuid4

from longform_schemas import Section, SectionStatus

from services.orchestrator.app.context import (
    build_running_context,
    digest_section,
    format_context_entry,
    summarise_prompt,
)


def _section(order: int, status: SectionStatus, content: str = "", summary=None) -> Section:
    return Section(
        project_id=uuid4(),
        title=f"Part {order}",
        order=order,
        status=status,
        content=content,
        summary=summary,
    )


def test_digest_keeps_short_text_whole() -> None:
    assert digest_section("A short section body.") == "A short section body."


def test_digest_truncates_to_one_hundred_words() -> None:
    content = " ".join(f"w{index}" for index in range(150))
    digest = digest_section(content)
    assert digest.endswith("...")
    assert digest[:-3].split() == [f"w{index}" for index in range(100)]


def test_digest_caps_characters() -> None:
    digest = digest_section(" ".join(["x" * 40] * 60))
    assert len(digest) <= 1003
    assert digest.endswith("...")


def test_context_includes_only_earlier_completed_sections_in_order() -> None:
    sections = [
        _section(2, SectionStatus.COMPLETED, "third body"),
        _section(0, SectionStatus.COMPLETED, "first body"),
        _section(1, SectionStatus.ERROR),
        _section(3, SectionStatus.PENDING),
        _section(4, SectionStatus.COMPLETED, "fifth body"),
    ]
    context = build_running_context(sections, before_order=4)
    assert context == "\n\n".join(
        [
            format_context_entry("Part 0", "first body"),
            format_context_entry("Part 2", "third body"),
        ]
    )


def test_context_keeps_edited_sections() -> None:
    sections = [
        _section(0, SectionStatus.COMPLETED, "first body"),
        _section(1, SectionStatus.REVIEWING, "edited body"),
        _section(2, SectionStatus.WRITING),
    ]
    assert build_running_context(sections, before_order=2) == "\n\n".join(
        [
            format_context_entry("Part 0", "first body"),
            format_context_entry("Part 1", "edited body"),
        ]
    )


def test_context_prefers_stored_summary() -> None:
    sections = [_section(0, SectionStatus.COMPLETED, "full text here", summary="digest")]
    assert build_running_context(sections, 1) == 'Previous section "Part 0": digest'


def test_context_is_empty_for_first_section() -> None:
    assert build_running_context([_section(0, SectionStatus.PENDING)], 0) == ""


def test_summarise_prompt_trims_long_context() -> None:
    prompt = "word " * 5000
    trimmed, was_trimmed = summarise_prompt(prompt, token_limit=256)
    assert was_trimmed
    assert trimmed.startswith("[context trimmed to ~256 tokens]")
    assert len(trimmed) < len(prompt)

    same, untouched = summarise_prompt("short", token_limit=256)
    assert same == "short"
    assert not untouched
