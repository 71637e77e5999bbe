"""Tests for outline planning and title derivation."""

import json

import pytest

from longform_providers import ModelGateway
from longform_schemas import DocumentFormat, ProjectSettings, TargetLength

from services.orchestrator.app.planning import (
    FALLBACK_OUTLINES,
    fallback_outline,
    generate_title,
    parse_outline,
    plan_outline,
    section_count,
)
from tests.utils.providers import ScriptedProvider, always_fail


pytestmark = pytest.mark.anyio("asyncio")


@pytest.fixture
def anyio_backend():
    return "asyncio"


ARTICLE_5K = ProjectSettings(
    target_length=TargetLength.CUSTOM,
    target_word_count=5000,
    format=DocumentFormat.ARTICLE,
)

FIVE_TITLES = "\n".join(
    [
        "Here is the outline:",
        "1. Introduction",
        "2. **Early Presses**",
        "- Movable Type",
        "## Spread Across Europe",
        "3) Conclusion",
    ]
)


@pytest.mark.parametrize(
    "words, expected",
    [(5000, 5), (1000, 5), (7400, 7), (7500, 8), (50_000, 15), (200_000, 15)],
)
def test_section_count_is_clamped(words: int, expected: int) -> None:
    assert section_count(words) == expected


def test_generate_title() -> None:
    assert generate_title("history of the printing press") == "History Of The Printing Press"
    assert (
        generate_title("a quick, thorough look at the river's many moods and more words")
        == "A Quick Thorough Look At The Rivers Many"
    )
    assert generate_title("   ") == "Untitled Document"
    assert generate_title("?! ...") == "Untitled Document"


def test_fallback_outline_is_deterministic_per_format() -> None:
    first = [entry.title for entry in fallback_outline("tides", ARTICLE_5K)]
    second = [entry.title for entry in fallback_outline("tides", ARTICLE_5K)]
    assert first == second == list(FALLBACK_OUTLINES[DocumentFormat.ARTICLE])

    general = [entry.title for entry in fallback_outline("tides", ProjectSettings())]
    assert general == ["Introduction", "Main Content", "Analysis", "Conclusion"]


def test_parse_outline_strips_markup_and_lead_in() -> None:
    titles = [entry.title for entry in parse_outline(FIVE_TITLES, "printing")]
    assert titles == [
        "Introduction",
        "Early Presses",
        "Movable Type",
        "Spread Across Europe",
        "Conclusion",
    ]


def test_parse_outline_keeps_numbers_that_belong_to_the_title() -> None:
    text = "\n".join(["1. Introduction", "2. 100 Years of Print", "1.5 Million Presses", "3) 1450 and After"])
    titles = [entry.title for entry in parse_outline(text, "printing")]
    assert titles == ["Introduction", "100 Years of Print", "1.5 Million Presses", "1450 and After"]


def test_parse_outline_reads_fenced_json() -> None:
    payload = {"sections": [{"title": "Intro", "summary": "Opening"}, "Body"]}
    text = f"```json\n{json.dumps(payload)}\n```"
    entries = parse_outline(text, "tides")
    assert [entry.title for entry in entries] == ["Intro", "Body"]
    assert entries[0].summary == "Opening"
    assert entries[1].summary == "Content for Body section related to: tides"


def test_parse_outline_handles_empty_text() -> None:
    assert parse_outline("", "tides") == []
    assert parse_outline('{"unexpected": true}', "tides") == []


async def test_plan_outline_uses_backend_titles() -> None:
    provider = ScriptedProvider("alpha", FIVE_TITLES)
    gateway = ModelGateway({"alpha": provider})

    plan = await plan_outline(gateway, "history of the printing press", ARTICLE_5K, backend_id="alpha")

    assert len(plan.entries) == 5
    assert plan.word_budget == 1000
    assert plan.backend_id == "alpha"
    assert plan.fallback_used is False
    assert provider.stages == ["planning"]
    assert "Target length: 5000 words" in provider.requests[0].system_prompt


async def test_plan_outline_truncates_to_max_sections() -> None:
    many = "\n".join(f"Part {index}" for index in range(20))
    gateway = ModelGateway({"alpha": ScriptedProvider("alpha", many)})

    plan = await plan_outline(gateway, "tides", ARTICLE_5K, backend_id="alpha", max_sections=15)

    assert len(plan.entries) == 15
    assert plan.word_budget == 5000 // 15


async def test_plan_outline_falls_back_on_backend_failure() -> None:
    gateway = ModelGateway({"alpha": ScriptedProvider("alpha", always_fail())})

    plan = await plan_outline(gateway, "tides", ARTICLE_5K, backend_id="alpha")

    assert plan.fallback_used is True
    assert plan.backend_id is None
    assert [entry.title for entry in plan.entries] == list(FALLBACK_OUTLINES[DocumentFormat.ARTICLE])
    assert plan.word_budget == 5000 // 6


async def test_plan_outline_falls_back_without_backend() -> None:
    plan = await plan_outline(ModelGateway({}), "tides", ARTICLE_5K, backend_id=None)
    assert plan.fallback_used is True
    assert len(plan.entries) == 6
