"""Outline planning with a deterministic per-format fallback."""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass
from time import perf_counter
from typing import Any

from longform_observability import observe_stage_duration
from longform_providers import ModelGateway
from longform_providers.exceptions import ProviderError
from longform_schemas import DocumentFormat, OutlineEntry, PipelineStage, ProjectSettings

from ..stages import round_half_up
from .prompts import PLANNER_SYSTEM_PROMPT, PLANNER_USER_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_MIN_SECTIONS = 5
DEFAULT_MAX_SECTIONS = 15
MAX_TITLE_LENGTH = 200
UNTITLED_DOCUMENT = "Untitled Document"

FALLBACK_OUTLINES: dict[DocumentFormat, tuple[str, ...]] = {
    DocumentFormat.RESEARCH_PAPER: (
        "Abstract",
        "Introduction",
        "Literature Review",
        "Methodology",
        "Results",
        "Discussion",
        "Conclusion",
        "References",
    ),
    DocumentFormat.REPORT: (
        "Executive Summary",
        "Introduction",
        "Background Analysis",
        "Key Findings",
        "Detailed Analysis",
        "Recommendations",
        "Implementation Strategy",
        "Conclusion",
    ),
    DocumentFormat.NOVEL: (
        "Chapter 1: The Beginning",
        "Chapter 2: Rising Action",
        "Chapter 3: Conflict Emerges",
        "Chapter 4: Climax",
        "Chapter 5: Resolution",
    ),
    DocumentFormat.ARTICLE: (
        "Introduction",
        "Background Context",
        "Main Analysis",
        "Supporting Evidence",
        "Implications",
        "Conclusion",
    ),
    DocumentFormat.MANUAL: (
        "Overview",
        "Getting Started",
        "Basic Operations",
        "Advanced Features",
        "Best Practices",
        "Troubleshooting",
        "Appendix",
    ),
    DocumentFormat.PROPOSAL: (
        "Executive Summary",
        "Problem Statement",
        "Proposed Solution",
        "Implementation Plan",
        "Budget and Resources",
        "Timeline",
        "Expected Outcomes",
        "Conclusion",
    ),
}
DEFAULT_OUTLINE = ("Introduction", "Main Content", "Analysis", "Conclusion")

_FENCE_RE = re.compile(r"```(?:json)?\s*(.*?)```", re.DOTALL | re.IGNORECASE)
_MARKUP_RE = re.compile(
    r"^(?:#{1,6}\s*|[-*+•]\s+|\(?\d{1,3}[.)](?!\d)\s*|[A-Za-z][.)]\s+(?=\S{2,}))"
)
_NON_WORD_RE = re.compile(r"[^\w\s]")


@dataclass
class OutlinePlan:
    entries: list[OutlineEntry]
    word_budget: int
    backend_id: str | None
    fallback_used: bool


def section_count(
    target_words: int,
    *,
    min_sections: int = DEFAULT_MIN_SECTIONS,
    max_sections: int = DEFAULT_MAX_SECTIONS,
) -> int:
    return max(min_sections, min(max_sections, round_half_up(target_words / 1000)))


def generate_title(prompt: str) -> str:
    """Derive a display title from the first eight words of the prompt."""

    words = _NON_WORD_RE.sub("", " ".join(prompt.split()[:8])).split()
    if not words:
        return UNTITLED_DOCUMENT
    return " ".join(word[:1].upper() + word[1:] for word in words)[:MAX_TITLE_LENGTH]


def fallback_outline(prompt: str, settings: ProjectSettings) -> list[OutlineEntry]:
    titles = FALLBACK_OUTLINES.get(settings.format, DEFAULT_OUTLINE)
    return [_entry(title, prompt) for title in titles]


def parse_outline(text: str, prompt: str) -> list[OutlineEntry]:
    """Extract outline entries from a JSON payload or a plain title list.

    JSON may be an object with a ``sections`` list or a bare list, optionally
    wrapped in a fenced code block. Anything else is read line by line with
    bullets, numbering, heading hashes and bold markers stripped.
    """

    if not text or not text.strip():
        return []

    fenced = _FENCE_RE.search(text)
    candidate = fenced.group(1).strip() if fenced else text.strip()

    try:
        data = json.loads(candidate)
    except json.JSONDecodeError:
        return _parse_lines(candidate, prompt)

    if isinstance(data, dict):
        data = data.get("sections") or data.get("outline")
    if not isinstance(data, list):
        return []
    return _parse_items(data, prompt)


async def plan_outline(
    gateway: ModelGateway,
    prompt: str,
    settings: ProjectSettings,
    *,
    backend_id: str | None,
    min_sections: int = DEFAULT_MIN_SECTIONS,
    max_sections: int = DEFAULT_MAX_SECTIONS,
) -> OutlinePlan:
    """Plan the document outline, falling back to the canned list on any failure."""

    target_words = settings.resolved_word_count()
    requested = section_count(target_words, min_sections=min_sections, max_sections=max_sections)
    start = perf_counter()

    entries: list[OutlineEntry] = []
    used_backend: str | None = None
    if backend_id and gateway.has(backend_id):
        try:
            text = await gateway.generate(
                backend_id,
                PLANNER_SYSTEM_PROMPT.format(
                    format=settings.format.value,
                    style=settings.style.value,
                    tone=settings.tone.value,
                    target_words=target_words,
                    section_count=requested,
                ),
                PLANNER_USER_PROMPT.format(
                    prompt=prompt,
                    format=settings.format.value,
                    style=settings.style.value,
                ),
                stage=PipelineStage.PLANNING.value,
            )
        except ProviderError as exc:
            logger.warning(
                "Outline generation failed; using fallback outline",
                extra={"backend": backend_id, "error": str(exc)},
            )
        else:
            entries = parse_outline(text, prompt)[:max_sections]
            if entries:
                used_backend = backend_id
            else:
                logger.warning(
                    "Outline response had no usable titles; using fallback outline",
                    extra={"backend": backend_id, "response_preview": text[:200]},
                )
    else:
        logger.warning(
            "No planning backend available; using fallback outline",
            extra={"backend": backend_id},
        )

    fallback_used = not entries
    if fallback_used:
        entries = fallback_outline(prompt, settings)

    word_budget = target_words // len(entries)
    observe_stage_duration(
        PipelineStage.PLANNING.value,
        perf_counter() - start,
        service_name="orchestrator",
        status="fallback" if fallback_used else "success",
    )
    logger.info(
        "Outline planned",
        extra={
            "section_count": len(entries),
            "requested_sections": requested,
            "word_budget": word_budget,
            "fallback_used": fallback_used,
        },
    )
    return OutlinePlan(
        entries=entries,
        word_budget=word_budget,
        backend_id=used_backend,
        fallback_used=fallback_used,
    )


def _entry(title: str, prompt: str, summary: str | None = None) -> OutlineEntry:
    return OutlineEntry(
        title=title,
        summary=summary or f"Content for {title} section related to: {prompt}",
    )


def _clean_title(raw: str) -> str:
    title = raw.strip().replace("**", "").replace("__", "")
    previous = None
    while title and title != previous:
        previous = title
        title = _MARKUP_RE.sub("", title).strip()
    return title.strip(" \t:").strip()[:MAX_TITLE_LENGTH]


def _parse_lines(text: str, prompt: str) -> list[OutlineEntry]:
    entries: list[OutlineEntry] = []
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("```"):
            continue
        # Lead-in lines such as "Here is the outline:".
        if stripped.endswith(":") and not _MARKUP_RE.match(stripped):
            continue
        title = _clean_title(stripped)
        if title:
            entries.append(_entry(title, prompt))
    return entries


def _parse_items(items: list[Any], prompt: str) -> list[OutlineEntry]:
    entries: list[OutlineEntry] = []
    for item in items:
        summary = None
        if isinstance(item, str):
            raw_title = item
        elif isinstance(item, dict):
            raw_title = str(item.get("title") or item.get("name") or "")
            raw_summary = item.get("summary") or item.get("description")
            summary = str(raw_summary).strip() if raw_summary else None
        else:
            continue
        title = _clean_title(raw_title)
        if title:
            entries.append(_entry(title, prompt, summary))
    return entries
