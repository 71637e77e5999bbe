"""Writes one section, walking the backend candidates before using templates."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Sequence

from longform_observability import log_context, observe_section_outcome
from longform_providers import ModelGateway
from longform_providers.exceptions import ProviderError
from longform_schemas import PipelineStage, Project, Section

from ..context import summarise_prompt
from ..stages import TEMPLATE_BACKEND_ID
from ..templates import generate_fallback_content
from .prompts import WRITER_CONTEXT_BLOCK, WRITER_SYSTEM_PROMPT, WRITER_USER_PROMPT

logger = logging.getLogger(__name__)

DEFAULT_WORD_BUDGET = 1000


@dataclass
class SectionDraft:
    """Result of a section write: the text and which backend produced it."""

    content: str
    backend_id: str
    fallback_used: bool
    failures: list[str] = field(default_factory=list)


def candidate_order(assigned: str | None, candidates: Sequence[str]) -> list[str]:
    """Assigned backend first, then the remaining candidates in configured order."""

    ordered: list[str] = []
    if assigned and assigned != TEMPLATE_BACKEND_ID:
        ordered.append(assigned)
    ordered.extend(candidate for candidate in candidates if candidate not in ordered)
    return ordered


def build_writer_prompts(
    project: Project,
    section: Section,
    context: str,
    *,
    context_token_limit: int | None = None,
) -> tuple[str, str]:
    settings = project.settings
    system_prompt = WRITER_SYSTEM_PROMPT.format(
        style=settings.style.value,
        tone=settings.tone.value,
        format=settings.format.value,
        title=section.title,
        include_references="Yes" if settings.include_references else "No",
    )
    if context:
        trimmed, was_trimmed = summarise_prompt(context, context_token_limit)
        if was_trimmed:
            logger.info("Trimmed running context", extra={"context_chars": len(context)})
        system_prompt += WRITER_CONTEXT_BLOCK.format(context=trimmed)

    user_prompt = WRITER_USER_PROMPT.format(
        title=section.title,
        prompt=project.prompt,
        word_budget=section.word_budget or DEFAULT_WORD_BUDGET,
        style=settings.style.value,
        tone=settings.tone.value,
    )
    return system_prompt, user_prompt


async def write_section(
    gateway: ModelGateway,
    project: Project,
    section: Section,
    context: str,
    *,
    candidates: Sequence[str],
    context_token_limit: int | None = None,
    service_name: str = "orchestrator",
) -> SectionDraft:
    """Produce content for ``section``.

    Backend failures of any kind advance immediately to the next candidate.
    When every candidate fails, or there are none, the content templates
    supply the text and ``fallback_used`` is set. Template errors propagate.
    """

    system_prompt, user_prompt = build_writer_prompts(
        project, section, context, context_token_limit=context_token_limit
    )
    failures: list[str] = []

    for backend_id in candidate_order(section.backend_id, candidates):
        with log_context(backend=backend_id):
            try:
                text = await gateway.generate(
                    backend_id,
                    system_prompt,
                    user_prompt,
                    stage=PipelineStage.WRITING.value,
                )
            except ProviderError as exc:
                failures.append(f"{backend_id}: {exc}")
                logger.warning(
                    "Section backend failed; trying next candidate",
                    extra={"error": str(exc), "error_type": type(exc).__name__},
                )
                continue

            logger.info("Section written", extra={"content_chars": len(text)})
            observe_section_outcome(service_name=service_name, fallback_used=False)
            return SectionDraft(content=text, backend_id=backend_id, fallback_used=False, failures=failures)

    logger.warning(
        "All backends failed; substituting template content",
        extra={"attempts": len(failures)},
    )
    content = generate_fallback_content(section.title, project.prompt, project.settings)
    observe_section_outcome(service_name=service_name, fallback_used=True)
    return SectionDraft(
        content=content,
        backend_id=TEMPLATE_BACKEND_ID,
        fallback_used=True,
        failures=failures,
    )
