"""Non-blocking quality notes for finished sections."""

from __future__ import annotations

from longform_providers import ModelGateway
from longform_schemas import PipelineStage, Section

from .prompts import REVIEWER_SYSTEM_PROMPT, REVIEWER_USER_PROMPT


async def review_section(gateway: ModelGateway, section: Section, *, backend_id: str) -> str:
    """Return short review notes; backend failures propagate as ``ProviderError``."""

    return await gateway.generate(
        backend_id,
        REVIEWER_SYSTEM_PROMPT,
        REVIEWER_USER_PROMPT.format(title=section.title, content=section.content),
        stage=PipelineStage.REVIEW.value,
        temperature=0.3,
    )
