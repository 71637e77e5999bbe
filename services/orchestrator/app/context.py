"""Carry-forward digests and context trimming for section prompts."""

from __future__ import annotations

import os
from typing import Iterable, Tuple

from longform_schemas import Section

from .stages import FINISHED_STATUSES

_DEFAULT_LIMIT = int(os.getenv("CONTEXT_TOKEN_LIMIT", "12000"))

DIGEST_MAX_WORDS = 100
DIGEST_MAX_CHARS = 1000
ELLIPSIS = "..."


def digest_section(content: str) -> str:
    """Condense finished section text into a bounded digest.

    Keeps the first ``DIGEST_MAX_WORDS`` words (with a trailing ellipsis when
    anything was dropped) and never returns more than ``DIGEST_MAX_CHARS``
    characters plus the ellipsis.
    """

    words = (content or "").split()
    digest = " ".join(words[:DIGEST_MAX_WORDS])
    truncated = len(words) > DIGEST_MAX_WORDS
    if len(digest) > DIGEST_MAX_CHARS:
        digest = digest[:DIGEST_MAX_CHARS].rstrip()
        truncated = True
    return f"{digest}{ELLIPSIS}" if truncated else digest


def format_context_entry(title: str, digest: str) -> str:
    return f'Previous section "{title}": {digest}'


def build_running_context(sections: Iterable[Section], before_order: int) -> str:
    """Join digests of finished (completed or edited) sections ordered before ``before_order``."""

    prior = sorted(
        (
            section
            for section in sections
            if section.order < before_order and section.status in FINISHED_STATUSES
        ),
        key=lambda section: section.order,
    )
    entries = [
        format_context_entry(section.title, section.summary or digest_section(section.content))
        for section in prior
    ]
    return "\n\n".join(entries)


def summarise_prompt(prompt: str, token_limit: int | None = None) -> Tuple[str, bool]:
    """Trim long prompts to stay within the configured soft token limit.

    Args:
        prompt: The original prompt text.
        token_limit: Optional override for the maximum token budget.

    Returns:
        A tuple of ``(possibly_trimmed_prompt, was_trimmed)``.
    """

    if not prompt:
        return prompt, False

    limit = max(token_limit or _DEFAULT_LIMIT, 256)
    # Rough heuristic: 1 token ~ 4 characters for mixed English text.
    if len(prompt) // 4 <= limit:
        return prompt, False

    max_chars = limit * 4
    head = prompt[: max_chars // 2].strip()
    tail = prompt[-(max_chars - max_chars // 2):].strip()

    trimmed_prompt = (
        f"[context trimmed to ~{limit} tokens]\n"
        f"{head}\n"
        "\n...\n"
        f"{tail}"
    )
    return trimmed_prompt, True


__all__ = [
    "DIGEST_MAX_WORDS",
    "build_running_context",
    "digest_section",
    "format_context_entry",
    "summarise_prompt",
]
