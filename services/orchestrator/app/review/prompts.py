"""Prompt templates for the optional review pass."""

from __future__ import annotations

REVIEWER_SYSTEM_PROMPT = (
    "You are a critical reviewer. Analyze the following text for clarity, coherence, "
    "and quality. Provide brief feedback in 2-3 sentences."
)

REVIEWER_USER_PROMPT = """
Section: {title}

{content}
""".strip()
