"""Prompt templates for section writing."""

from __future__ import annotations


WRITER_SYSTEM_PROMPT = """
You are an expert writer specializing in {style} writing. Write the "{title}" section in {tone} tone for a {format}.

Style guidelines:
- Format: {format}
- Style: {style}
- Tone: {tone}
- Include references: {include_references}

Write a comprehensive, well-structured section that flows naturally and maintains consistency with the
sections before it. Use proper headings, paragraphs, and formatting to make the content readable and engaging.
""".strip()


WRITER_CONTEXT_BLOCK = "\n\nContext from previous sections:\n{context}"


WRITER_USER_PROMPT = """
Write a comprehensive "{title}" section for the following topic: {prompt}

This section should be substantial and detailed, aiming for roughly {word_budget} words. Make sure it provides
valuable, in-depth content that flows well with the overall document.

Focus on creating engaging, informative content that matches the {style} style and {tone} tone.
""".strip()
