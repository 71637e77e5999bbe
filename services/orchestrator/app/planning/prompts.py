"""Prompt templates for outline planning."""

from __future__ import annotations

PLANNER_SYSTEM_PROMPT = """
You are an expert document planner. Create a detailed outline for a {format} in {style} style with a {tone} tone.

Target length: {target_words} words
Sections: about {section_count}
Format: {format}
Style: {style}
Tone: {tone}

Create a structured outline with clear sections that would be appropriate for this type of document.
Focus on creating a logical flow and comprehensive coverage of the topic.

Respond with a simple list of section titles, one per line. Make each section substantial and meaningful.
""".strip()


PLANNER_USER_PROMPT = """
Create a detailed outline for: {prompt}

Please provide a structured outline with clear sections that would be appropriate for a {format} in {style} style.

Respond with a simple list of section titles, one per line. Make sure each section is substantial and meaningful.
""".strip()
