"""Reusable validation helpers."""

from __future__ import annotations


def count_words(value: str | None) -> int:
    """Whitespace-delimited word count; ``None`` and blank text count as zero."""

    if not value:
        return 0
    return len(value.split())


def ensure_not_blank(value: str, *, field_name: str) -> str:
    """Return ``value`` stripped, raising ``ValueError`` when nothing is left."""

    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field_name} must not be blank")
    return stripped
