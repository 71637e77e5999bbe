from .engine import (
    DEFAULT_OUTLINE,
    FALLBACK_OUTLINES,
    OutlinePlan,
    fallback_outline,
    generate_title,
    parse_outline,
    plan_outline,
    section_count,
)

__all__ = [
    "DEFAULT_OUTLINE",
    "FALLBACK_OUTLINES",
    "OutlinePlan",
    "fallback_outline",
    "generate_title",
    "parse_outline",
    "plan_outline",
    "section_count",
]
