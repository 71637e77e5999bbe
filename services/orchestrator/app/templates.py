"""Deterministic fallback prose used when no backend can write a section."""

from __future__ import annotations

from longform_schemas import ProjectSettings

REFERENCES_NOTE = (
    "\n\n## References\n\n"
    "This section would typically include relevant citations and references to support "
    "the analysis presented above. In a complete document, these would be properly "
    "formatted according to the appropriate academic style guide."
)

_INTRODUCTION = """
# {title}

The topic of "{prompt}" represents a significant area of study that deserves comprehensive examination. This {format} aims to provide a thorough analysis of the subject matter, exploring its various dimensions and implications.

In today's rapidly evolving world, understanding the nuances of this topic has become increasingly important. The {style} approach taken in this document will ensure that readers gain valuable insights into the core concepts and their practical applications.

This comprehensive exploration will examine multiple perspectives, drawing from current research and established theories to provide a well-rounded understanding of the subject matter. The following sections will delve deeper into specific aspects, building upon this foundational introduction to create a cohesive and informative analysis.

The significance of this topic extends beyond academic interest, having real-world implications that affect various stakeholders. Through careful examination and analysis, this document will illuminate the key factors that contribute to our understanding of the subject.

As we embark on this detailed exploration, it is important to establish the context and framework that will guide our investigation. The subsequent sections will build upon these foundational concepts, providing increasingly detailed analysis and insights.
""".strip()

_CONCLUSION = """
# {title}

This comprehensive examination of "{prompt}" has revealed the multifaceted nature of the topic and its far-reaching implications. Through detailed analysis and careful consideration of various perspectives, several key insights have emerged.

The evidence presented throughout this {format} demonstrates the complexity and importance of the subject matter. The {style} approach has allowed for a thorough exploration of the core concepts and their interconnections.

Key findings from this analysis include the recognition that this topic requires continued attention and study. The various dimensions explored in the preceding sections highlight the need for a nuanced understanding that takes into account multiple factors and perspectives.

Looking forward, there are several areas that warrant further investigation and development. The implications of the findings presented here extend beyond the immediate scope of this document, suggesting opportunities for future research and practical application.

In summary, this exploration has provided valuable insights into the nature and significance of the topic. The comprehensive analysis presented here contributes to our broader understanding and provides a foundation for continued study and application in relevant contexts.
""".strip()

_DEFAULT = """
# {title}

This section provides an in-depth examination of the aspects of "{prompt}" that relate specifically to {title_lower}. The analysis presented here builds upon the foundational concepts established in previous sections while introducing new perspectives and insights.

The importance of understanding this particular dimension cannot be overstated. Research in this area has shown that the factors discussed here play a crucial role in the overall understanding of the topic. The {style} approach taken in this analysis ensures that the information is presented in a clear and accessible manner.

Several key themes emerge when examining this aspect of the topic. First, the interconnected nature of the various elements becomes apparent, highlighting the need for a comprehensive approach to understanding. Second, the practical implications of these concepts extend beyond theoretical considerations, having real-world applications that affect various stakeholders.

Current research in this area has revealed important insights that contribute to our broader understanding. The methodologies employed by researchers have evolved significantly, allowing for more nuanced and detailed analysis.

The evidence suggests that this particular aspect of the topic requires careful consideration and ongoing attention. The strategies and approaches discussed here provide a framework for understanding how these ideas can be applied in real-world contexts, and the foundation established through this examination provides a solid basis for future exploration.
""".strip()

_TEMPLATES = {
    "introduction": _INTRODUCTION,
    "conclusion": _CONCLUSION,
}


def generate_fallback_content(title: str, prompt: str, settings: ProjectSettings) -> str:
    """Render template prose for ``title``; the section title is always the heading."""

    template = _TEMPLATES.get(title.strip().lower(), _DEFAULT)
    content = template.format(
        title=title,
        title_lower=title.lower(),
        prompt=prompt.strip(),
        format=settings.format.value.replace("-", " "),
        style=settings.style.value,
    )
    if settings.include_references:
        content += REFERENCES_NOTE
    return content


__all__ = ["REFERENCES_NOTE", "generate_fallback_content"]
