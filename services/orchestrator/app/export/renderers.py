"""File renderers for the assembled document: plain text, Word and PDF."""

from __future__ import annotations

import io
import re
from typing import Protocol
from xml.sax.saxutils import escape

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.shared import Inches, Pt
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import letter
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import PageBreak, Paragraph, SimpleDocTemplate, Spacer

from longform_schemas import DocumentModel, ExportFormat

FORMAT_ALIASES = {
    "word": ExportFormat.DOCX,
    "plain-text": ExportFormat.TXT,
    "text": ExportFormat.TXT,
}

# Characters XML 1.0 cannot carry; python-docx and the reportlab parser reject them.
_XML_INVALID_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\ufffe\uffff]")


def _xml_safe(text: str) -> str:
    return _XML_INVALID_RE.sub("", text)


class DocumentRenderer(Protocol):
    media_type: str
    extension: str

    def render(self, document: DocumentModel) -> bytes: ...


def _split_blocks(content: str) -> list[tuple[int, str]]:
    """Split section text into (heading_level, text) blocks; level 0 is body text."""

    blocks: list[tuple[int, str]] = []
    paragraph: list[str] = []

    def flush() -> None:
        if paragraph:
            blocks.append((0, " ".join(paragraph)))
            paragraph.clear()

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line:
            flush()
            continue
        if line.startswith("#"):
            flush()
            level = len(line) - len(line.lstrip("#"))
            blocks.append((min(level, 3), line.lstrip("#").strip()))
            continue
        paragraph.append(line)
    flush()
    return blocks


def _body_blocks(section_title: str, content: str) -> list[tuple[int, str]]:
    # Template content repeats the section title as its first heading.
    blocks = _split_blocks(content)
    if blocks and blocks[0][0] == 1 and blocks[0][1] == section_title:
        blocks = blocks[1:]
    return blocks


class PlainTextRenderer:
    media_type = "text/plain; charset=utf-8"
    extension = "txt"

    def render(self, document: DocumentModel) -> bytes:
        parts = [document.title, "=" * len(document.title), ""]
        for section in document.sections:
            parts.extend([section.title, "-" * len(section.title), "", section.content, ""])
        return "\n".join(parts).encode("utf-8")


class WordRenderer:
    media_type = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
    extension = "docx"

    def render(self, document: DocumentModel) -> bytes:
        doc = Document()
        self._setup_document_style(doc)

        title = doc.add_heading(_xml_safe(document.title), 0)
        title.alignment = WD_ALIGN_PARAGRAPH.CENTER

        for index, section in enumerate(document.sections):
            if index:
                doc.add_page_break()
            doc.add_heading(_xml_safe(section.title), 1)
            for level, text in _body_blocks(section.title, section.content):
                if level:
                    doc.add_heading(_xml_safe(text), min(level + 1, 4))
                else:
                    doc.add_paragraph(_xml_safe(text))

        buffer = io.BytesIO()
        doc.save(buffer)
        return buffer.getvalue()

    @staticmethod
    def _setup_document_style(doc) -> None:
        style = doc.styles["Normal"]
        style.font.name = "Times New Roman"
        style.font.size = Pt(12)
        style.paragraph_format.line_spacing = 1.5
        style.paragraph_format.space_after = Pt(6)

        for section in doc.sections:
            section.top_margin = Inches(1)
            section.bottom_margin = Inches(1)
            section.left_margin = Inches(1)
            section.right_margin = Inches(1)


class PdfRenderer:
    media_type = "application/pdf"
    extension = "pdf"

    def render(self, document: DocumentModel) -> bytes:
        buffer = io.BytesIO()
        pdf = SimpleDocTemplate(buffer, pagesize=letter, title=document.title)

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            "DocumentTitle",
            parent=styles["Heading1"],
            fontSize=24,
            spaceAfter=12,
            alignment=TA_CENTER,
            fontName="Helvetica-Bold",
        )
        heading_style = ParagraphStyle(
            "SectionHeading",
            parent=styles["Heading2"],
            fontSize=16,
            spaceAfter=6,
            spaceBefore=12,
            fontName="Helvetica-Bold",
        )
        subheading_style = ParagraphStyle(
            "SectionSubheading",
            parent=styles["Heading3"],
            fontSize=13,
            spaceAfter=4,
            spaceBefore=8,
            fontName="Helvetica-Bold",
        )
        body_style = ParagraphStyle(
            "DocumentBody",
            parent=styles["BodyText"],
            fontSize=11,
            alignment=TA_JUSTIFY,
            spaceAfter=6,
            leading=14,
        )

        story = [
            Paragraph(escape(_xml_safe(document.title)), title_style),
            Paragraph(
                escape(f"Generated: {document.generated_at:%Y-%m-%d %H:%M} UTC"),
                styles["Normal"],
            ),
            Spacer(1, 0.3 * inch),
        ]
        for index, section in enumerate(document.sections):
            if index:
                story.append(PageBreak())
            story.append(Paragraph(escape(_xml_safe(section.title)), heading_style))
            for level, text in _body_blocks(section.title, section.content):
                style = subheading_style if level else body_style
                story.append(Paragraph(escape(_xml_safe(text)), style))

        pdf.build(story)
        return buffer.getvalue()


RENDERERS: dict[ExportFormat, DocumentRenderer] = {
    ExportFormat.TXT: PlainTextRenderer(),
    ExportFormat.DOCX: WordRenderer(),
    ExportFormat.PDF: PdfRenderer(),
}


def resolve_format(fmt: ExportFormat | str) -> ExportFormat:
    if isinstance(fmt, ExportFormat):
        return fmt
    key = fmt.strip().lower()
    if key in FORMAT_ALIASES:
        return FORMAT_ALIASES[key]
    return ExportFormat(key)


def render(document: DocumentModel, fmt: ExportFormat | str) -> bytes:
    """Serialise ``document``; unknown formats raise ``ValueError``."""

    return RENDERERS[resolve_format(fmt)].render(document)
