from .assembler import assemble_document, export_document
from .renderers import RENDERERS, render, resolve_format

__all__ = ["RENDERERS", "assemble_document", "export_document", "render", "resolve_format"]
