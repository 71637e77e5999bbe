from .document import (
    TARGET_LENGTH_PRESETS,
    DocumentModel,
    DocumentSection,
    OutlineEntry,
    Project,
    ProjectSettings,
    Section,
)

__all__ = [
    "TARGET_LENGTH_PRESETS",
    "DocumentModel",
    "DocumentSection",
    "OutlineEntry",
    "Project",
    "ProjectSettings",
    "Section",
]
