"""Progress checkpoints and stage helpers for the run loop."""

from __future__ import annotations

import math

from longform_schemas import Project, ProjectStatus, SectionStatus

PROGRESS_PLANNED = 10
PROGRESS_WRITING_SPAN = 70
PROGRESS_REVIEWED = 90
PROGRESS_FINALIZING = 95
PROGRESS_COMPLETE = 100

# Backend id recorded on sections whose content came from the templates.
TEMPLATE_BACKEND_ID = "template"

# Sections with settled content; reviewing marks a manual edit awaiting acceptance.
FINISHED_STATUSES = frozenset({SectionStatus.COMPLETED, SectionStatus.REVIEWING})
RUNNABLE_STATUSES = frozenset({SectionStatus.PENDING, SectionStatus.WRITING, SectionStatus.ERROR})


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def compute_progress(project: Project) -> int:
    """Derive progress from current section states."""

    if project.status is ProjectStatus.COMPLETED:
        return PROGRESS_COMPLETE
    total = len(project.sections)
    if not total:
        return 0
    completed = sum(1 for section in project.sections if section.status in FINISHED_STATUSES)
    return round_half_up(PROGRESS_PLANNED + PROGRESS_WRITING_SPAN * completed / total)
