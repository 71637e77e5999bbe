"""Exceptions raised by the orchestration service."""

from __future__ import annotations


class OrchestratorError(RuntimeError):
    """Base error for orchestration failures."""


class PlanningError(OrchestratorError):
    """Raised when planning could not produce a single section."""


class ConcurrentRunError(OrchestratorError):
    """Raised when a project already has an active run."""


class ProjectNotFoundError(OrchestratorError, LookupError):
    pass


class SectionNotFoundError(OrchestratorError, LookupError):
    pass


class InvalidTransitionError(OrchestratorError):
    """Raised when an operation is not valid for the current status."""


class EmptyDocumentError(OrchestratorError):
    """Raised when assembly yields no body text."""
