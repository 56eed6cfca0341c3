"""
Exception taxonomy for EduAgent.

- GenerationError: the content generator failed (network, timeout, model)
- ContentValidationError: the generator answered with unusable structure
- NotFoundError: a referenced learner, roadmap or day does not exist

Store failures are not wrapped; SQLAlchemy errors reach the caller as-is.
"""

from __future__ import annotations


class EduAgentError(Exception):
    """Base class for all EduAgent errors."""


class GenerationError(EduAgentError):
    """Content generation failed."""

    def __init__(self, message: str, kind: str | None = None):
        super().__init__(message)
        self.kind = kind


class ContentValidationError(GenerationError):
    """Generated content did not pass structural validation."""

    def __init__(self, kind: str, problems: list[str]):
        self.problems = problems
        summary = "; ".join(problems) if problems else "unknown problem"
        super().__init__(f"Invalid {kind}: {summary}", kind=kind)


class RoadmapGenerationError(GenerationError):
    """The curriculum outline for a new roadmap could not be produced."""

    def __init__(self, message: str):
        super().__init__(message, kind="roadmap")


class NotFoundError(EduAgentError):
    """A referenced entity does not exist."""

    entity = "entity"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found: {entity_id}")


class LearnerNotFoundError(NotFoundError):
    entity = "Learner"


class RoadmapNotFoundError(NotFoundError):
    entity = "Roadmap"


class DayNotFoundError(NotFoundError):
    entity = "Day"


class InvalidDayTransitionError(EduAgentError):
    """A day status change that the progression state machine forbids."""

    def __init__(self, day_id: str, current_status: str, target_status: str):
        self.day_id = day_id
        self.current_status = current_status
        self.target_status = target_status
        super().__init__(f"Day {day_id} cannot move from {current_status} to {target_status}")
