"""Workflow lifecycle events."""

from __future__ import annotations

from provisioner.domain.events.base import DomainEvent


class StageStarted(DomainEvent):
    """Emitted when a stage begins."""

    stage: str
    event_type: str = "stage.started"


class StageCompleted(DomainEvent):
    """Emitted when a stage's postcondition holds."""

    stage: str
    state: str
    duration_seconds: float = 0.0
    event_type: str = "stage.completed"


class StageFailed(DomainEvent):
    """Emitted when a stage fails; the run halts immediately afterwards."""

    stage: str
    error_type: str
    error_message: str
    event_type: str = "stage.failed"


class WorkflowCompleted(DomainEvent):
    """Emitted when the final state of a run is reached."""

    kind: str
    state: str
    event_type: str = "workflow.completed"


class WorkflowFailed(DomainEvent):
    """Emitted when a run halts on its first failing stage."""

    kind: str
    stage: str
    error_message: str
    event_type: str = "workflow.failed"
