"""Domain events package."""

from provisioner.domain.events.base import DomainEvent
from provisioner.domain.events.workflow_events import (
    StageCompleted,
    StageFailed,
    StageStarted,
    WorkflowCompleted,
    WorkflowFailed,
)


__all__ = [
    "DomainEvent",
    "StageCompleted",
    "StageFailed",
    "StageStarted",
    "WorkflowCompleted",
    "WorkflowFailed",
]
