"""Base class for workflow events."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from pydantic import BaseModel, Field


class DomainEvent(BaseModel):
    """Base class for workflow events.

    ``run_id`` correlates every event emitted during one invocation.
    """

    event_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    event_type: str = ""
    occurred_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    run_id: str = ""

    model_config = {"frozen": True}
