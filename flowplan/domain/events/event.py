"""Plan event payload model."""

from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field

from flowplan.domain.events.event_types import PlanEventType


class PlanEvent(BaseModel):
    """Immutable event payload for plan notifications."""

    model_config = {"frozen": True}

    event_type: PlanEventType
    workflow_id: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    step_index: int | None = None
    stage_index: int | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
