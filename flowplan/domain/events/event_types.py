"""Plan event types for observer pattern notifications."""

from enum import Enum


class PlanEventType(str, Enum):
    """Typed events raised while serving execution plans."""

    # Plan construction
    PLAN_BUILT = "plan_built"
    AUTO_PROMPT_SKIPPED = "auto_prompt_skipped"

    # Tool requests
    STEP_SERVED = "step_served"
    WORKFLOW_NOT_FOUND = "workflow_not_found"
    AUTHENTICATION_FAILED = "authentication_failed"
