"""Domain models for the workflow execution engine."""

from .workflow import (
    PromptAssignment,
    PromptSummary,
    Stage,
    Visibility,
    Workflow,
)
from .auto_prompt import (
    AUTO_PROMPT_PRIORITY,
    AutoPromptKind,
    AutoPromptResolution,
    ResolvedAutoPrompt,
    SkippedAutoPrompt,
)
from .item_ref import AutoSlot, ItemRef, PromptRef, parse_item_id
from .execution_plan import (
    ExecutionPlan,
    ExecutionPlanItem,
    ItemDescriptor,
    ItemType,
    ResolvedItemOrder,
)


__all__ = [
    "PromptAssignment",
    "PromptSummary",
    "Stage",
    "Visibility",
    "Workflow",
    "AUTO_PROMPT_PRIORITY",
    "AutoPromptKind",
    "AutoPromptResolution",
    "ResolvedAutoPrompt",
    "SkippedAutoPrompt",
    "AutoSlot",
    "ItemRef",
    "PromptRef",
    "parse_item_id",
    "ExecutionPlan",
    "ExecutionPlanItem",
    "ItemDescriptor",
    "ItemType",
    "ResolvedItemOrder",
]
