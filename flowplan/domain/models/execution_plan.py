from enum import Enum

from pydantic import BaseModel, Field, model_validator

from flowplan.domain.models.auto_prompt import AutoPromptKind, SkippedAutoPrompt


class ItemType(str, Enum):
    MINI_PROMPT = "mini-prompt"
    AUTO_PROMPT = "auto-prompt"


class ItemDescriptor(BaseModel):
    """A stage item as shown in the editable stage order."""

    item_id: str
    item_type: ItemType
    name: str
    description: str | None = None
    content: str | None = None
    auto_prompt_type: AutoPromptKind | None = None


class ResolvedItemOrder(BaseModel):
    """Definitive item order of one stage plus a descriptor per id."""

    item_ids: list[str] = Field(default_factory=list)
    items_map: dict[str, ItemDescriptor] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _ids_unique_and_described(self) -> "ResolvedItemOrder":
        if len(self.item_ids) != len(set(self.item_ids)):
            raise ValueError("item_ids must not contain duplicates")
        missing = [i for i in self.item_ids if i not in self.items_map]
        if missing:
            raise ValueError(f"item_ids without descriptor: {missing}")
        return self

    def descriptors(self) -> list[ItemDescriptor]:
        return [self.items_map[i] for i in self.item_ids]


class ExecutionPlanItem(BaseModel):
    """One materialized step of an execution plan."""

    index: int
    type: ItemType
    stage_index: int
    stage_name: str
    name: str
    description: str | None = None
    content: str = ""
    is_auto_attached: bool = False
    auto_prompt_type: AutoPromptKind | None = None

    @model_validator(mode="after")
    def _auto_fields_consistent(self) -> "ExecutionPlanItem":
        if self.type == ItemType.AUTO_PROMPT and self.auto_prompt_type is None:
            raise ValueError("auto-prompt items require auto_prompt_type")
        if self.type == ItemType.MINI_PROMPT and self.auto_prompt_type is not None:
            raise ValueError("mini-prompt items cannot carry auto_prompt_type")
        return self


class ExecutionPlan(BaseModel):
    """Flat, indexable step sequence for a whole workflow."""

    workflow_id: str
    workflow_name: str
    include_multi_agent_chat: bool = False
    total_steps: int = 0
    items: list[ExecutionPlanItem] = Field(default_factory=list)

    # Auto-prompt steps omitted because their system template is missing.
    skipped: list[SkippedAutoPrompt] = Field(default_factory=list, exclude=True)

    @model_validator(mode="after")
    def _indices_contiguous(self) -> "ExecutionPlan":
        if self.total_steps != len(self.items):
            raise ValueError(
                f"total_steps ({self.total_steps}) != number of items ({len(self.items)})"
            )
        for position, item in enumerate(self.items):
            if item.index != position:
                raise ValueError(f"item at position {position} has index {item.index}")
        return self
