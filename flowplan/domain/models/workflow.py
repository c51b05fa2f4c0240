from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Visibility(str, Enum):
    """Who may run a workflow."""

    PUBLIC = "public"
    PRIVATE = "private"


class PromptSummary(BaseModel):
    """Denormalized copy of a prompt template."""

    id: str
    name: str
    description: str | None = None
    content: str = ""


class PromptAssignment(BaseModel):
    """A prompt template bound to a position inside a stage."""

    prompt_id: str
    order: int
    prompt: PromptSummary

    @model_validator(mode="after")
    def _prompt_matches_assignment(self) -> "PromptAssignment":
        if self.prompt.id != self.prompt_id:
            raise ValueError(
                f"prompt.id '{self.prompt.id}' does not match prompt_id '{self.prompt_id}'"
            )
        return self


class Stage(BaseModel):
    """A phase of a workflow holding ordered prompt assignments."""

    id: str
    name: str
    order: int
    with_review: bool = False
    include_multi_agent_chat: bool = False
    prompt_assignments: list[PromptAssignment] = Field(default_factory=list)

    # None = never customised; [] is a saved (empty) custom order
    item_order: list[str] | None = None

    @field_validator("id")
    @classmethod
    def _id_non_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("stage id must be non-empty")
        return v

    @field_validator("prompt_assignments")
    @classmethod
    def _unique_assignment_order(cls, v: list[PromptAssignment]) -> list[PromptAssignment]:
        orders = [a.order for a in v]
        if len(orders) != len(set(orders)):
            raise ValueError("prompt assignment order must be unique within a stage")
        return v

    @field_validator("prompt_assignments")
    @classmethod
    def _unique_prompt_ids(cls, v: list[PromptAssignment]) -> list[PromptAssignment]:
        # prompt_id doubles as the item id in item orders and plans
        seen: set[str] = set()
        for a in v:
            if a.prompt_id in seen:
                raise ValueError(f"prompt '{a.prompt_id}' is assigned more than once in this stage")
            seen.add(a.prompt_id)
        return v

    def sorted_assignments(self) -> list[PromptAssignment]:
        return sorted(self.prompt_assignments, key=lambda a: a.order)


class Workflow(BaseModel):
    """A named, ordered sequence of stages."""

    model_config = ConfigDict(extra="forbid")

    id: str
    name: str
    description: str | None = None
    owner_id: str | None = None
    visibility: Visibility = Visibility.PRIVATE
    is_active: bool = True
    stages: list[Stage] = Field(default_factory=list)

    # Deprecated: superseded by Stage.include_multi_agent_chat.
    # Folded into the stages by the repository on load.
    include_multi_agent_chat: bool = False

    @field_validator("stages")
    @classmethod
    def _unique_stage_order(cls, v: list[Stage]) -> list[Stage]:
        orders = [s.order for s in v]
        if len(orders) != len(set(orders)):
            raise ValueError("stage order must be unique within a workflow")
        return v

    def sorted_stages(self) -> list[Stage]:
        return sorted(self.stages, key=lambda s: s.order)

    def find_stage(self, stage_id: str) -> Stage | None:
        for stage in self.stages:
            if stage.id == stage_id:
                return stage
        return None

    @property
    def is_public(self) -> bool:
        return self.visibility == Visibility.PUBLIC


def fold_legacy_multi_agent_chat(data: dict[str, Any]) -> dict[str, Any]:
    """Migrate the workflow-level multi-agent chat flag onto each stage.

    Stored documents written before the flag moved to stages carry it on the
    workflow. The workflow flag is cleared once folded so the engine only
    ever reads the per-stage value.
    """
    if not data.get("include_multi_agent_chat"):
        return data

    migrated = dict(data)
    migrated["stages"] = [
        {**stage, "include_multi_agent_chat": True} for stage in data.get("stages", [])
    ]
    migrated["include_multi_agent_chat"] = False
    return migrated
