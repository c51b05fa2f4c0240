from typing import Literal
from pydantic import BaseModel, Field

from flowplan.domain.models.execution_plan import ItemDescriptor


class BaseOutput(BaseModel):
    schema_version: int = 1
    command: Literal["select", "step", "list", "order", "reorder"]
    exit_code: int
    error: str | None = None


class SelectOutput(BaseOutput):
    command: Literal["select"] = "select"
    workflow_id: str
    text: str | None = None


class StepOutput(BaseOutput):
    command: Literal["step"] = "step"
    workflow_id: str
    current_step: int
    text: str | None = None


class ListOutput(BaseOutput):
    command: Literal["list"] = "list"
    text: str | None = None


class OrderOutput(BaseOutput):
    command: Literal["order"] = "order"
    workflow_id: str
    stage_id: str
    item_ids: list[str] = Field(default_factory=list)
    items: list[ItemDescriptor] = Field(default_factory=list)


class ReorderOutput(BaseOutput):
    command: Literal["reorder"] = "reorder"
    workflow_id: str
    stage_id: str
    item_ids: list[str] = Field(default_factory=list)
