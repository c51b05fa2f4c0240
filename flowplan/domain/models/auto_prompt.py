"""Auto-prompt kinds and system template resolution results."""

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from flowplan.domain.constants import MEMORY_BOARD_PROMPT_NAME, MULTI_AGENT_CHAT_PROMPT_NAME
from flowplan.domain.models.workflow import PromptSummary


class AutoPromptKind(str, Enum):
    """System-owned prompt slots appended to a stage by flag."""

    MEMORY_BOARD = "memory-board"
    MULTI_AGENT_CHAT = "multi-agent-chat"

    @property
    def default_prompt_name(self) -> str:
        return DEFAULT_SYSTEM_PROMPT_NAMES[self]


DEFAULT_SYSTEM_PROMPT_NAMES: dict[AutoPromptKind, str] = {
    AutoPromptKind.MEMORY_BOARD: MEMORY_BOARD_PROMPT_NAME,
    AutoPromptKind.MULTI_AGENT_CHAT: MULTI_AGENT_CHAT_PROMPT_NAME,
}

# Emission order within a stage when both slots are enabled.
AUTO_PROMPT_PRIORITY: tuple[AutoPromptKind, ...] = (
    AutoPromptKind.MULTI_AGENT_CHAT,
    AutoPromptKind.MEMORY_BOARD,
)


class ResolvedAutoPrompt(BaseModel):
    """The system template for an auto-prompt kind was found."""

    model_config = {"frozen": True}

    status: Literal["resolved"] = "resolved"
    kind: AutoPromptKind
    prompt: PromptSummary


class SkippedAutoPrompt(BaseModel):
    """An auto-prompt step that could not be materialized."""

    model_config = {"frozen": True}

    status: Literal["skipped"] = "skipped"
    kind: AutoPromptKind
    reason: str
    stage_index: int | None = None
    stage_name: str | None = None


AutoPromptResolution = Annotated[
    Union[ResolvedAutoPrompt, SkippedAutoPrompt],
    Field(discriminator="status"),
]
