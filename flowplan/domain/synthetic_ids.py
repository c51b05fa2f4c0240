"""Stable ids for the per-stage auto-prompt slots."""

from typing import TYPE_CHECKING

from flowplan.domain.constants import MEMORY_BOARD_ID_PREFIX, MULTI_AGENT_CHAT_ID_PREFIX

if TYPE_CHECKING:
    from flowplan.domain.models.auto_prompt import AutoPromptKind


def memory_board_id(stage_id: str) -> str:
    return f"{MEMORY_BOARD_ID_PREFIX}{stage_id}"


def multi_agent_chat_id(stage_id: str) -> str:
    return f"{MULTI_AGENT_CHAT_ID_PREFIX}{stage_id}"


def auto_prompt_id(kind: "AutoPromptKind", stage_id: str) -> str:
    """Return the synthetic id of the ``kind`` slot owned by ``stage_id``."""
    from flowplan.domain.models.auto_prompt import AutoPromptKind

    if kind == AutoPromptKind.MEMORY_BOARD:
        return memory_board_id(stage_id)
    if kind == AutoPromptKind.MULTI_AGENT_CHAT:
        return multi_agent_chat_id(stage_id)
    raise ValueError(f"Unknown auto-prompt kind: {kind}")


def stage_auto_prompt_ids(stage_id: str) -> set[str]:
    """Both synthetic ids in ``stage_id``'s namespace."""
    return {memory_board_id(stage_id), multi_agent_chat_id(stage_id)}
