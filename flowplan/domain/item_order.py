"""Per-stage item order resolution.

A stage's items are its prompt assignments plus up to two auto-prompt
slots (Multi-Agent Chat, Memory Board). Editors may save a custom order;
that saved order is reconciled here against the stage's live content:

- ids that no longer belong to the stage are dropped, keeping the relative
  order of the rest;
- prompts assigned since the save are appended in ``order``;
- slots enabled since the save are appended, Multi-Agent Chat first.

A slot id that is still in the saved order stays there even when its flag
has since been switched off. It only leaves the order through an explicit
edit.
"""

from flowplan.domain.models.auto_prompt import AUTO_PROMPT_PRIORITY, AutoPromptKind
from flowplan.domain.models.execution_plan import ItemDescriptor, ItemType, ResolvedItemOrder
from flowplan.domain.models.item_ref import AutoSlot, PromptRef, parse_item_id
from flowplan.domain.models.workflow import Stage
from flowplan.domain.synthetic_ids import auto_prompt_id


def _enabled_slots(stage: Stage, include_multi_agent_chat: bool) -> list[AutoPromptKind]:
    flags = {
        AutoPromptKind.MULTI_AGENT_CHAT: include_multi_agent_chat,
        AutoPromptKind.MEMORY_BOARD: stage.with_review,
    }
    return [kind for kind in AUTO_PROMPT_PRIORITY if flags[kind]]


def default_item_order(stage: Stage, include_multi_agent_chat: bool) -> list[str]:
    """Prompts by ``order``, then enabled slots in priority order."""
    item_ids = [a.prompt_id for a in stage.sorted_assignments()]
    item_ids.extend(
        auto_prompt_id(kind, stage.id)
        for kind in _enabled_slots(stage, include_multi_agent_chat)
    )
    return item_ids


def reconcile_item_order(
    stage: Stage,
    saved_order: list[str],
    include_multi_agent_chat: bool,
) -> list[str]:
    """Reconcile a saved order against the stage's current content."""
    current_prompt_ids = {a.prompt_id for a in stage.prompt_assignments}

    reconciled: list[str] = []
    seen: set[str] = set()
    for item_id in saved_order:
        if item_id in seen:
            continue
        ref = parse_item_id(item_id, stage.id)
        if isinstance(ref, PromptRef) and ref.prompt_id not in current_prompt_ids:
            continue
        reconciled.append(item_id)
        seen.add(item_id)

    for assignment in stage.sorted_assignments():
        if assignment.prompt_id not in seen:
            reconciled.append(assignment.prompt_id)
            seen.add(assignment.prompt_id)

    for kind in _enabled_slots(stage, include_multi_agent_chat):
        slot_id = auto_prompt_id(kind, stage.id)
        if slot_id not in seen:
            reconciled.append(slot_id)
            seen.add(slot_id)

    return reconciled


def describe_item(stage: Stage, item_id: str) -> ItemDescriptor:
    ref = parse_item_id(item_id, stage.id)
    if isinstance(ref, AutoSlot):
        return ItemDescriptor(
            item_id=item_id,
            item_type=ItemType.AUTO_PROMPT,
            name=ref.kind.default_prompt_name,
            auto_prompt_type=ref.kind,
        )

    for assignment in stage.prompt_assignments:
        if assignment.prompt_id == ref.prompt_id:
            prompt = assignment.prompt
            return ItemDescriptor(
                item_id=item_id,
                item_type=ItemType.MINI_PROMPT,
                name=prompt.name,
                description=prompt.description,
                content=prompt.content,
            )
    raise KeyError(f"Item '{item_id}' does not belong to stage '{stage.id}'")


def resolve_item_order(
    stage: Stage,
    include_multi_agent_chat: bool | None = None,
) -> ResolvedItemOrder:
    """Return the definitive item order of ``stage``.

    Args:
        stage: Stage with its prompt assignments and persisted ``item_order``.
        include_multi_agent_chat: Effective Multi-Agent Chat flag. Defaults to
            the stage's own flag; pass a value to preview an unsaved toggle.

    Returns:
        ResolvedItemOrder with the ordered ids and a descriptor per id.
    """
    if include_multi_agent_chat is None:
        include_multi_agent_chat = stage.include_multi_agent_chat

    if stage.item_order is None:
        item_ids = default_item_order(stage, include_multi_agent_chat)
    else:
        item_ids = reconcile_item_order(stage, stage.item_order, include_multi_agent_chat)

    return ResolvedItemOrder(
        item_ids=item_ids,
        items_map={item_id: describe_item(stage, item_id) for item_id in item_ids},
    )


def apply_item_order(stage: Stage, item_ids: list[str]) -> Stage:
    """Return a copy of ``stage`` carrying ``item_ids`` as its saved order.

    Raises:
        ValueError: If an id is duplicated or does not belong to the stage
    """
    current_prompt_ids = {a.prompt_id for a in stage.prompt_assignments}

    seen: set[str] = set()
    for item_id in item_ids:
        if item_id in seen:
            raise ValueError(f"Duplicate item id in order: {item_id}")
        seen.add(item_id)
        ref = parse_item_id(item_id, stage.id)
        if isinstance(ref, PromptRef) and ref.prompt_id not in current_prompt_ids:
            raise ValueError(f"Item '{item_id}' does not belong to stage '{stage.id}'")

    return stage.model_copy(update={"item_order": list(item_ids)})
