"""Markdown rendering of execution plans for agent consumption."""

from flowplan.domain.models.auto_prompt import AutoPromptKind
from flowplan.domain.models.execution_plan import ExecutionPlan, ExecutionPlanItem, ItemType

AUTO_BADGE = "[AUTO]"

_AUTO_GLYPHS: dict[AutoPromptKind, str] = {
    AutoPromptKind.MULTI_AGENT_CHAT: "🤖",
    AutoPromptKind.MEMORY_BOARD: "📋",
}

_STEP_TYPE_LABELS: dict[AutoPromptKind, str] = {
    AutoPromptKind.MULTI_AGENT_CHAT: f"Multi-agent chat {AUTO_BADGE}",
    AutoPromptKind.MEMORY_BOARD: f"Memory board {AUTO_BADGE}",
}


def step_type_label(item: ExecutionPlanItem) -> str:
    if item.type == ItemType.AUTO_PROMPT and item.auto_prompt_type is not None:
        return _STEP_TYPE_LABELS[item.auto_prompt_type]
    return "Mini-prompt"


def format_execution_plan(plan: ExecutionPlan) -> str:
    """Render the whole plan, one section per stage."""
    lines = [
        f"# Execution Plan: {plan.workflow_name}",
        "",
        f"**Total Steps:** {plan.total_steps}",
        f"**Multi-Agent Chat:** {'Enabled' if plan.include_multi_agent_chat else 'Disabled'}",
        "",
        "---",
        "",
    ]

    current_stage: int | None = None
    for item in plan.items:
        if item.stage_index != current_stage:
            current_stage = item.stage_index
            lines += [f"## Stage {current_stage + 1}: {item.stage_name}", ""]

        if item.is_auto_attached and item.auto_prompt_type is not None:
            glyph = _AUTO_GLYPHS[item.auto_prompt_type]
            lines += [
                f"### {item.index + 1}. {glyph} {item.name} {AUTO_BADGE}",
                "",
                f"> **Auto-attached prompt** - {item.description or 'No description'}",
                "",
            ]
        else:
            lines += [f"### {item.index + 1}. {item.name}", ""]
            if item.description:
                lines += [item.description, ""]

    return "\n".join(lines)


def format_step(
    plan: ExecutionPlan,
    item: ExecutionPlanItem,
    *,
    workflow_id: str,
    available_context: list[str] | None = None,
) -> str:
    """Render a single step with its full content and navigation hint."""
    lines = [
        f"# Step {item.index + 1}/{plan.total_steps}",
        "",
        f"**Stage:** {item.stage_name}",
        f"**Type:** {step_type_label(item)}",
        "",
        f"## {item.name}",
        "",
    ]
    if item.description:
        lines += [item.description, ""]

    if item.content:
        lines += ["---", "", item.content, ""]
        if item.type == ItemType.MINI_PROMPT:
            lines += ["---", "", "**Important:** Strictly follow all the steps outlined above.", ""]

    if available_context:
        lines += ["---", "", f"**Available Context:** {', '.join(available_context)}", ""]

    next_index = item.index + 1
    lines += ["---", ""]
    if next_index < plan.total_steps:
        lines.append(
            f"**Next Step:** After completing this step, proceed to step "
            f"{next_index + 1}/{plan.total_steps} by calling `get_next_step` with "
            f'`workflow_id="{workflow_id}"` and `current_step={next_index}`.'
        )
    else:
        lines.append(
            "**Workflow Complete:** This is the final step. After completing it, "
            "the workflow execution is finished."
        )

    return "\n".join(lines)
