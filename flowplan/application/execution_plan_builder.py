"""ExecutionPlanBuilder - expands a workflow into a flat, indexable step list.

Per stage, in ascending stage order:
- each prompt assignment, in ascending assignment order;
- the Internal Agents Chat system prompt if the stage enables multi-agent chat;
- the Handoff Memory Board system prompt if the stage has review enabled.

Steps are indexed 0..N-1 across the whole workflow. Auto-prompt steps whose
system template cannot be found are omitted and reported on ``plan.skipped``.

With ``use_item_order`` the per-stage sequence is the stage's resolved item
order (see ``flowplan.domain.item_order``) instead of the canonical one.
"""

import logging

from flowplan.domain.events import PlanEvent, PlanEventEmitter, PlanEventType
from flowplan.domain.item_order import resolve_item_order
from flowplan.domain.models.auto_prompt import (
    AUTO_PROMPT_PRIORITY,
    DEFAULT_SYSTEM_PROMPT_NAMES,
    AutoPromptKind,
    AutoPromptResolution,
    ResolvedAutoPrompt,
    SkippedAutoPrompt,
)
from flowplan.domain.models.execution_plan import ExecutionPlan, ExecutionPlanItem, ItemType
from flowplan.domain.models.item_ref import AutoSlot, PromptRef, parse_item_id
from flowplan.domain.models.workflow import PromptAssignment, Stage, Workflow
from flowplan.domain.persistence.repositories import PromptRepository, WorkflowRepository

logger = logging.getLogger(__name__)


class ExecutionPlanBuilder:
    """Builds execution plans from repository state.

    Stateless between calls: every build re-reads the repositories.
    """

    def __init__(
        self,
        workflow_repository: WorkflowRepository,
        prompt_repository: PromptRepository,
        *,
        use_item_order: bool = False,
        system_prompt_names: dict[AutoPromptKind, str] | None = None,
        emitter: PlanEventEmitter | None = None,
    ) -> None:
        self.workflow_repository = workflow_repository
        self.prompt_repository = prompt_repository
        self.use_item_order = use_item_order
        self.system_prompt_names = {**DEFAULT_SYSTEM_PROMPT_NAMES, **(system_prompt_names or {})}
        self.emitter = emitter

    def build_execution_plan(self, workflow_id: str) -> ExecutionPlan | None:
        """Build the complete execution plan for a workflow.

        Returns:
            The plan, or None if the workflow does not exist

        Raises:
            RepositoryError: If a repository read fails
        """
        workflow = self.workflow_repository.get_workflow(workflow_id)
        if workflow is None:
            return None
        return self.build_for_workflow(workflow)

    def build_for_workflow(self, workflow: Workflow) -> ExecutionPlan:
        resolutions = {kind: self.resolve_auto_prompt(kind) for kind in AutoPromptKind}

        items: list[ExecutionPlanItem] = []
        skipped: list[SkippedAutoPrompt] = []

        for stage_index, stage in enumerate(workflow.sorted_stages()):
            for entry in self._stage_sequence(stage):
                if isinstance(entry, PromptAssignment):
                    items.append(_mini_prompt_item(len(items), stage_index, stage, entry))
                    continue

                resolution = resolutions[entry]
                if isinstance(resolution, ResolvedAutoPrompt):
                    items.append(_auto_prompt_item(len(items), stage_index, stage, resolution))
                else:
                    skip = resolution.model_copy(
                        update={"stage_index": stage_index, "stage_name": stage.name}
                    )
                    skipped.append(skip)
                    self._report_skip(workflow.id, skip)

        plan = ExecutionPlan(
            workflow_id=workflow.id,
            workflow_name=workflow.name,
            include_multi_agent_chat=any(s.include_multi_agent_chat for s in workflow.stages),
            total_steps=len(items),
            items=items,
            skipped=skipped,
        )

        logger.debug(
            "Built execution plan for %s: %d steps, %d skipped",
            workflow.id,
            plan.total_steps,
            len(skipped),
        )
        self._emit(
            PlanEvent(
                event_type=PlanEventType.PLAN_BUILT,
                workflow_id=workflow.id,
                metadata={"total_steps": plan.total_steps},
            )
        )
        return plan

    def get_step(self, workflow_id: str, index: int) -> ExecutionPlanItem | None:
        """Return step ``index`` of the workflow's plan, or None."""
        plan = self.build_execution_plan(workflow_id)
        if plan is None:
            return None
        return locate_step(plan, index)

    def resolve_auto_prompt(self, kind: AutoPromptKind) -> AutoPromptResolution:
        name = self.system_prompt_names[kind]
        prompt = self.prompt_repository.find_system_prompt_by_name(name)
        if prompt is None:
            return SkippedAutoPrompt(kind=kind, reason=f"System prompt '{name}' not found")
        return ResolvedAutoPrompt(kind=kind, prompt=prompt)

    def _stage_sequence(self, stage: Stage) -> list[PromptAssignment | AutoPromptKind]:
        if not self.use_item_order:
            sequence: list[PromptAssignment | AutoPromptKind] = list(stage.sorted_assignments())
            flags = {
                AutoPromptKind.MULTI_AGENT_CHAT: stage.include_multi_agent_chat,
                AutoPromptKind.MEMORY_BOARD: stage.with_review,
            }
            sequence.extend(kind for kind in AUTO_PROMPT_PRIORITY if flags[kind])
            return sequence

        assignments = {a.prompt_id: a for a in stage.prompt_assignments}
        sequence = []
        for item_id in resolve_item_order(stage).item_ids:
            ref = parse_item_id(item_id, stage.id)
            if isinstance(ref, AutoSlot):
                sequence.append(ref.kind)
            elif isinstance(ref, PromptRef):
                sequence.append(assignments[ref.prompt_id])
        return sequence

    def _report_skip(self, workflow_id: str, skip: SkippedAutoPrompt) -> None:
        # Callers decide whether a skip is worth a warning; see plan.skipped.
        self._emit(
            PlanEvent(
                event_type=PlanEventType.AUTO_PROMPT_SKIPPED,
                workflow_id=workflow_id,
                stage_index=skip.stage_index,
                metadata={"kind": skip.kind.value, "reason": skip.reason},
            )
        )

    def _emit(self, event: PlanEvent) -> None:
        if self.emitter is not None:
            self.emitter.emit(event)


def locate_step(plan: ExecutionPlan, index: int) -> ExecutionPlanItem | None:
    """Random access into a built plan; None outside ``0 <= index < total_steps``."""
    if 0 <= index < plan.total_steps:
        return plan.items[index]
    return None


def _mini_prompt_item(
    index: int, stage_index: int, stage: Stage, assignment: PromptAssignment
) -> ExecutionPlanItem:
    prompt = assignment.prompt
    return ExecutionPlanItem(
        index=index,
        type=ItemType.MINI_PROMPT,
        stage_index=stage_index,
        stage_name=stage.name,
        name=prompt.name,
        description=prompt.description or None,
        content=prompt.content,
    )


def _auto_prompt_item(
    index: int, stage_index: int, stage: Stage, resolution: ResolvedAutoPrompt
) -> ExecutionPlanItem:
    prompt = resolution.prompt
    return ExecutionPlanItem(
        index=index,
        type=ItemType.AUTO_PROMPT,
        stage_index=stage_index,
        stage_name=stage.name,
        name=prompt.name,
        description=prompt.description or None,
        content=prompt.content,
        is_auto_attached=True,
        auto_prompt_type=resolution.kind,
    )
