"""Agent-facing tool operations.

Each handler returns text and never raises: not-found, authorization and
storage failures are all reported as messages so one bad request cannot
take down the host process.
"""

import logging

from flowplan.application.auth import TokenAuthenticator
from flowplan.application.execution_plan_builder import ExecutionPlanBuilder, locate_step
from flowplan.application.plan_formatter import format_execution_plan, format_step
from flowplan.domain.errors import RepositoryError
from flowplan.domain.events import PlanEvent, PlanEventEmitter, PlanEventType
from flowplan.domain.models.execution_plan import ExecutionPlan
from flowplan.domain.models.workflow import Workflow
from flowplan.domain.persistence.repositories import WorkflowRepository

logger = logging.getLogger(__name__)


class AccessDenied(Exception):
    """Raised internally when a caller may not read a workflow."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


def authentication_failed(reason: str) -> str:
    return f"Authentication failed: {reason}"


def workflow_not_found(workflow_id: str) -> str:
    return f"Workflow {workflow_id} not found."


def step_not_found(current_step: int, total_steps: int) -> str:
    return f"Step {current_step} not found. This workflow has {total_steps} steps."


def storage_failure(workflow_id: str) -> str:
    return f'Error: failed to load workflow "{workflow_id}".'


class ToolHandlers:
    """select_workflow / get_next_step / list_workflows over one repository."""

    def __init__(
        self,
        workflow_repository: WorkflowRepository,
        plan_builder: ExecutionPlanBuilder,
        authenticator: TokenAuthenticator,
        *,
        emitter: PlanEventEmitter | None = None,
    ) -> None:
        self.workflow_repository = workflow_repository
        self.plan_builder = plan_builder
        self.authenticator = authenticator
        self.emitter = emitter

    def select_workflow(self, workflow_id: str, user_token: str | None = None) -> str:
        try:
            workflow = self._load_authorized(workflow_id, user_token)
            if isinstance(workflow, str):
                return workflow
            plan = self._build_plan(workflow)
        except RepositoryError:
            logger.exception("select_workflow failed for %s", workflow_id)
            return storage_failure(workflow_id)

        header = [f"## {workflow.name}", ""]
        if workflow.description:
            header += [f"**Description:** {workflow.description}", ""]
        header += [
            f"**Stages:** {len(workflow.stages)}",
            f"**Total Steps:** {plan.total_steps}",
            "",
        ]
        if plan.total_steps:
            header += [
                f'To begin, call `get_next_step` with `workflow_id="{workflow.id}"` '
                f"and `current_step=0`.",
                "",
            ]
        else:
            header += ["This workflow has no steps to execute.", ""]

        return "\n".join(header) + "\n" + format_execution_plan(plan)

    def get_next_step(
        self,
        workflow_id: str,
        current_step: int,
        available_context: list[str] | None = None,
        user_token: str | None = None,
    ) -> str:
        try:
            workflow = self._load_authorized(workflow_id, user_token)
            if isinstance(workflow, str):
                return workflow
            plan = self._build_plan(workflow)
        except RepositoryError:
            logger.exception("get_next_step failed for %s", workflow_id)
            return storage_failure(workflow_id)

        item = locate_step(plan, current_step)
        if item is None:
            return step_not_found(current_step, plan.total_steps)

        self._emit(
            PlanEvent(
                event_type=PlanEventType.STEP_SERVED,
                workflow_id=workflow_id,
                step_index=item.index,
                stage_index=item.stage_index,
            )
        )
        return format_step(
            plan,
            item,
            workflow_id=workflow_id,
            available_context=available_context,
        )

    def list_workflows(self, search: str | None = None, user_token: str | None = None) -> str:
        try:
            user_id = None
            if user_token:
                validation = self.authenticator.validate_token(user_token)
                if not validation.valid:
                    return authentication_failed(validation.error or "invalid token")
                user_id = validation.user_id
            workflows = self.workflow_repository.list_workflows()
        except RepositoryError:
            logger.exception("list_workflows failed")
            return "Error: failed to list workflows."

        visible = [
            w for w in workflows
            if w.is_active and (w.is_public or (user_id is not None and w.owner_id == user_id))
        ]
        if search:
            needle = search.lower()
            visible = [
                w for w in visible
                if needle in w.name.lower() or needle in (w.description or "").lower()
            ]

        if not visible:
            return "No workflows found."

        lines = [f"# Workflows ({len(visible)})", ""]
        for w in visible:
            line = f"- **{w.name}** (`{w.id}`): {len(w.stages)} stage(s)"
            if w.description:
                line += f". {w.description}"
            lines.append(line)
        return "\n".join(lines)

    def _load_authorized(self, workflow_id: str, user_token: str | None) -> Workflow | str:
        """Return the workflow, or the message to send back instead."""
        workflow = self.workflow_repository.get_workflow(workflow_id)
        if workflow is None:
            self._emit(PlanEvent(event_type=PlanEventType.WORKFLOW_NOT_FOUND, workflow_id=workflow_id))
            return workflow_not_found(workflow_id)

        try:
            self._check_access(workflow, user_token)
        except AccessDenied as e:
            self._emit(
                PlanEvent(
                    event_type=PlanEventType.AUTHENTICATION_FAILED,
                    workflow_id=workflow_id,
                    metadata={"reason": e.reason},
                )
            )
            return authentication_failed(e.reason)
        return workflow

    def _check_access(self, workflow: Workflow, user_token: str | None) -> None:
        user_id = None
        if user_token:
            validation = self.authenticator.validate_token(user_token)
            if validation.valid:
                user_id = validation.user_id
            elif not workflow.is_public:
                raise AccessDenied(validation.error or "invalid token")

        if workflow.is_public:
            return
        if user_id is None:
            raise AccessDenied("a valid user token is required for this workflow")
        if workflow.owner_id != user_id:
            raise AccessDenied("you do not have access to this workflow")

    def _build_plan(self, workflow: Workflow) -> ExecutionPlan:
        plan = self.plan_builder.build_for_workflow(workflow)
        for skip in plan.skipped:
            logger.warning(
                "Omitted %s step from stage %s of workflow %s: %s",
                skip.kind.value,
                skip.stage_index,
                workflow.id,
                skip.reason,
            )
        return plan

    def _emit(self, event: PlanEvent) -> None:
        if self.emitter is not None:
            self.emitter.emit(event)
