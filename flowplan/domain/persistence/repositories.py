"""Collaborator interfaces consumed by the plan engine."""

from typing import Protocol

from flowplan.domain.models.workflow import PromptSummary, Workflow


class WorkflowRepository(Protocol):
    """Source of workflow records."""

    def get_workflow(self, workflow_id: str) -> Workflow | None:
        """Return the workflow, or None if it does not exist.

        Raises:
            RepositoryError: If storage cannot be read
        """
        ...

    def list_workflows(self) -> list[Workflow]:
        ...

    def save_item_order(self, workflow_id: str, stage_id: str, item_ids: list[str]) -> None:
        ...


class PromptRepository(Protocol):
    """Lookup of system-owned prompt templates."""

    def find_system_prompt_by_name(self, name: str) -> PromptSummary | None:
        ...
