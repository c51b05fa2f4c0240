from pathlib import Path
import json
import logging
from typing import Any

from pydantic import ValidationError

from flowplan.domain.constants import (
    DEFAULT_WORKFLOWS_DIR,
    WORKFLOW_FILE_SUFFIX,
    WORKFLOW_TEMP_SUFFIX,
)
from flowplan.domain.errors import RepositoryError
from flowplan.domain.item_order import apply_item_order
from flowplan.domain.models.workflow import Workflow, fold_legacy_multi_agent_chat

logger = logging.getLogger(__name__)


class WorkflowStore:
    """File-backed workflow repository: one JSON document per workflow"""

    def __init__(self, workflows_root: Path | None = None):
        """
        Initialize the workflow store.

        Args:
            workflows_root: Directory holding <workflow_id>.json files
                (default: .flowplan/workflows)
        """
        self.workflows_root = workflows_root or DEFAULT_WORKFLOWS_DIR

    def _path_for(self, workflow_id: str) -> Path:
        if not workflow_id or "/" in workflow_id or "\\" in workflow_id or workflow_id in {".", ".."}:
            raise RepositoryError(f"Invalid workflow id: {workflow_id!r}")
        return self.workflows_root / f"{workflow_id}{WORKFLOW_FILE_SUFFIX}"

    def get_workflow(self, workflow_id: str) -> Workflow | None:
        """
        Load a workflow document.

        Args:
            workflow_id: The workflow identifier

        Returns:
            The workflow with stages sorted by order, or None if absent

        Raises:
            RepositoryError: If the document cannot be read or is invalid
        """
        path = self._path_for(workflow_id)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            raise RepositoryError(f"Failed to read workflow '{workflow_id}': {e}") from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise RepositoryError(f"Malformed workflow document {path}: {e}") from e

        workflow = self._deserialize(data, source=path)
        if workflow.id != workflow_id:
            raise RepositoryError(
                f"Workflow document {path} declares id '{workflow.id}'"
            )
        return workflow

    def list_workflows(self) -> list[Workflow]:
        """
        Load every workflow in the store, sorted by id.

        Raises:
            RepositoryError: If any document is invalid
        """
        if not self.workflows_root.exists():
            return []

        workflows = []
        for path in sorted(self.workflows_root.glob(f"*{WORKFLOW_FILE_SUFFIX}")):
            workflow = self.get_workflow(path.name[: -len(WORKFLOW_FILE_SUFFIX)])
            if workflow is not None:
                workflows.append(workflow)
        return workflows

    def save(self, workflow: Workflow) -> Path:
        """
        Save a workflow document atomically.

        Returns:
            Path to the written document
        """
        path = self._path_for(workflow.id)
        self.workflows_root.mkdir(parents=True, exist_ok=True)
        temp_file = path.with_suffix(WORKFLOW_TEMP_SUFFIX)

        data = workflow.model_dump(mode="json")
        try:
            # Write atomically - write to temp, then rename
            with open(temp_file, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            temp_file.replace(path)
        except OSError as e:
            raise RepositoryError(f"Failed to write workflow '{workflow.id}': {e}") from e

        return path

    def save_item_order(self, workflow_id: str, stage_id: str, item_ids: list[str]) -> None:
        """
        Persist a custom item order for one stage.

        Raises:
            RepositoryError: If the workflow or stage does not exist
            ValueError: If item_ids references items outside the stage
        """
        workflow = self.get_workflow(workflow_id)
        if workflow is None:
            raise RepositoryError(f"Workflow '{workflow_id}' not found")
        stage = workflow.find_stage(stage_id)
        if stage is None:
            raise RepositoryError(f"Stage '{stage_id}' not found in workflow '{workflow_id}'")

        updated = apply_item_order(stage, item_ids)
        stages = [updated if s.id == stage_id else s for s in workflow.stages]
        self.save(workflow.model_copy(update={"stages": stages}))
        logger.debug("Saved item order for %s/%s: %s", workflow_id, stage_id, item_ids)

    def _deserialize(self, data: Any, *, source: Path) -> Workflow:
        if not isinstance(data, dict):
            raise RepositoryError(f"Workflow document {source} must be a JSON object")

        try:
            workflow = Workflow(**fold_legacy_multi_agent_chat(data))
        except (TypeError, AttributeError, ValidationError) as e:
            raise RepositoryError(f"Invalid workflow document {source}: {e}") from e

        stages = [
            stage.model_copy(update={"prompt_assignments": stage.sorted_assignments()})
            for stage in workflow.sorted_stages()
        ]
        return workflow.model_copy(update={"stages": stages})
