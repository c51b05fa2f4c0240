from pathlib import Path

import pytest

from flowplan.application.execution_plan_builder import ExecutionPlanBuilder
from tests.fakes import InMemoryPromptRepository, InMemoryWorkflowRepository


@pytest.fixture
def workflows_root(tmp_path: Path) -> Path:
    """Isolated workflows directory for tests.

    Tests should not write into the real project's .flowplan directory.
    """
    d = tmp_path / "workflows"
    d.mkdir(parents=True, exist_ok=True)
    return d


@pytest.fixture
def prompt_repository() -> InMemoryPromptRepository:
    """Prompt repository holding both system prompts."""
    return InMemoryPromptRepository()


@pytest.fixture
def workflow_repository() -> InMemoryWorkflowRepository:
    return InMemoryWorkflowRepository()


@pytest.fixture
def builder(
    workflow_repository: InMemoryWorkflowRepository,
    prompt_repository: InMemoryPromptRepository,
) -> ExecutionPlanBuilder:
    return ExecutionPlanBuilder(workflow_repository, prompt_repository)


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Prevent tests from reading the developer's ~/.flowplan/config.yml.

    If a test needs a user config, it should write one under the fake home.
    """
    home = tmp_path / "home"
    home.mkdir(exist_ok=True)
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
