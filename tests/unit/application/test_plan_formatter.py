"""Tests for plan and step rendering."""

from flowplan.application.execution_plan_builder import ExecutionPlanBuilder
from flowplan.application.plan_formatter import format_execution_plan, format_step, step_type_label
from flowplan.domain.models.execution_plan import ExecutionPlan
from tests.fakes import InMemoryPromptRepository, InMemoryWorkflowRepository, make_stage, make_workflow


def _plan(*stages) -> ExecutionPlan:
    repo = InMemoryWorkflowRepository([make_workflow("wf", stages=list(stages))])
    return ExecutionPlanBuilder(repo, InMemoryPromptRepository()).build_execution_plan("wf")


class TestFormatExecutionPlan:
    def test_header(self) -> None:
        text = format_execution_plan(_plan(make_stage("S", with_review=True)))

        assert text.startswith("# Execution Plan: Bug Fix Flow")
        assert "**Total Steps:** 2" in text
        assert "**Multi-Agent Chat:** Disabled" in text

    def test_chat_enabled_in_header(self) -> None:
        text = format_execution_plan(_plan(make_stage("S", include_multi_agent_chat=True)))

        assert "**Multi-Agent Chat:** Enabled" in text

    def test_one_section_per_stage(self) -> None:
        text = format_execution_plan(
            _plan(
                make_stage("A", order=0, prompt_ids=["a", "b"], name="Analyze"),
                make_stage("B", order=1, prompt_ids=["c"], name="Fix"),
            )
        )

        assert text.count("## Stage ") == 2
        assert "## Stage 1: Analyze" in text
        assert "## Stage 2: Fix" in text
        assert text.index("### 1. Prompt a") < text.index("### 2. Prompt b") < text.index("## Stage 2: Fix")
        assert "### 3. Prompt c" in text

    def test_auto_items_marked(self) -> None:
        text = format_execution_plan(
            _plan(make_stage("S", with_review=True, include_multi_agent_chat=True))
        )

        assert "### 2. 🤖 Internal Agents Chat [AUTO]" in text
        assert "### 3. 📋 Handoff Memory Board [AUTO]" in text
        assert "> **Auto-attached prompt** - Coordinate parallel work through the internal chat." in text

    def test_mini_prompt_description_rendered(self) -> None:
        stage = make_stage("S")
        assignment = stage.prompt_assignments[0]
        prompt = assignment.prompt.model_copy(update={"description": "Reproduce the bug"})
        stage = stage.model_copy(
            update={"prompt_assignments": [assignment.model_copy(update={"prompt": prompt})]}
        )

        text = format_execution_plan(_plan(stage))

        assert "### 1. Prompt mp-1\n\nReproduce the bug" in text
        assert "[AUTO]" not in text

    def test_empty_plan(self) -> None:
        text = format_execution_plan(_plan(make_stage("S", prompt_ids=[])))

        assert "**Total Steps:** 0" in text
        assert "## Stage" not in text


class TestFormatStep:
    def test_mini_prompt_step(self) -> None:
        plan = _plan(make_stage("S", prompt_ids=["a", "b"], name="Analyze"))

        text = format_step(plan, plan.items[0], workflow_id="wf")

        assert text.startswith("# Step 1/2")
        assert "**Stage:** Analyze" in text
        assert "**Type:** Mini-prompt" in text
        assert "## Prompt a" in text
        assert "Content of a" in text
        assert "Strictly follow" in text
        assert '`workflow_id="wf"` and `current_step=1`' in text

    def test_auto_step_types(self) -> None:
        plan = _plan(make_stage("S", with_review=True, include_multi_agent_chat=True))

        chat = format_step(plan, plan.items[1], workflow_id="wf")
        board = format_step(plan, plan.items[2], workflow_id="wf")

        assert "**Type:** Multi-agent chat [AUTO]" in chat
        assert "**Type:** Memory board [AUTO]" in board
        assert "Strictly follow" not in board

    def test_available_context_echoed(self) -> None:
        plan = _plan(make_stage("S"))

        text = format_step(plan, plan.items[0], workflow_id="wf", available_context=["logs", "repro steps"])

        assert "**Available Context:** logs, repro steps" in text

    def test_no_context_line_without_context(self) -> None:
        plan = _plan(make_stage("S"))

        assert "Available Context" not in format_step(plan, plan.items[0], workflow_id="wf")

    def test_last_step_marks_completion(self) -> None:
        plan = _plan(make_stage("S"))

        text = format_step(plan, plan.items[0], workflow_id="wf")

        assert "**Workflow Complete:**" in text
        assert "get_next_step" not in text

    def test_step_type_label(self) -> None:
        plan = _plan(make_stage("S", with_review=True))

        assert [step_type_label(i) for i in plan.items] == ["Mini-prompt", "Memory board [AUTO]"]
