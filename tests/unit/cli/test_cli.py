import json
from pathlib import Path

from click.testing import CliRunner

from flowplan.application.auth import hash_token
from flowplan.domain.models.workflow import Visibility
from flowplan.domain.persistence.workflow_store import WorkflowStore
from flowplan.interface.cli.cli import cli
from tests.fakes import make_stage, make_workflow

SYSTEM_PROMPTS_YAML = """\
system_prompts:
  - id: sys-memory-board
    name: Handoff Memory Board
    description: Document phase completion and capture learnings.
    content: Update the memory board with what changed in this stage.
  - id: sys-multi-agent-chat
    name: Internal Agents Chat
    description: Coordinate parallel work through the internal chat.
    content: Post your progress to the internal agents chat.
"""


def _seed_project() -> None:
    """Write workflows, system prompts and tokens under ./.flowplan."""
    root = Path(".flowplan")
    store = WorkflowStore(workflows_root=root / "workflows")
    store.save(
        make_workflow(
            "bugfix",
            stages=[make_stage("S", prompt_ids=["a", "b"], with_review=True, include_multi_agent_chat=True)],
        )
    )
    store.save(
        make_workflow(
            "secret",
            name="Secret Flow",
            stages=[make_stage("P")],
            visibility=Visibility.PRIVATE,
        )
    )
    (root / "system-prompts.yml").write_text(SYSTEM_PROMPTS_YAML, encoding="utf-8")
    (root / "tokens.yml").write_text(
        f"tokens:\n  - user_id: alice\n    token_sha256: {hash_token('alice-token')}\n",
        encoding="utf-8",
    )


def test_cli_loads_and_help_works() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"], prog_name="flowplan")

    assert result.exit_code == 0
    assert "Usage: flowplan" in result.output


def test_select_prints_plan() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        result = runner.invoke(cli, ["select", "bugfix"])

    assert result.exit_code == 0
    assert "## Bug Fix Flow" in result.output
    assert "**Total Steps:** 4" in result.output
    assert "### 3. 🤖 Internal Agents Chat [AUTO]" in result.output
    assert "### 4. 📋 Handoff Memory Board [AUTO]" in result.output


def test_select_private_requires_token() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        anonymous = runner.invoke(cli, ["select", "secret"])
        owner = runner.invoke(cli, ["select", "secret", "--token", "alice-token"])

    assert anonymous.exit_code == 0
    assert anonymous.output.startswith("Authentication failed")
    assert owner.output.startswith("## Secret Flow")


def test_step_prints_step_with_context() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        result = runner.invoke(cli, ["step", "bugfix", "3", "--context", "logs", "--context", "diff"])

    assert result.exit_code == 0
    assert result.output.startswith("# Step 4/4")
    assert "**Type:** Memory board [AUTO]" in result.output
    assert "**Available Context:** logs, diff" in result.output


def test_step_out_of_range() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        result = runner.invoke(cli, ["step", "bugfix", "9"])

    assert result.output.strip() == "Step 9 not found. This workflow has 4 steps."


def test_step_emits_json_only() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        result = runner.invoke(cli, ["--json", "step", "bugfix", "0"])

    assert result.exit_code == 0
    obj = json.loads(result.output)
    assert obj["schema_version"] == 1
    assert obj["command"] == "step"
    assert obj["current_step"] == 0
    assert obj["text"].startswith("# Step 1/4")
    assert "error" not in obj
    assert result.output.count("\n") == 1


def test_list_hides_private_without_token() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        result = runner.invoke(cli, ["list"])

    assert result.exit_code == 0
    assert "`bugfix`" in result.output
    assert "secret" not in result.output


def test_order_prints_resolved_items() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        result = runner.invoke(cli, ["order", "bugfix", "S"])

    assert result.exit_code == 0
    assert result.output.splitlines() == [
        "1. a [mini-prompt] Prompt a",
        "2. b [mini-prompt] Prompt b",
        "3. multi-agent-chat-S [auto-prompt] Internal Agents Chat",
        "4. memory-board-S [auto-prompt] Handoff Memory Board",
    ]


def test_order_preview_without_chat() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        result = runner.invoke(cli, ["--json", "order", "bugfix", "S", "--no-multi-agent-chat"])

    obj = json.loads(result.output)
    assert obj["item_ids"] == ["a", "b", "memory-board-S"]
    assert obj["items"][2]["auto_prompt_type"] == "memory-board"


def test_order_unknown_stage() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        result = runner.invoke(cli, ["order", "bugfix", "nope"])

    assert result.exit_code == 1
    assert "Stage nope not found" in result.output


def test_reorder_persists_and_is_resolved() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        saved = runner.invoke(cli, ["reorder", "bugfix", "S", "memory-board-S", "b", "a"])
        order = runner.invoke(cli, ["--json", "order", "bugfix", "S"])
        stored = WorkflowStore(workflows_root=Path(".flowplan/workflows")).get_workflow("bugfix")

    assert saved.exit_code == 0
    assert "saved 3 item(s) for stage S" in saved.output
    assert stored.stages[0].item_order == ["memory-board-S", "b", "a"]
    assert json.loads(order.output)["item_ids"] == ["memory-board-S", "b", "a", "multi-agent-chat-S"]


def test_reorder_rejects_foreign_item_as_json() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        result = runner.invoke(cli, ["--json", "reorder", "bugfix", "S", "a", "memory-board-X"])

    assert result.exit_code == 1
    obj = json.loads(result.output)
    assert obj["exit_code"] == 1
    assert "does not belong" in obj["error"]


def test_use_item_order_config_changes_execution() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        Path(".flowplan/config.yml").write_text("use_item_order: true\n", encoding="utf-8")
        runner.invoke(cli, ["reorder", "bugfix", "S", "memory-board-S", "b", "a"])
        result = runner.invoke(cli, ["step", "bugfix", "0"])

    assert "**Type:** Memory board [AUTO]" in result.output


def test_malformed_config_reported() -> None:
    runner = CliRunner()
    with runner.isolated_filesystem():
        _seed_project()
        Path(".flowplan/config.yml").write_text("use_item_order: [\n", encoding="utf-8")
        result = runner.invoke(cli, ["select", "bugfix"])

    assert result.exit_code == 1
    assert "Malformed YAML" in result.output
