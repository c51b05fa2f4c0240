import click
import logging
from pathlib import Path
from typing import Any
from pydantic import BaseModel

from flowplan.application.config_loader import load_config, resolve_system_prompt_names
from flowplan.domain.events.emitter import PlanEventEmitter
from flowplan.interface.cli.output_models import (
    ListOutput,
    OrderOutput,
    ReorderOutput,
    SelectOutput,
    StepOutput,
)

logger = logging.getLogger(__name__)


def _json_emit(model: BaseModel) -> None:
    # Single-line JSON, omit None fields (e.g., SelectOutput.text on error).
    click.echo(model.model_dump_json(exclude_none=True), nl=True)


def _get_json_mode(ctx: click.Context) -> bool:
    obj = ctx.obj or {}
    return bool(obj.get("json", False))


def _load_cfg() -> dict[str, Any]:
    return load_config(project_root=Path.cwd(), user_home=Path.home())


def _emitter(events: bool) -> PlanEventEmitter:
    event_emitter = PlanEventEmitter()
    if events:
        from flowplan.domain.events.stderr_observer import StderrEventObserver
        event_emitter.subscribe(StderrEventObserver())
    return event_emitter


def _build_handlers(cfg: dict[str, Any], event_emitter: PlanEventEmitter):
    from flowplan.application.auth import TokenStore
    from flowplan.application.execution_plan_builder import ExecutionPlanBuilder
    from flowplan.application.tool_handlers import ToolHandlers
    from flowplan.domain.persistence.system_prompt_catalog import SystemPromptCatalog
    from flowplan.domain.persistence.workflow_store import WorkflowStore

    workflow_store = WorkflowStore(workflows_root=Path(cfg["workflows_dir"]))
    builder = ExecutionPlanBuilder(
        workflow_store,
        SystemPromptCatalog(Path(cfg["system_prompts_file"])),
        use_item_order=cfg["use_item_order"],
        system_prompt_names=resolve_system_prompt_names(cfg),
        emitter=event_emitter,
    )
    return ToolHandlers(
        workflow_store,
        builder,
        TokenStore(Path(cfg["tokens_file"])),
        emitter=event_emitter,
    )


def _workflow_store(cfg: dict[str, Any]):
    from flowplan.domain.persistence.workflow_store import WorkflowStore

    return WorkflowStore(workflows_root=Path(cfg["workflows_dir"]))


@click.group(help="Workflow execution plan CLI.")
@click.option("--json", "json_output", is_flag=True, help="Emit machine-readable JSON on stdout.")
@click.option("--verbose", is_flag=True, help="Log debug output to stderr.")
@click.pass_context
def cli(ctx: click.Context, json_output: bool, verbose: bool) -> None:
    ctx.ensure_object(dict)
    ctx.obj["json"] = bool(json_output)
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@cli.command("select")
@click.argument("workflow_id", type=str)
@click.option("--token", "user_token", required=False, type=str, help="User API token.")
@click.option("--events", is_flag=True, help="Emit plan events to stderr.")
@click.pass_context
def select_cmd(ctx: click.Context, workflow_id: str, user_token: str | None, events: bool) -> None:
    try:
        handlers = _build_handlers(_load_cfg(), _emitter(events))
        text = handlers.select_workflow(workflow_id, user_token=user_token)

        if _get_json_mode(ctx):
            _json_emit(SelectOutput(exit_code=0, workflow_id=workflow_id, text=text))
            raise click.exceptions.Exit(0)

        click.echo(text)
    except click.exceptions.Exit:
        raise
    except Exception as e:
        if _get_json_mode(ctx):
            _json_emit(SelectOutput(exit_code=1, workflow_id=workflow_id, error=str(e)))
            raise click.exceptions.Exit(1)
        raise click.ClickException(str(e)) from e


@cli.command("step")
@click.argument("workflow_id", type=str)
@click.argument("current_step", type=int)
@click.option(
    "--context",
    "available_context",
    multiple=True,
    type=str,
    help="Context available to the agent (repeatable).",
)
@click.option("--token", "user_token", required=False, type=str, help="User API token.")
@click.option("--events", is_flag=True, help="Emit plan events to stderr.")
@click.pass_context
def step_cmd(
    ctx: click.Context,
    workflow_id: str,
    current_step: int,
    available_context: tuple[str, ...],
    user_token: str | None,
    events: bool,
) -> None:
    try:
        handlers = _build_handlers(_load_cfg(), _emitter(events))
        text = handlers.get_next_step(
            workflow_id,
            current_step,
            available_context=list(available_context) or None,
            user_token=user_token,
        )

        if _get_json_mode(ctx):
            _json_emit(
                StepOutput(
                    exit_code=0,
                    workflow_id=workflow_id,
                    current_step=current_step,
                    text=text,
                )
            )
            raise click.exceptions.Exit(0)

        click.echo(text)
    except click.exceptions.Exit:
        raise
    except Exception as e:
        if _get_json_mode(ctx):
            _json_emit(
                StepOutput(
                    exit_code=1,
                    workflow_id=workflow_id,
                    current_step=current_step,
                    error=str(e),
                )
            )
            raise click.exceptions.Exit(1)
        raise click.ClickException(str(e)) from e


@cli.command("list")
@click.option("--search", required=False, type=str, help="Filter by name or description.")
@click.option("--token", "user_token", required=False, type=str, help="User API token.")
@click.pass_context
def list_cmd(ctx: click.Context, search: str | None, user_token: str | None) -> None:
    try:
        handlers = _build_handlers(_load_cfg(), _emitter(False))
        text = handlers.list_workflows(search=search, user_token=user_token)

        if _get_json_mode(ctx):
            _json_emit(ListOutput(exit_code=0, text=text))
            raise click.exceptions.Exit(0)

        click.echo(text)
    except click.exceptions.Exit:
        raise
    except Exception as e:
        if _get_json_mode(ctx):
            _json_emit(ListOutput(exit_code=1, error=str(e)))
            raise click.exceptions.Exit(1)
        raise click.ClickException(str(e)) from e


@cli.command("order")
@click.argument("workflow_id", type=str)
@click.argument("stage_id", type=str)
@click.option(
    "--multi-agent-chat/--no-multi-agent-chat",
    "multi_agent_chat",
    default=None,
    help="Preview with multi-agent chat toggled (default: stage setting).",
)
@click.pass_context
def order_cmd(
    ctx: click.Context,
    workflow_id: str,
    stage_id: str,
    multi_agent_chat: bool | None,
) -> None:
    try:
        from flowplan.domain.item_order import resolve_item_order

        workflow = _workflow_store(_load_cfg()).get_workflow(workflow_id)
        if workflow is None:
            raise click.ClickException(f"Workflow {workflow_id} not found.")
        stage = workflow.find_stage(stage_id)
        if stage is None:
            raise click.ClickException(f"Stage {stage_id} not found in workflow {workflow_id}.")

        resolved = resolve_item_order(stage, include_multi_agent_chat=multi_agent_chat)

        if _get_json_mode(ctx):
            _json_emit(
                OrderOutput(
                    exit_code=0,
                    workflow_id=workflow_id,
                    stage_id=stage_id,
                    item_ids=resolved.item_ids,
                    items=resolved.descriptors(),
                )
            )
            raise click.exceptions.Exit(0)

        for position, item in enumerate(resolved.descriptors(), start=1):
            click.echo(f"{position}. {item.item_id} [{item.item_type.value}] {item.name}")
    except click.exceptions.Exit:
        raise
    except Exception as e:
        if _get_json_mode(ctx):
            message = e.message if isinstance(e, click.ClickException) else str(e)
            _json_emit(
                OrderOutput(exit_code=1, workflow_id=workflow_id, stage_id=stage_id, error=message)
            )
            raise click.exceptions.Exit(1)
        if isinstance(e, click.ClickException):
            raise
        raise click.ClickException(str(e)) from e


@cli.command("reorder")
@click.argument("workflow_id", type=str)
@click.argument("stage_id", type=str)
@click.argument("item_ids", nargs=-1, required=True, type=str)
@click.pass_context
def reorder_cmd(
    ctx: click.Context,
    workflow_id: str,
    stage_id: str,
    item_ids: tuple[str, ...],
) -> None:
    try:
        _workflow_store(_load_cfg()).save_item_order(workflow_id, stage_id, list(item_ids))
        logger.info("Saved item order for %s/%s", workflow_id, stage_id)

        if _get_json_mode(ctx):
            _json_emit(
                ReorderOutput(
                    exit_code=0,
                    workflow_id=workflow_id,
                    stage_id=stage_id,
                    item_ids=list(item_ids),
                )
            )
            raise click.exceptions.Exit(0)

        click.echo(f"saved {len(item_ids)} item(s) for stage {stage_id}")
    except click.exceptions.Exit:
        raise
    except Exception as e:
        if _get_json_mode(ctx):
            _json_emit(
                ReorderOutput(exit_code=1, workflow_id=workflow_id, stage_id=stage_id, error=str(e))
            )
            raise click.exceptions.Exit(1)
        raise click.ClickException(str(e)) from e
