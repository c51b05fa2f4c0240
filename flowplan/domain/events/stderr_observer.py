"""Stderr event observer for CLI integration."""

import click

from flowplan.domain.events.event import PlanEvent


class StderrEventObserver:
    """Emits events as structured lines to stderr."""

    def on_event(self, event: PlanEvent) -> None:
        """Emit event as structured line to stderr."""
        parts = [f"[EVENT] {event.event_type.value}", f"workflow={event.workflow_id}"]
        if event.stage_index is not None:
            parts.append(f"stage={event.stage_index}")
        if event.step_index is not None:
            parts.append(f"step={event.step_index}")
        for key, value in sorted(event.metadata.items()):
            parts.append(f"{key}={value}")
        click.echo(" ".join(parts), err=True)
