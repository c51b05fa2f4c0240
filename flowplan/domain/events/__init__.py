"""Plan event system for observer pattern notifications."""

from flowplan.domain.events.event_types import PlanEventType
from flowplan.domain.events.event import PlanEvent
from flowplan.domain.events.observer import PlanObserver
from flowplan.domain.events.emitter import PlanEventEmitter
from flowplan.domain.events.stderr_observer import StderrEventObserver

__all__ = [
    "PlanEventType",
    "PlanEvent",
    "PlanObserver",
    "PlanEventEmitter",
    "StderrEventObserver",
]
