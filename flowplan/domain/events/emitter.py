"""Dispatch of plan events to subscribed observers."""

import logging
from dataclasses import dataclass

from flowplan.domain.events.event import PlanEvent
from flowplan.domain.events.event_types import PlanEventType
from flowplan.domain.events.observer import PlanObserver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Subscription:
    observer: PlanObserver
    event_types: frozenset[PlanEventType] | None
    workflow_id: str | None

    def matches(self, event: PlanEvent) -> bool:
        if self.event_types is not None and event.event_type not in self.event_types:
            return False
        return self.workflow_id is None or self.workflow_id == event.workflow_id


class PlanEventEmitter:
    """Fans plan events out to observers in subscription order.

    A subscription can be narrowed by event type, by workflow id, or both.
    An observer subscribed more than once is notified once per matching
    subscription.
    """

    def __init__(self) -> None:
        self._subscriptions: list[_Subscription] = []

    def subscribe(
        self,
        observer: PlanObserver,
        event_types: list[PlanEventType] | None = None,
        *,
        workflow_id: str | None = None,
    ) -> None:
        if not isinstance(observer, PlanObserver):
            raise TypeError(f"{observer!r} has no on_event callback")
        types = frozenset(event_types) if event_types is not None else None
        self._subscriptions.append(_Subscription(observer, types, workflow_id))

    def unsubscribe(self, observer: PlanObserver) -> None:
        """Drop every subscription held by ``observer``."""
        self._subscriptions = [s for s in self._subscriptions if s.observer is not observer]

    def emit(self, event: PlanEvent) -> None:
        for subscription in list(self._subscriptions):
            if subscription.matches(event):
                self._safe_notify(subscription.observer, event)

    def _safe_notify(self, observer: PlanObserver, event: PlanEvent) -> None:
        try:
            observer.on_event(event)
        except Exception as e:
            logger.warning("Observer %r failed on %s: %s", observer, event.event_type.value, e)
