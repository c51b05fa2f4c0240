"""Observer protocol for plan events."""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from flowplan.domain.events.event import PlanEvent


@runtime_checkable
class PlanObserver(Protocol):
    """Anything with an ``on_event`` callback.

    Observers run synchronously inside plan building and step serving, so
    they should return quickly. Exceptions are logged by the emitter.
    """

    def on_event(self, event: "PlanEvent") -> None:
        ...
