"""In-process publish/subscribe for domain events.

Handlers run one after another, in registration order, inside the task that
dispatched the event. A failing handler does not stop the others and does not
undo the write that triggered the event; its error is logged and returned in
the DispatchResult.
"""

from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from sqlalchemy.orm import Session

from quizhub.core.logging import get_logger

logger = get_logger(__name__)

EventHandler = Callable[[Session, dict[str, Any]], Awaitable[None]]


def event_key(event_name: Any) -> str:
    """Plain string key for an event name or Event member."""
    return getattr(event_name, "value", event_name)


@dataclass
class DispatchResult:
    """Outcome of one dispatch."""

    event_name: str
    handled: int = 0
    errors: list[Exception] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


class EventDispatcher:
    """Registry of event handlers."""

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_name: str, handler: EventHandler) -> None:
        self._handlers[event_key(event_name)].append(handler)

    def handlers(self, event_name: str) -> list[EventHandler]:
        return list(self._handlers.get(event_key(event_name), []))

    async def dispatch(
        self,
        db: Session,
        event_name: str,
        payload: dict[str, Any],
        raise_errors: bool = False,
    ) -> DispatchResult:
        """Await every handler for ``event_name``.

        Args:
            db: Session the handlers write through
            event_name: Event to dispatch
            payload: Event data passed to every handler
            raise_errors: Re-raise the first handler error after all handlers ran

        Returns:
            DispatchResult with the collected handler errors
        """
        name = event_key(event_name)
        result = DispatchResult(event_name=name)

        for handler in self.handlers(name):
            try:
                await handler(db, payload)
                result.handled += 1
            except Exception as e:
                db.rollback()
                logger.error(
                    "Event handler failed",
                    extra={"event": name, "handler": getattr(handler, "__name__", repr(handler))},
                    exc_info=True,
                )
                result.errors.append(e)

        if raise_errors and result.errors:
            raise result.errors[0]
        return result
