"""Event bus implementations.

- ``InMemoryEventBus``: synchronous in-process dispatch (dev and tests).
- ``CeleryEventBus``: serializes the event and enqueues a delivery task;
  the worker rehydrates it and dispatches to the same subscriber table.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Type

import structlog
from celery import current_app

from shared.domain.bus import IEventBus, IEventHandler
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)

DELIVER_EVENT_TASK = "core.deliver_domain_event"


class InMemoryEventBus(IEventBus):
    """Simple in-process event bus."""

    def __init__(self) -> None:
        self._handlers: Dict[Type[DomainEvent], List[IEventHandler]] = {}

    def subscribe(self, event_class: Type[DomainEvent], handler: IEventHandler) -> None:
        handlers = self._handlers.setdefault(event_class, [])
        if handler not in handlers:
            handlers.append(handler)

    def handlers_for(self, event_class: Type[DomainEvent]) -> List[IEventHandler]:
        return list(self._handlers.get(event_class, []))

    def dispatch(self, event: DomainEvent) -> int:
        """Run every handler subscribed to the event's exact type.

        Returns the number of handlers invoked.  A handler exception
        propagates to the caller so the transport can redeliver.
        """
        handlers = self.handlers_for(type(event))
        for handler in handlers:
            handler.handle(event)
        return len(handlers)

    def publish(self, event: DomainEvent) -> None:
        self.dispatch(event)


class CeleryEventBus(InMemoryEventBus):
    """Publishes through a Celery task; subscribers run on the worker."""

    def __init__(self, task_name: str = DELIVER_EVENT_TASK, app: Optional[Any] = None) -> None:
        super().__init__()
        self._task_name = task_name
        self._app = app

    @property
    def app(self) -> Any:
        return self._app or current_app

    def publish(self, event: DomainEvent) -> None:
        task = self.app.tasks[self._task_name]
        task.apply_async(
            args=(event.event_name, event.to_payload()),
            task_id=str(event.event_id),
        )
        logger.info(
            "event_bus.enqueued",
            event_name=event.event_name,
            event_id=str(event.event_id),
            aggregate_id=str(event.aggregate_id),
        )
