"""Asynchronous tasks of the core module: event delivery and outbox relay."""

import structlog
from celery import shared_task
from django.conf import settings

from modules.core.apps import get_event_bus
from modules.core.outbox import relay_pending_events
from shared.domain.events import get_event_class

logger = structlog.get_logger(__name__)


@shared_task(
    bind=True,
    name="core.deliver_domain_event",
    acks_late=True,
    reject_on_worker_lost=True,
    autoretry_for=(Exception,),
    retry_backoff=True,
    retry_backoff_max=600,
    retry_jitter=True,
    max_retries=getattr(settings, "EVENT_DELIVERY_MAX_RETRIES", 5),
)
def deliver_domain_event(self, event_name: str, payload: dict) -> dict:
    """Rehydrate a published event and run its subscribers.

    The message is acknowledged only after every handler returned, so a
    worker crash or a handler exception leads to redelivery.
    """
    try:
        event_class = get_event_class(event_name)
    except LookupError:
        logger.error("event_delivery.unknown_event", event_name=event_name)
        return {"event_name": event_name, "handlers": 0}

    event = event_class.from_payload(payload)
    with structlog.contextvars.bound_contextvars(
        event_id=str(event.event_id),
        event_name=event_name,
        delivery_attempt=self.request.retries,
    ):
        handled = get_event_bus().dispatch(event)
        logger.info("event_delivery.completed", handlers=handled)
    return {"event_id": str(event.event_id), "event_name": event_name, "handlers": handled}


@shared_task(name="core.relay_outbox_events")
def relay_outbox_events(batch_size: int = 100) -> dict:
    """Periodic safety net for events whose post-commit publish failed."""
    return relay_pending_events(
        get_event_bus(),
        grace_seconds=settings.OUTBOX_RELAY_GRACE_SECONDS,
        max_retries=settings.OUTBOX_MAX_RETRIES,
        batch_size=batch_size,
    )
