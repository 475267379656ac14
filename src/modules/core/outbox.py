"""Publishing side of the transactional outbox."""

from __future__ import annotations

from typing import Optional

import structlog

from modules.core.models import EventStatus, OutboxEvent
from shared.domain.bus import IEventBus
from shared.domain.events import DomainEvent

logger = structlog.get_logger(__name__)


def publish_outbox_event(
    bus: IEventBus,
    outbox: OutboxEvent,
    event: Optional[DomainEvent] = None,
) -> bool:
    """Publish one outbox row and record the outcome on it.

    Runs after the producing transaction has committed, so a broker
    failure here can never undo business data: it is logged, the row is
    marked ``FAILED`` and the relay picks it up later.
    """
    if outbox.status == EventStatus.PUBLISHED:
        return True

    log = logger.bind(
        outbox_id=str(outbox.id),
        event_name=outbox.event_type,
        aggregate_id=outbox.aggregate_id,
    )
    try:
        if event is None:
            event = DomainEvent.from_payload(outbox.payload)
        bus.publish(event)
    except Exception as exc:
        log.exception("outbox.publish_failed", retry_count=outbox.retry_count + 1)
        outbox.mark_as_failed(f"{type(exc).__name__}: {exc}")
        return False

    outbox.mark_as_published()
    log.info("outbox.published")
    return True


def relay_pending_events(
    bus: IEventBus, grace_seconds: int, max_retries: int, batch_size: int = 100
) -> dict:
    """Re-publish outbox rows whose post-commit publish never succeeded."""
    rows = list(OutboxEvent.objects.relayable(grace_seconds, max_retries)[:batch_size])
    published = failed = 0
    for outbox in rows:
        if publish_outbox_event(bus, outbox):
            published += 1
        else:
            failed += 1
    if rows:
        logger.info("outbox.relay_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
