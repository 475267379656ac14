"""Unit of Work over a single ``transaction.atomic()`` block.

Usage::

    with DjangoUnitOfWork(event_bus) as uow:
        order = uow.orders.get_for_update(order_id)
        order.confirm()
        uow.orders.update(order)
        uow.save_changes()

Everything registered through the repositories is written by
``save_changes()``; leaving the block without an exception commits,
leaving it with one rolls every write back.  Domain events collected on
the saved aggregates become outbox rows in the same transaction and are
published only once the outermost transaction has committed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property, partial
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

import structlog
from django.db import transaction

from modules.core.models import OutboxEvent
from modules.core.outbox import publish_outbox_event
from shared.domain.events import DomainEvent

if TYPE_CHECKING:
    from modules.core.repositories.django_repository import DjangoRepository
    from modules.customers.repositories.interfaces import ICustomerRepository
    from modules.orders.repositories.interfaces import IOrderRepository
    from modules.products.repositories.interfaces import IProductRepository
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)

INSERT = "insert"
UPDATE = "update"
DELETE = "delete"


class IUnitOfWork(ABC):
    """Transactional boundary exposing one repository per aggregate."""

    orders: IOrderRepository
    products: IProductRepository
    customers: ICustomerRepository

    @abstractmethod
    def __enter__(self) -> IUnitOfWork: ...

    @abstractmethod
    def __exit__(self, exc_type, exc, tb) -> Optional[bool]: ...

    @abstractmethod
    def save_changes(self) -> int:
        """Persist registered work; returns the number of rows written."""

    @abstractmethod
    def rollback(self) -> None:
        """Discard registered work and mark the transaction for rollback."""


class DjangoUnitOfWork(IUnitOfWork):
    """Django ORM unit of work."""

    def __init__(self, event_bus: Optional[IEventBus] = None, using: Optional[str] = None) -> None:
        self._event_bus = event_bus
        self._using = using
        self._atomic: Optional[transaction.Atomic] = None
        # keyed by id(entity) so registering the same aggregate twice is a no-op
        self._pending: Dict[int, Tuple[DjangoRepository, Any, str]] = {}
        self._staged_events: List[DomainEvent] = []

    # ------------------------------------------------------------------
    # Repositories
    # ------------------------------------------------------------------

    @cached_property
    def orders(self) -> IOrderRepository:
        from modules.orders.repositories import OrderDjangoRepository

        return OrderDjangoRepository(self)

    @cached_property
    def products(self) -> IProductRepository:
        from modules.products.repositories import ProductDjangoRepository

        return ProductDjangoRepository(self)

    @cached_property
    def customers(self) -> ICustomerRepository:
        from modules.customers.repositories import CustomerDjangoRepository

        return CustomerDjangoRepository(self)

    # ------------------------------------------------------------------
    # Context management
    # ------------------------------------------------------------------

    def __enter__(self) -> DjangoUnitOfWork:
        if self._atomic is not None:
            raise RuntimeError("Unit of work is already active.")
        self._atomic = transaction.atomic(using=self._using)
        self._atomic.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        atomic, self._atomic = self._atomic, None
        if exc_type is None and self._pending:
            logger.warning("uow.unsaved_changes_discarded", count=len(self._pending))
        self._pending.clear()
        return atomic.__exit__(exc_type, exc, tb)

    @property
    def is_active(self) -> bool:
        return self._atomic is not None

    # ------------------------------------------------------------------
    # Registration (called by repositories)
    # ------------------------------------------------------------------

    def register(self, repository: DjangoRepository, entity: Any, operation: str) -> None:
        self._ensure_active()
        key = id(entity)
        current = self._pending.get(key)
        if current is not None and current[2] == INSERT and operation == UPDATE:
            return
        self._pending[key] = (repository, entity, operation)

    # ------------------------------------------------------------------
    # Commit / rollback
    # ------------------------------------------------------------------

    def save_changes(self) -> int:
        self._ensure_active()
        rows = 0
        for repository, entity, operation in list(self._pending.values()):
            rows += repository.persist(entity, operation)
            events = getattr(entity, "domain_events", [])
            for event in events:
                self._stage_event(event, topic=repository.topic)
            if events:
                entity.clear_domain_events()
        self._pending.clear()
        logger.debug("uow.changes_saved", rows=rows)
        return rows

    def rollback(self) -> None:
        self._ensure_active()
        self._pending.clear()
        self._staged_events.clear()
        transaction.set_rollback(True, using=self._using)

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _stage_event(self, event: DomainEvent, topic: str) -> None:
        outbox = OutboxEvent.objects.create(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=event.to_payload(),
            topic=topic,
        )
        self._staged_events.append(event)
        if self._event_bus is None:
            logger.debug("uow.event_left_for_relay", event_name=event.event_name)
            return
        transaction.on_commit(
            partial(publish_outbox_event, self._event_bus, outbox, event),
            using=self._using,
            robust=True,
        )

    @property
    def staged_events(self) -> List[DomainEvent]:
        """Events written to the outbox by this unit of work so far."""
        return list(self._staged_events)

    def _ensure_active(self) -> None:
        if self._atomic is None:
            raise RuntimeError("Unit of work used outside its 'with' block.")
