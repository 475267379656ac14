"""Django ORM implementation of the Order repository.

Concurrency control on status updates uses ``select_for_update()``
(no ``version`` column exists on the model).
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

import structlog
from django.core.exceptions import ValidationError

from modules.core.repositories.django_repository import DjangoRepository
from modules.core.unit_of_work import INSERT
from modules.orders.models import Order, OrderItem
from modules.orders.repositories.interfaces import IOrderRepository

logger = structlog.get_logger(__name__)


class OrderDjangoRepository(DjangoRepository[Order], IOrderRepository):
    """Concrete Order repository backed by Django ORM."""

    model = Order
    topic = "orders"

    def get_by_id(self, id: UUID | str) -> Optional[Order]:
        """Retrieve an order with customer and items eager-loaded."""
        try:
            return (
                self._queryset()
                .select_related("customer")
                .prefetch_related("items")
                .filter(id=id)
                .first()
            )
        except (ValueError, ValidationError):
            return None

    def get_for_update(self, id: UUID | str) -> Optional[Order]:
        # lock only the orders row; items are read afterwards
        try:
            order = self._queryset().select_for_update().filter(id=id).first()
        except (ValueError, ValidationError):
            return None
        if order is not None:
            order._lines = list(order.items.order_by("product_id"))
        return order

    def get_by_order_number(self, order_number: str) -> Optional[Order]:
        return self._queryset().filter(order_number=order_number).first()

    def persist(self, entity: Order, operation: str) -> int:
        rows = super().persist(entity, operation)
        if operation == INSERT:
            lines = entity.lines
            for line in lines:
                line.order = entity
                line.save(force_insert=True)
            rows += len(lines)
            logger.info(
                "order.saved",
                order_id=str(entity.id),
                order_number=entity.order_number,
                item_count=len(lines),
            )
        return rows
