"""Read-model projection for Orders domain events.

The document is rebuilt from the current write model on every event, so
a late or repeated delivery can never roll the read model back to an
older status.
"""

from __future__ import annotations

from typing import Iterable, Optional, Union

import structlog

from modules.core.cache import CacheKeys
from modules.core.projections import ProjectionHandler
from modules.orders.events import OrderPlaced, OrderStatusChanged
from modules.orders.models import Order
from modules.orders.read_models import OrderReadModel

logger = structlog.get_logger(__name__)

OrderEvent = Union[OrderPlaced, OrderStatusChanged]


class OrderProjection(ProjectionHandler[OrderEvent]):
    """Handles ``OrderPlaced``, ``OrderStatusChanged`` and ``OrderCancelled``."""

    def build_document(self, event: OrderEvent) -> Optional[OrderReadModel]:
        order = (
            Order.objects.alive()
            .select_related("customer")
            .prefetch_related("items")
            .filter(id=event.order_id)
            .first()
        )
        if order is not None:
            return OrderReadModel.from_entity(order)
        if isinstance(event, OrderPlaced):
            return OrderReadModel.from_placed_event(event)
        logger.warning("order.projection_source_missing", order_id=str(event.order_id))
        return None

    def cache_keys(self, event: OrderEvent) -> Iterable[str]:
        return [CacheKeys.order(event.order_id)]

    def cache_patterns(self, event: OrderEvent) -> Iterable[str]:
        return [CacheKeys.orders_pattern(event.customer_id)]
