"""Denormalized order document stored in the ``orders`` index."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from modules.customers.read_models import CustomerSummary
from modules.orders.constants import OrderStatus

if TYPE_CHECKING:
    from modules.orders.events import OrderPlaced
    from modules.orders.models import Order


class OrderItemReadModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: UUID
    product_name: str
    quantity: int
    unit_price: Decimal
    discount: Decimal
    line_total: Decimal
    currency: str


class OrderReadModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    order_number: Optional[str] = None
    customer_id: UUID
    customer: Optional[CustomerSummary] = None
    status: str
    status_name: str
    currency: str
    total_amount: Decimal
    item_count: int
    items: List[OrderItemReadModel] = []
    shipping_address: str
    billing_address: Optional[str] = None
    cancellation_reason: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    confirmed_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None

    @classmethod
    def from_entity(cls, order: Order) -> OrderReadModel:
        items = [
            OrderItemReadModel(
                product_id=line.product_id,
                product_name=line.product_name,
                quantity=line.quantity,
                unit_price=line.unit_price,
                discount=line.discount,
                line_total=line.line_total,
                currency=line.currency,
            )
            for line in order.lines
        ]
        return cls(
            id=order.id,
            order_number=order.order_number,
            customer_id=order.customer_id,
            customer=CustomerSummary.from_entity(order.customer),
            status=order.status,
            status_name=OrderStatus(order.status).label,
            currency=order.currency,
            total_amount=order.total_amount,
            item_count=order.total_item_count,
            items=items,
            shipping_address=order.shipping_address,
            billing_address=order.billing_address,
            cancellation_reason=order.cancellation_reason,
            created_at=order.created_at,
            updated_at=order.updated_at,
            confirmed_at=order.confirmed_at,
            shipped_at=order.shipped_at,
            delivered_at=order.delivered_at,
            cancelled_at=order.cancelled_at,
        )

    @classmethod
    def from_placed_event(cls, event: OrderPlaced) -> OrderReadModel:
        """Snapshot carried by the event, used when the order row is not readable."""
        return cls(
            id=event.order_id,
            customer_id=event.customer_id,
            status=OrderStatus.PENDING.value,
            status_name=OrderStatus.PENDING.label,
            currency=event.currency,
            total_amount=event.total_amount,
            item_count=event.item_count,
            shipping_address=event.shipping_address,
            created_at=event.occurred_on,
            updated_at=event.occurred_on,
        )
