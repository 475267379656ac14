"""Domain events for the Orders bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from uuid import UUID

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class OrderPlaced(DomainEvent):
    """Raised once a new order and its stock deductions are committed."""

    customer_id: UUID
    total_amount: Decimal
    currency: str
    item_count: int
    shipping_address: str

    @property
    def order_id(self) -> UUID:
        return self.aggregate_id


@dataclass(frozen=True, kw_only=True)
class OrderStatusChanged(DomainEvent):
    """Raised when an order moves to CONFIRMED, SHIPPED or DELIVERED."""

    customer_id: UUID
    old_status: str
    new_status: str

    @property
    def order_id(self) -> UUID:
        return self.aggregate_id


@dataclass(frozen=True, kw_only=True)
class OrderCancelled(OrderStatusChanged):
    """Raised when an order is cancelled."""

    reason: str
    stock_restored: bool
