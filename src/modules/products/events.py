"""Domain events for the Products bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional
from uuid import UUID

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class ProductCreated(DomainEvent):
    """Raised when a product is added to the catalog."""

    name: str
    sku: str
    price: Decimal
    currency: str
    stock_quantity: int
    category_id: Optional[UUID] = None

    @property
    def product_id(self) -> UUID:
        return self.aggregate_id


@dataclass(frozen=True, kw_only=True)
class ProductStockUpdated(DomainEvent):
    """Raised after an order placement or cancellation moved stock."""

    previous_stock: int
    new_stock: int
    reason: str

    @property
    def product_id(self) -> UUID:
        return self.aggregate_id
