"""Order command DTOs.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).

- ``PlaceOrderItemDTO``: one line of a placement command.
- ``PlaceOrderDTO``: order placement (nested items).
- ``CancelOrderDTO``: cancellation with a mandatory reason.
- ``UpdateOrderStatusDTO``: generic status change request.
"""

from __future__ import annotations

from decimal import Decimal
from enum import StrEnum
from typing import List, Optional, Self
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from modules.orders.constants import MAX_ADDRESS_LENGTH, MAX_REASON_LENGTH


class OrderStatusEnum(StrEnum):
    """Order status values (framework-agnostic mirror of ``OrderStatus``)."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class PlaceOrderItemDTO(BaseModel):
    """A single order line.

    ``unit_price`` and ``discount`` are taken as given by the caller; the
    coordinator only flags a divergence from the catalog price.
    """

    model_config = ConfigDict(frozen=True)

    product_id: UUID
    product_name: str = Field(min_length=1, max_length=255)
    quantity: int
    unit_price: Decimal = Field(ge=0, max_digits=12, decimal_places=2)
    currency: str = "USD"
    discount: Decimal = Field(default=Decimal("0.00"), ge=0, max_digits=12, decimal_places=2)

    @field_validator("quantity")
    @classmethod
    def quantity_must_be_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("Quantity must be at least 1.")
        return v

    @field_validator("currency")
    @classmethod
    def currency_must_be_iso_code(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("Currency must be a 3-letter ISO code.")
        return v

    @model_validator(mode="after")
    def discount_within_line(self) -> Self:
        if self.discount > self.unit_price * self.quantity:
            raise ValueError("Discount cannot exceed the line amount.")
        return self


class PlaceOrderDTO(BaseModel):
    """Immutable DTO for order placement.

    Validates:
    - addresses are non-empty and bounded.
    - ``items`` contains at least one line, no product twice, one currency.
    """

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    customer_id: UUID
    shipping_address: str = Field(min_length=1, max_length=MAX_ADDRESS_LENGTH)
    billing_address: str = Field(min_length=1, max_length=MAX_ADDRESS_LENGTH)
    items: List[PlaceOrderItemDTO]

    @field_validator("items")
    @classmethod
    def items_must_not_be_empty(cls, v: List[PlaceOrderItemDTO]) -> List[PlaceOrderItemDTO]:
        if not v:
            raise ValueError("Order must have at least one item.")
        return v

    @model_validator(mode="after")
    def consistent_items(self) -> Self:
        product_ids = [item.product_id for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValueError("Duplicate product IDs are not allowed in the same order.")
        if len({item.currency for item in self.items}) > 1:
            raise ValueError("All order items must have the same currency.")
        return self


class CancelOrderDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    order_id: UUID
    reason: str = Field(min_length=1, max_length=MAX_REASON_LENGTH)


class UpdateOrderStatusDTO(BaseModel):
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    order_id: UUID
    new_status: OrderStatusEnum
    reason: Optional[str] = Field(default=None, max_length=MAX_REASON_LENGTH)

    @field_validator("new_status", mode="before")
    @classmethod
    def status_upper(cls, v):
        return v.upper() if isinstance(v, str) else v
