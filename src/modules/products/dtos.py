"""Product DTOs for the Service Layer.

Framework-agnostic data transfer objects using Pydantic v2.
DTOs are immutable (``frozen=True``).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CreateProductDTO(BaseModel):
    """Immutable DTO for product creation requests.

    Validates:
    - ``sku`` is a non-empty string (normalised to uppercase).
    - ``price`` is a Decimal greater than zero.
    - ``stock_quantity`` / ``minimum_stock_level`` are non-negative.
    - ``currency`` is a 3-letter code.
    """

    model_config = ConfigDict(frozen=True)

    sku: str
    name: str = Field(min_length=1, max_length=255)
    price: Decimal
    currency: str = "USD"
    description: str = ""
    stock_quantity: int = Field(default=0, ge=0)
    minimum_stock_level: int = Field(default=0, ge=0)
    category_id: Optional[UUID] = None
    is_featured: bool = False

    @field_validator("price")
    @classmethod
    def price_must_be_positive(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("Price must be greater than zero.")
        return v

    @field_validator("sku")
    @classmethod
    def sku_must_not_be_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("SKU must not be empty.")
        return v.strip().upper()

    @field_validator("currency")
    @classmethod
    def currency_must_be_iso_code(cls, v: str) -> str:
        v = v.strip().upper()
        if len(v) != 3 or not v.isalpha():
            raise ValueError("Currency must be a 3-letter ISO code.")
        return v
