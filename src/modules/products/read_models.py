"""Denormalized product document stored in the ``products`` index."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.products.models import Product


class ProductReadModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    name: str
    sku: str = ""
    description: str = ""
    price: Decimal
    currency: str
    stock_quantity: int
    minimum_stock_level: int = 0
    category_id: Optional[UUID] = None
    is_active: bool = True
    is_featured: bool = False
    is_in_stock: bool
    is_low_stock: bool
    is_out_of_stock: bool
    tags: List[str] = []
    suggest: List[str] = []
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, product: Product) -> ProductReadModel:
        return cls(
            id=product.id,
            name=product.name,
            sku=product.sku,
            description=product.description,
            price=product.price,
            currency=product.currency,
            stock_quantity=product.stock_quantity,
            minimum_stock_level=product.minimum_stock_level,
            category_id=product.category_id,
            is_active=product.is_active,
            is_featured=product.is_featured,
            is_in_stock=product.is_in_stock,
            is_low_stock=product.is_low_stock,
            is_out_of_stock=product.is_out_of_stock,
            suggest=[product.name],
            created_at=product.created_at,
            updated_at=product.updated_at,
        )
