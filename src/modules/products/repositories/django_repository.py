"""Django ORM implementation of the Product repository."""

from __future__ import annotations

from typing import Iterable, List, Optional
from uuid import UUID

import structlog

from modules.core.repositories.django_repository import DjangoRepository
from modules.products.models import Product
from modules.products.repositories.interfaces import IProductRepository

logger = structlog.get_logger(__name__)


class ProductDjangoRepository(DjangoRepository[Product], IProductRepository):
    """Concrete Product repository backed by Django ORM."""

    model = Product
    topic = "products"

    def get_by_sku(self, sku: str) -> Optional[Product]:
        return self._queryset().filter(sku=sku.strip().upper()).first()

    def lock_many(self, ids: Iterable[UUID]) -> List[Product]:
        # a single ordered SELECT ... FOR UPDATE acquires row locks in id
        # order, the same order every coordinator uses
        unique_ids = sorted({str(i) for i in ids})
        return list(
            self._queryset().select_for_update().filter(id__in=unique_ids).order_by("id")
        )

    def persist(self, entity: Product, operation: str) -> int:
        rows = super().persist(entity, operation)
        logger.debug(
            "product.persisted",
            product_id=str(entity.id),
            operation=operation,
            stock_quantity=entity.stock_quantity,
        )
        return rows
