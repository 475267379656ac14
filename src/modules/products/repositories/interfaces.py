"""Product repository interface."""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Iterable, List, Optional
from uuid import UUID

from modules.core.repositories.interfaces import ILockingRepository

if TYPE_CHECKING:
    from modules.products.models import Product


class IProductRepository(ILockingRepository["Product"]):
    """Repository contract for the Product aggregate."""

    @abstractmethod
    def get_by_sku(self, sku: str) -> Optional[Product]:
        """Retrieve a product by SKU."""

    @abstractmethod
    def lock_many(self, ids: Iterable[UUID]) -> List[Product]:
        """Lock several products at once, always in ascending id order.

        Missing ids are simply absent from the result.
        """
