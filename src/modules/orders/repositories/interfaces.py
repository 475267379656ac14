"""Order repository interface.

Extends the generic contract with a locking read: status changes and
cancellations must hold the order row while they decide what to do.
"""

from __future__ import annotations

from abc import abstractmethod
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from modules.core.repositories.interfaces import ILockingRepository

if TYPE_CHECKING:
    from modules.orders.models import Order


class IOrderRepository(ILockingRepository["Order"]):
    """Repository contract for the Order aggregate root.

    The aggregate includes its OrderItem children; adding an order
    persists its items in the same unit of work.
    """

    @abstractmethod
    def get_by_order_number(self, order_number: str) -> Optional[Order]:
        """Retrieve an order by its human-readable number."""

    @abstractmethod
    def get_for_update(self, id: UUID | str) -> Optional[Order]:
        """Retrieve an order with a row lock and its items loaded."""
