"""Order domain exceptions.

The order coordinators return these inside ``Result.failure``; the
generic ones (``InsufficientStock``, ``InvalidOrderState``...) live in
``shared.domain.exceptions`` and are re-exported here.
"""

from __future__ import annotations

from modules.customers.exceptions import CustomerNotFound
from modules.products.exceptions import ProductNotFound
from shared.domain.exceptions import (
    CommandValidationError,
    InsufficientStock,
    InvalidOrderState,
    InvalidRevertToPending,
    NotFound,
)


class OrderNotFound(NotFound):
    """The requested order does not exist or has been soft-deleted."""

    kind = "Order"


__all__ = [
    "CommandValidationError",
    "CustomerNotFound",
    "InsufficientStock",
    "InvalidOrderState",
    "InvalidRevertToPending",
    "OrderNotFound",
    "ProductNotFound",
]
