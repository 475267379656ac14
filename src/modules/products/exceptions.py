"""Product domain exceptions."""

from __future__ import annotations

from shared.domain.exceptions import DomainError, NotFound


class ProductAlreadyExists(DomainError):
    """A product with the same SKU already exists."""


class ProductNotFound(NotFound):
    """The requested product does not exist or has been soft-deleted."""

    kind = "Product"
