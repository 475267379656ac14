"""Customer domain exceptions."""

from __future__ import annotations

from shared.domain.exceptions import DomainError, NotFound


class CustomerAlreadyExists(DomainError):
    """A customer with the same email already exists."""


class CustomerNotFound(NotFound):
    """The requested customer does not exist or has been soft-deleted."""

    kind = "Customer"
