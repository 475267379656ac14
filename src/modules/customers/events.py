"""Domain events for the Customers bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional
from uuid import UUID

from shared.domain.events import DomainEvent


@dataclass(frozen=True, kw_only=True)
class CustomerRegistered(DomainEvent):
    """Raised when a new customer registers."""

    email: str
    first_name: str
    last_name: str
    phone_number: Optional[str] = None

    @property
    def customer_id(self) -> UUID:
        return self.aggregate_id
