"""Read-model projections for Customers domain events."""

from __future__ import annotations

from typing import Iterable

from modules.core.cache import CacheKeys
from modules.core.projections import ProjectionHandler
from modules.customers.events import CustomerRegistered
from modules.customers.read_models import CustomerReadModel


class CustomerRegisteredProjection(ProjectionHandler[CustomerRegistered]):
    """A fresh customer document: default profile, empty statistics."""

    def build_document(self, event: CustomerRegistered) -> CustomerReadModel:
        return CustomerReadModel(
            id=event.customer_id,
            first_name=event.first_name,
            last_name=event.last_name,
            full_name=f"{event.first_name} {event.last_name}".strip(),
            email=event.email,
            phone_number=event.phone_number,
            registration_date=event.occurred_on,
            created_at=event.occurred_on,
            updated_at=event.occurred_on,
        )

    def cache_keys(self, event: CustomerRegistered) -> Iterable[str]:
        return [CacheKeys.customer(event.customer_id)]

    def cache_patterns(self, event: CustomerRegistered) -> Iterable[str]:
        return [CacheKeys.customers_pattern()]
