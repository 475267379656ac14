"""Django ORM implementation of the Customer repository."""

from __future__ import annotations

from typing import Optional

import structlog

from modules.core.repositories.django_repository import DjangoRepository
from modules.core.unit_of_work import INSERT
from modules.customers.models import Customer, CustomerAddress
from modules.customers.repositories.interfaces import ICustomerRepository

logger = structlog.get_logger(__name__)


class CustomerDjangoRepository(DjangoRepository[Customer], ICustomerRepository):
    """Concrete Customer repository backed by Django ORM.

    Addresses staged on a new customer via ``pending_addresses`` are
    inserted together with it.
    """

    model = Customer
    topic = "customers"

    def get_by_email(self, email: str) -> Optional[Customer]:
        # unique across soft-deleted rows too, so look at every record
        return Customer.objects.filter(email__iexact=email.strip()).first()

    def persist(self, entity: Customer, operation: str) -> int:
        rows = super().persist(entity, operation)
        if operation == INSERT:
            addresses = getattr(entity, "pending_addresses", [])
            for address in addresses:
                address.customer = entity
            CustomerAddress.objects.bulk_create(addresses)
            rows += len(addresses)
            entity.pending_addresses = []
            logger.info("customer.saved", customer_id=str(entity.id), addresses=len(addresses))
        return rows
