"""Customer service layer (Use Cases).

Registration is the only write the order engine needs from this
module: it creates the aggregate and announces it with
``CustomerRegistered`` so the customer read model gets built.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Mapping, Optional, Union

import structlog
from pydantic import ValidationError as PydanticValidationError

from modules.core.unit_of_work import DjangoUnitOfWork
from modules.customers.dtos import RegisterCustomerDTO
from modules.customers.events import CustomerRegistered
from modules.customers.exceptions import CustomerAlreadyExists
from modules.customers.models import Customer, CustomerAddress, default_preferences
from shared.domain.exceptions import CommandValidationError

if TYPE_CHECKING:
    from modules.core.unit_of_work import IUnitOfWork
    from shared.domain.bus import IEventBus

logger = structlog.get_logger(__name__)


class CustomerService:
    """Application service for Customer use-cases."""

    def __init__(
        self,
        event_bus: Optional[IEventBus],
        unit_of_work_factory: Callable[..., IUnitOfWork] = DjangoUnitOfWork,
    ) -> None:
        self._event_bus = event_bus
        self._uow_factory = unit_of_work_factory

    def register_customer(self, dto: Union[RegisterCustomerDTO, Mapping[str, Any]]) -> Customer:
        """Register a new customer.

        Raises:
            CommandValidationError: malformed input.
            CustomerAlreadyExists: the email is already registered.
        """
        if not isinstance(dto, RegisterCustomerDTO):
            try:
                dto = RegisterCustomerDTO.model_validate(dto)
            except PydanticValidationError as exc:
                raise CommandValidationError.from_pydantic(exc) from exc

        log = logger.bind(email=dto.email)
        with self._uow_factory(self._event_bus) as uow:
            if uow.customers.get_by_email(dto.email):
                log.warning("customer.duplicate_email")
                raise CustomerAlreadyExists("Email already registered.")

            preferences = default_preferences()
            preferences.update(
                preferred_language=dto.preferred_language,
                preferred_currency=dto.preferred_currency.upper(),
            )
            customer = Customer(
                first_name=dto.first_name,
                last_name=dto.last_name,
                email=dto.email,
                phone=dto.phone or "",
                preferences=preferences,
            )
            customer.pending_addresses = [
                CustomerAddress(**address.model_dump()) for address in dto.addresses
            ]
            customer.add_domain_event(
                CustomerRegistered(
                    aggregate_id=customer.id,
                    email=customer.email,
                    first_name=customer.first_name,
                    last_name=customer.last_name,
                    phone_number=dto.phone,
                )
            )
            uow.customers.add(customer)
            uow.save_changes()

        log.info("customer.registered", customer_id=str(customer.id))
        return customer
