"""Denormalized customer documents."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

if TYPE_CHECKING:
    from modules.customers.models import Customer


class CustomerSummary(BaseModel):
    """Customer data embedded in other documents (orders)."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    full_name: str
    email: str

    @classmethod
    def from_entity(cls, customer: Customer) -> CustomerSummary:
        return cls(id=customer.id, full_name=customer.full_name, email=customer.email)


class CustomerProfileReadModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    preferred_language: str = "en"
    preferred_currency: str = "USD"
    marketing_emails_enabled: bool = False
    sms_notifications_enabled: bool = False


class CustomerStatisticsReadModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    total_orders: int = 0
    total_spent: Decimal = Decimal("0.00")
    last_order_date: Optional[datetime] = None


class CustomerReadModel(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: UUID
    first_name: str
    last_name: str
    full_name: str
    email: str
    phone_number: Optional[str] = None
    is_active: bool = True
    registration_date: datetime
    profile: CustomerProfileReadModel = CustomerProfileReadModel()
    statistics: CustomerStatisticsReadModel = CustomerStatisticsReadModel()
    created_at: datetime
    updated_at: datetime
