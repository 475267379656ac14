"""Customer aggregate: identity, contact data, preferences and addresses.

Business rules implemented:
- Email is unique and stored lowercase.
- Phone, when present, is stored in a normalised ``+<digits>`` form.
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).
- Contact data is masked in ``__str__``.
"""

from __future__ import annotations

import structlog
from django.core.exceptions import ValidationError
from django.db import models

from modules.core.models import BaseModel, SoftDeleteModel
from modules.customers.value_objects import normalize_phone
from shared.domain.events import DomainEventMixin

logger = structlog.get_logger(__name__)


def default_preferences() -> dict:
    return {
        "preferred_language": "en",
        "preferred_currency": "USD",
        "marketing_emails_enabled": False,
        "sms_notifications_enabled": False,
    }


class Customer(DomainEventMixin, SoftDeleteModel):
    """Customer aggregate root."""

    first_name = models.CharField(max_length=100)
    last_name = models.CharField(max_length=100)
    email = models.EmailField(max_length=254, unique=True)
    phone = models.CharField(max_length=20, blank=True, default="")
    is_active = models.BooleanField(default=True)
    preferences = models.JSONField(default=default_preferences)

    class Meta:
        db_table = "customers"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["-created_at"], name="customers_created_idx"),
            models.Index(fields=["is_active"], name="customers_active_idx"),
        ]

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    @property
    def primary_address(self) -> CustomerAddress | None:
        return self.addresses.filter(is_primary=True).first()

    def clean(self) -> None:
        super().clean()
        try:
            self.phone = normalize_phone(self.phone)
        except ValueError as exc:
            raise ValidationError({"phone": str(exc)}) from exc

    def save(self, *args, **kwargs) -> None:
        if self.email:
            self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        local, _, domain = (self.email or "").partition("@")
        return f"{self.full_name} ({local[:1]}***@{domain})"


class CustomerAddress(BaseModel):
    """A postal address belonging to one customer."""

    customer = models.ForeignKey(
        "customers.Customer",
        on_delete=models.CASCADE,
        related_name="addresses",
    )
    street = models.CharField(max_length=255)
    city = models.CharField(max_length=100)
    state = models.CharField(max_length=100, blank=True, default="")
    postal_code = models.CharField(max_length=20)
    country = models.CharField(max_length=2)
    is_primary = models.BooleanField(default=False)

    class Meta:
        db_table = "customer_addresses"
        ordering = ["-is_primary", "created_at"]

    def as_text(self) -> str:
        parts = [self.street, self.city, self.state, self.postal_code, self.country]
        return ", ".join(part for part in parts if part)

    def __str__(self) -> str:
        return self.as_text()
