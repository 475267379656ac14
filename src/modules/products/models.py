"""Product model: catalog data plus the inventory ledger.

Business rules implemented:
- SKU is unique and normalised to uppercase.
- Price must be greater than zero.
- Stock quantity never goes negative (check constraint + ``deduct`` guard).
- Soft delete via ``deleted_at`` (inherited from SoftDeleteModel).

``deduct`` and ``restore`` only mutate the in-memory instance; the caller
persists the product through its unit of work and decides which events
to publish.
"""

from __future__ import annotations

from decimal import Decimal

import structlog
from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models

from modules.core.models import SoftDeleteModel
from shared.domain.events import DomainEventMixin
from shared.domain.exceptions import CommandValidationError, InsufficientStock
from shared.domain.money import Money

logger = structlog.get_logger(__name__)


class ProductStatus(models.TextChoices):
    ACTIVE = "active", "Active"
    INACTIVE = "inactive", "Inactive"


class Product(DomainEventMixin, SoftDeleteModel):
    """Product aggregate root."""

    sku = models.CharField(max_length=64, unique=True)
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    price = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
    )
    currency = models.CharField(max_length=3, default="USD")
    stock_quantity = models.PositiveIntegerField(default=0)
    minimum_stock_level = models.PositiveIntegerField(default=0)
    status = models.CharField(
        max_length=20,
        choices=ProductStatus.choices,
        default=ProductStatus.ACTIVE,
    )
    is_featured = models.BooleanField(default=False)
    category_id = models.UUIDField(null=True, blank=True, default=None)

    class Meta:
        db_table = "products"
        ordering = ["name"]
        indexes = [
            models.Index(fields=["status"], name="products_status_idx"),
            models.Index(fields=["category_id"], name="products_category_idx"),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(price__gt=0),
                name="products_price_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(stock_quantity__gte=0),
                name="products_stock_non_negative",
            ),
        ]

    # ------------------------------------------------------------------
    # Inventory ledger
    # ------------------------------------------------------------------

    def deduct(self, quantity: int) -> None:
        """Take ``quantity`` units out of stock.

        Raises:
            CommandValidationError: quantity is not positive.
            InsufficientStock: fewer than ``quantity`` units are available.
        """
        if quantity <= 0:
            raise CommandValidationError("quantity", "Quantity must be positive.")
        if self.stock_quantity < quantity:
            raise InsufficientStock(
                available=self.stock_quantity,
                requested=quantity,
                product_id=self.id,
                product_name=self.name,
            )
        self.stock_quantity -= quantity

    def restore(self, quantity: int) -> None:
        """Put ``quantity`` units back into stock (no upper bound)."""
        if quantity <= 0:
            raise CommandValidationError("quantity", "Quantity must be positive.")
        self.stock_quantity += quantity

    @property
    def is_active(self) -> bool:
        return self.status == ProductStatus.ACTIVE

    @property
    def is_in_stock(self) -> bool:
        return self.stock_quantity > 0

    @property
    def is_out_of_stock(self) -> bool:
        return self.stock_quantity == 0

    @property
    def is_low_stock(self) -> bool:
        return 0 < self.stock_quantity <= self.minimum_stock_level

    @property
    def unit_price(self) -> Money:
        return Money(self.price, self.currency)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def clean(self) -> None:
        super().clean()
        if self.sku:
            self.sku = self.sku.strip().upper()
        if self.price is not None and self.price <= 0:
            raise ValidationError({"price": "Price must be greater than zero."})
        if self.stock_quantity is not None and self.stock_quantity < 0:
            raise ValidationError({"stock_quantity": "Stock quantity cannot be negative."})

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def save(self, *args, **kwargs) -> None:
        if self.sku:
            self.sku = self.sku.strip().upper()
        if self.currency:
            self.currency = self.currency.strip().upper()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.sku} - {self.name}"
