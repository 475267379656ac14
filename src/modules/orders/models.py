"""Order and OrderItem models.

Business rules implemented:
- Lifecycle moves only along ``constants.TRANSITIONS``; every move
  stamps ``updated_at`` plus the timestamp of the status entered.
- An order is created with at least one item, all in one currency;
  ``total_amount`` is the sum of the line totals and never changes.
- Items are owned by their order: they are built together in
  ``Order.create`` and no method adds or removes them afterwards.
- Items reference products by id and snapshot the product name, so an
  order stays readable after its products are gone.
- Order number auto-generated as human-readable identifier.
- Customer FK uses PROTECT to preserve financial history.
"""

from __future__ import annotations

import secrets
from decimal import Decimal
from typing import Any, Iterable, List, Optional
from uuid import UUID

import structlog
from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone

from modules.core.models import BaseModel, SoftDeleteModel
from modules.orders.constants import (
    ACTION_FOR_STATUS,
    DEFAULT_CANCELLATION_REASON,
    MAX_REASON_LENGTH,
    ORDER_NUMBER_MAX_RETRIES,
    STATUS_TIMESTAMP_FIELDS,
    TERMINAL_STATES,
    TRANSITIONS,
    VALID_TRANSITIONS,
    OrderAction,
    OrderStatus,
)
from shared.domain.events import DomainEventMixin
from shared.domain.exceptions import (
    CommandValidationError,
    InvalidOrderState,
    InvalidRevertToPending,
)
from shared.domain.money import CurrencyMismatch, Money

logger = structlog.get_logger(__name__)


class Order(DomainEventMixin, SoftDeleteModel):
    """Order aggregate root.

    ``order_number`` is a human-readable identifier auto-generated on first
    save (format: ``ORD-YYYYMMDD-XXXXXX``).  The UUIDv7 ``id`` is used for
    all internal references.
    """

    order_number: models.CharField = models.CharField(
        max_length=20, unique=True, editable=False
    )
    customer: models.ForeignKey = models.ForeignKey(
        "customers.Customer",
        on_delete=models.PROTECT,
        related_name="orders",
    )
    status: models.CharField = models.CharField(
        max_length=20,
        choices=OrderStatus.choices,
        default=OrderStatus.PENDING,
    )
    currency: models.CharField = models.CharField(max_length=3)
    total_amount: models.DecimalField = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        default=Decimal("0.00"),
    )
    shipping_address: models.TextField = models.TextField()
    billing_address: models.TextField = models.TextField()
    confirmed_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    shipped_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    delivered_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    cancelled_at: models.DateTimeField = models.DateTimeField(null=True, blank=True)
    cancellation_reason: models.CharField = models.CharField(  # noqa: DJ01
        max_length=MAX_REASON_LENGTH, null=True, blank=True
    )

    class Meta:
        db_table = "orders"
        ordering = ["-created_at"]
        indexes = [
            models.Index(fields=["status"], name="orders_status_idx"),
            models.Index(fields=["-created_at"], name="orders_created_idx"),
        ]

    # ------------------------------------------------------------------
    # Factory
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        customer: Any,
        shipping_address: str,
        billing_address: str,
        items: Iterable[OrderItem],
    ) -> Order:
        """Build a PENDING order owning ``items`` (nothing is saved).

        Raises:
            CommandValidationError: no items, blank address, or items in
                more than one currency.
        """
        lines = list(items)
        if not lines:
            raise CommandValidationError("items", "Order must have at least one item.")
        for field_name, value in (
            ("shipping_address", shipping_address),
            ("billing_address", billing_address),
        ):
            if not value or not value.strip():
                raise CommandValidationError(field_name, "Address is required.")

        currency = lines[0].currency
        try:
            total = sum((line.line_total_money for line in lines), Money.zero(currency))
        except CurrencyMismatch as exc:
            raise CommandValidationError(
                "items", "All order items must have the same currency."
            ) from exc

        order = cls(
            customer=customer,
            status=OrderStatus.PENDING,
            currency=currency,
            total_amount=total.quantize().amount,
            shipping_address=shipping_address.strip(),
            billing_address=billing_address.strip(),
        )
        for line in lines:
            line.order = order
        order._lines = lines
        return order

    # ------------------------------------------------------------------
    # Items
    # ------------------------------------------------------------------

    @property
    def lines(self) -> List[OrderItem]:
        """Items of this order, without touching the DB when freshly built."""
        if getattr(self, "_lines", None) is None:
            self._lines = list(self.items.all())
        return list(self._lines)

    @property
    def total(self) -> Money:
        return Money(self.total_amount, self.currency)

    @property
    def total_item_count(self) -> int:
        """Units ordered across all lines."""
        return sum(line.quantity for line in self.lines)

    # ------------------------------------------------------------------
    # State machine
    # ------------------------------------------------------------------

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATES

    def can_transition_to(self, new_status: str) -> bool:
        return new_status in VALID_TRANSITIONS.get(self.status, set())

    def _apply(self, action: OrderAction) -> str:
        target = TRANSITIONS.get((self.status, action))
        if target is None:
            raise InvalidOrderState(self.status, action.value)
        previous = self.status
        now = timezone.now()
        self.status = target
        setattr(self, STATUS_TIMESTAMP_FIELDS[target], now)
        self.updated_at = now
        logger.debug(
            "order.transitioned",
            order_id=str(self.id),
            old_status=previous,
            new_status=target,
        )
        return previous

    def confirm(self) -> str:
        return self._apply(OrderAction.CONFIRM)

    def ship(self) -> str:
        return self._apply(OrderAction.SHIP)

    def deliver(self) -> str:
        return self._apply(OrderAction.DELIVER)

    def cancel(self, reason: str) -> str:
        """Cancel the order; returns the status it was in."""
        if (self.status, OrderAction.CANCEL) not in TRANSITIONS:
            raise InvalidOrderState(self.status, OrderAction.CANCEL.value)
        reason = (reason or "").strip()
        if not reason:
            raise CommandValidationError("reason", "Cancellation reason is required.")
        if len(reason) > MAX_REASON_LENGTH:
            raise CommandValidationError(
                "reason", f"Reason must be at most {MAX_REASON_LENGTH} characters."
            )
        previous = self._apply(OrderAction.CANCEL)
        self.cancellation_reason = reason
        return previous

    def transition_to(self, new_status: str, reason: Optional[str] = None) -> str:
        """Route a requested status to its lifecycle action.

        Raises:
            InvalidRevertToPending: ``new_status`` is PENDING.
            InvalidOrderState: the move is not in the transition table.
        """
        if new_status == OrderStatus.PENDING:
            raise InvalidRevertToPending()
        action = ACTION_FOR_STATUS.get(new_status)
        if action is None:
            raise CommandValidationError("new_status", f"Unknown order status '{new_status}'.")
        if action is OrderAction.CANCEL:
            return self.cancel(reason or DEFAULT_CANCELLATION_REASON)
        return self._apply(action)

    # ------------------------------------------------------------------
    # Order number generation
    # ------------------------------------------------------------------

    @staticmethod
    def generate_order_number() -> str:
        now = timezone.now()
        suffix = secrets.token_hex(3).upper()
        return f"ORD-{now:%Y%m%d}-{suffix}"

    def save(self, *args: Any, **kwargs: Any) -> None:
        if not self.order_number:
            for _attempt in range(ORDER_NUMBER_MAX_RETRIES):
                candidate = self.generate_order_number()
                if not Order.objects.filter(order_number=candidate).exists():
                    self.order_number = candidate
                    break
            else:
                raise RuntimeError(
                    f"Failed to generate unique order_number after "
                    f"{ORDER_NUMBER_MAX_RETRIES} attempts"
                )
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.order_number} ({self.status})"


class OrderItem(BaseModel):
    """Line item of an order.

    ``unit_price`` and ``discount`` are in ``currency``;
    ``line_total = quantity * unit_price - discount``, recalculated on save.
    """

    order: models.ForeignKey = models.ForeignKey(
        "orders.Order",
        on_delete=models.CASCADE,
        related_name="items",
    )
    product_id: models.UUIDField = models.UUIDField(db_index=True)
    product_name: models.CharField = models.CharField(max_length=255)
    quantity: models.PositiveIntegerField = models.PositiveIntegerField(
        validators=[MinValueValidator(1)],
    )
    unit_price: models.DecimalField = models.DecimalField(max_digits=12, decimal_places=2)
    discount: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, default=Decimal("0.00")
    )
    currency: models.CharField = models.CharField(max_length=3)
    line_total: models.DecimalField = models.DecimalField(
        max_digits=12, decimal_places=2, editable=False
    )

    class Meta:
        db_table = "order_items"
        ordering = ["created_at"]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name="order_items_quantity_positive",
            ),
            models.CheckConstraint(
                condition=models.Q(discount__gte=0),
                name="order_items_discount_non_negative",
            ),
        ]

    @classmethod
    def build(
        cls,
        product_id: UUID,
        product_name: str,
        quantity: int,
        unit_price: Money,
        discount: Optional[Money] = None,
    ) -> OrderItem:
        """Validate and build an unsaved line.

        Raises:
            CommandValidationError: non-positive quantity, negative price
                or discount, or a discount larger than the line.
        """
        if quantity < 1:
            raise CommandValidationError("quantity", "Quantity must be at least 1.")
        if not product_name or not product_name.strip():
            raise CommandValidationError("product_name", "Product name is required.")
        if unit_price.is_negative:
            raise CommandValidationError("unit_price", "Unit price cannot be negative.")
        discount = discount if discount is not None else Money.zero(unit_price.currency)
        if discount.currency != unit_price.currency:
            raise CommandValidationError("discount", "Discount currency must match unit price.")
        if discount.is_negative:
            raise CommandValidationError("discount", "Discount cannot be negative.")
        if discount > unit_price * quantity:
            raise CommandValidationError("discount", "Discount cannot exceed the line amount.")

        item = cls(
            product_id=product_id,
            product_name=product_name.strip(),
            quantity=quantity,
            unit_price=unit_price.amount,
            discount=discount.amount,
            currency=unit_price.currency,
        )
        item.line_total = item.line_total_money.quantize().amount
        return item

    @property
    def line_total_money(self) -> Money:
        gross = Money(self.unit_price, self.currency) * self.quantity
        return gross - Money(self.discount, self.currency)

    def save(self, *args: Any, **kwargs: Any) -> None:
        self.line_total = self.line_total_money.quantize().amount
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return f"{self.product_name} x{self.quantity} ({self.line_total} {self.currency})"
