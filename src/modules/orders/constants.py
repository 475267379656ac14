"""Order domain constants.

The lifecycle is an explicit ``(current status, action) -> next status``
table.  A pair missing from ``TRANSITIONS`` is an illegal move.

    PENDING --confirm--> CONFIRMED --ship--> SHIPPED --deliver--> DELIVERED
       |                     |                  |
       +-------cancel--------+------cancel------+--> CANCELLED
"""

from enum import StrEnum

from django.db import models


class OrderStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    CONFIRMED = "CONFIRMED", "Confirmed"
    SHIPPED = "SHIPPED", "Shipped"
    DELIVERED = "DELIVERED", "Delivered"
    CANCELLED = "CANCELLED", "Cancelled"


class OrderAction(StrEnum):
    CONFIRM = "confirm"
    SHIP = "ship"
    DELIVER = "deliver"
    CANCEL = "cancel"


TRANSITIONS: dict[tuple[str, OrderAction], str] = {
    (OrderStatus.PENDING, OrderAction.CONFIRM): OrderStatus.CONFIRMED,
    (OrderStatus.CONFIRMED, OrderAction.SHIP): OrderStatus.SHIPPED,
    (OrderStatus.SHIPPED, OrderAction.DELIVER): OrderStatus.DELIVERED,
    (OrderStatus.PENDING, OrderAction.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.CONFIRMED, OrderAction.CANCEL): OrderStatus.CANCELLED,
    (OrderStatus.SHIPPED, OrderAction.CANCEL): OrderStatus.CANCELLED,
}

# Requested target status -> action that reaches it.  PENDING has no
# action: orders never go back to it.
ACTION_FOR_STATUS: dict[str, OrderAction] = {
    OrderStatus.CONFIRMED: OrderAction.CONFIRM,
    OrderStatus.SHIPPED: OrderAction.SHIP,
    OrderStatus.DELIVERED: OrderAction.DELIVER,
    OrderStatus.CANCELLED: OrderAction.CANCEL,
}

# Timestamp stamped on entering a status.
STATUS_TIMESTAMP_FIELDS: dict[str, str] = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}

VALID_TRANSITIONS: dict[str, set[str]] = {status: set() for status in OrderStatus.values}
for (_from, _action), _to in TRANSITIONS.items():
    VALID_TRANSITIONS[_from].add(_to)

TERMINAL_STATES: set[str] = {
    status for status, targets in VALID_TRANSITIONS.items() if not targets
}

# Cancelling from one of these puts the ordered quantities back in stock;
# once shipped the goods have left the warehouse.
STOCK_RESTORING_STATES: set[str] = {OrderStatus.PENDING, OrderStatus.CONFIRMED}

DEFAULT_CANCELLATION_REASON = "Order cancelled by system"

MAX_REASON_LENGTH = 500
MAX_ADDRESS_LENGTH = 500

ORDER_NUMBER_MAX_RETRIES = 5
