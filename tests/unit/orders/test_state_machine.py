"""Unit tests for the Order lifecycle table.

Every (status, action) pair is exercised on an unsaved order: pairs in
the table move the order and stamp the matching timestamp, every other
pair raises ``InvalidOrderState`` and leaves the order untouched.
"""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.orders.constants import (
    STOCK_RESTORING_STATES,
    TERMINAL_STATES,
    TRANSITIONS,
    VALID_TRANSITIONS,
    OrderAction,
    OrderStatus,
)
from modules.orders.models import Order
from shared.domain.exceptions import (
    CommandValidationError,
    InvalidOrderState,
    InvalidRevertToPending,
)

pytestmark = pytest.mark.unit

TIMESTAMP = {
    OrderStatus.CONFIRMED: "confirmed_at",
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


def _order(status: str) -> Order:
    return Order(
        customer_id=uuid4(),
        status=status,
        currency="USD",
        shipping_address="1 Main St",
        billing_address="1 Main St",
    )


def _act(order: Order, action: OrderAction) -> str:
    if action is OrderAction.CANCEL:
        return order.cancel("customer request")
    return getattr(order, action.value)()


ALL_PAIRS = [(status, action) for status in OrderStatus.values for action in OrderAction]


class TestTransitionTable:
    @pytest.mark.parametrize("status,action", [p for p in ALL_PAIRS if p in TRANSITIONS])
    def test_legal_moves(self, status, action):
        order = _order(status)
        target = TRANSITIONS[(status, action)]

        previous = _act(order, action)

        assert previous == status
        assert order.status == target
        assert getattr(order, TIMESTAMP[target]) is not None
        assert order.updated_at == getattr(order, TIMESTAMP[target])

    @pytest.mark.parametrize("status,action", [p for p in ALL_PAIRS if p not in TRANSITIONS])
    def test_illegal_moves(self, status, action):
        order = _order(status)

        with pytest.raises(InvalidOrderState) as exc_info:
            _act(order, action)

        assert exc_info.value.current == status
        assert exc_info.value.attempted == action.value
        assert order.status == status
        assert order.cancellation_reason is None

    def test_table_shape(self):
        assert TERMINAL_STATES == {OrderStatus.DELIVERED, OrderStatus.CANCELLED}
        assert VALID_TRANSITIONS[OrderStatus.PENDING] == {
            OrderStatus.CONFIRMED,
            OrderStatus.CANCELLED,
        }
        assert STOCK_RESTORING_STATES == {OrderStatus.PENDING, OrderStatus.CONFIRMED}

    def test_delivered_cannot_be_cancelled_message(self):
        with pytest.raises(InvalidOrderState, match="Cannot cancel order in Delivered state"):
            _order(OrderStatus.DELIVERED).cancel("too late")

    @pytest.mark.parametrize("status", [OrderStatus.DELIVERED, OrderStatus.CANCELLED])
    def test_state_checked_before_reason(self, status):
        order = _order(status)
        with pytest.raises(InvalidOrderState):
            order.cancel("")
        assert order.status == status


class TestTransitionTo:
    @pytest.mark.parametrize("status", OrderStatus.values)
    def test_pending_is_never_a_target(self, status):
        order = _order(status)
        with pytest.raises(InvalidRevertToPending):
            order.transition_to(OrderStatus.PENDING)
        assert order.status == status

    def test_routes_to_action(self):
        order = _order(OrderStatus.PENDING)
        order.transition_to(OrderStatus.CONFIRMED)
        order.transition_to(OrderStatus.SHIPPED)
        assert order.status == OrderStatus.SHIPPED

    def test_cancel_uses_default_reason(self):
        order = _order(OrderStatus.CONFIRMED)
        order.transition_to(OrderStatus.CANCELLED)
        assert order.cancellation_reason == "Order cancelled by system"

    def test_unknown_status(self):
        with pytest.raises(CommandValidationError):
            _order(OrderStatus.PENDING).transition_to("LOST")

    def test_helpers(self):
        order = _order(OrderStatus.SHIPPED)
        assert order.can_transition_to(OrderStatus.DELIVERED)
        assert not order.can_transition_to(OrderStatus.CONFIRMED)
        assert not order.is_terminal
        assert _order(OrderStatus.CANCELLED).is_terminal


class TestCancelReason:
    def test_blank_reason_rejected(self):
        order = _order(OrderStatus.PENDING)
        with pytest.raises(CommandValidationError) as exc_info:
            order.cancel("   ")
        assert exc_info.value.field == "reason"
        assert order.status == OrderStatus.PENDING

    def test_reason_length_limited(self):
        with pytest.raises(CommandValidationError):
            _order(OrderStatus.PENDING).cancel("x" * 501)
