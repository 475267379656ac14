"""Unit tests for the order read-model projection."""

from __future__ import annotations

from decimal import Decimal
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from modules.core.cache import CacheKeys
from modules.core.models import OutboxEvent
from modules.core.search import DatabaseSearchIndex
from modules.orders.events import OrderPlaced, OrderStatusChanged
from modules.orders.handlers import OrderProjection
from shared.domain.events import DomainEvent

pytestmark = pytest.mark.unit


@pytest.fixture()
def index():
    return DatabaseSearchIndex("orders")


@pytest.fixture()
def cache():
    return MagicMock()


@pytest.fixture()
def projection(index, cache):
    return OrderProjection(index, cache)


def _staged(event_type: str) -> DomainEvent:
    row = OutboxEvent.objects.filter(event_type=event_type).latest("created_at")
    return DomainEvent.from_payload(row.payload)


class TestOrderProjection:
    def test_placed_order_document(self, projection, index, place_order, make_product, customer):
        product = make_product(stock=5, price="12.50")
        order_id = place_order((product, 2))

        projection.handle(_staged("OrderPlaced"))

        document = index.get_document(order_id)
        assert document["status"] == "PENDING"
        assert document["status_name"] == "Pending"
        assert document["total_amount"] == "25.00"
        assert document["item_count"] == 2
        assert document["items"][0]["product_id"] == str(product.id)
        assert document["customer"] == {
            "id": str(customer.id),
            "full_name": "Ada Lovelace",
            "email": "ada@example.com",
        }

    def test_status_change_rebuilds_from_current_state(
        self, projection, index, place_order, make_product, status_service
    ):
        order_id = place_order((make_product(), 1))
        status_service.update_status({"order_id": order_id, "new_status": "CONFIRMED"})
        status_service.update_status({"order_id": order_id, "new_status": "SHIPPED"})
        first_change = OutboxEvent.objects.filter(event_type="OrderStatusChanged").earliest(
            "created_at"
        )

        # a late redelivery of the CONFIRMED event still yields the current status
        projection.handle(DomainEvent.from_payload(first_change.payload))

        document = index.get_document(order_id)
        assert document["status"] == "SHIPPED"
        assert document["confirmed_at"] is not None
        assert document["shipped_at"] is not None

    def test_cancellation_document(self, projection, index, place_order, make_product, status_service):
        order_id = place_order((make_product(), 1))
        status_service.cancel_order({"order_id": order_id, "reason": "Duplicate order"})

        projection.handle(_staged("OrderCancelled"))

        document = index.get_document(order_id)
        assert document["status"] == "CANCELLED"
        assert document["cancellation_reason"] == "Duplicate order"

    def test_invalidates_order_and_customer_lists(
        self, projection, cache, place_order, make_product, customer
    ):
        order_id = place_order((make_product(), 1))

        projection.handle(_staged("OrderPlaced"))

        cache.invalidate.assert_called_once_with(CacheKeys.order(order_id))
        cache.invalidate_pattern.assert_called_once_with(CacheKeys.orders_pattern(customer.id))

    def test_placed_event_without_row_uses_event_snapshot(self, projection, index):
        event = OrderPlaced(
            aggregate_id=uuid4(),
            customer_id=uuid4(),
            total_amount=Decimal("9.99"),
            currency="USD",
            item_count=1,
            shipping_address="1 Main St",
        )

        projection.handle(event)

        document = index.get_document(event.order_id)
        assert document["status"] == "PENDING"
        assert document["total_amount"] == "9.99"
        assert document["customer"] is None

    def test_status_event_without_row_is_skipped(self, projection, index, cache):
        event = OrderStatusChanged(
            aggregate_id=uuid4(), customer_id=uuid4(), old_status="PENDING", new_status="CONFIRMED"
        )

        projection.handle(event)

        assert index.get_document(event.order_id) is None
        cache.invalidate.assert_not_called()


class TestSubscriptions:
    def test_app_subscribes_projection_to_order_events(self):
        from modules.core.apps import get_event_bus
        from modules.orders.events import OrderCancelled

        bus = get_event_bus()
        for event_class in (OrderPlaced, OrderStatusChanged, OrderCancelled):
            assert any(isinstance(h, OrderProjection) for h in bus.handlers_for(event_class))
