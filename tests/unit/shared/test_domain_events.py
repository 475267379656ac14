"""Unit tests for DomainEvent registration and payload serialization."""

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

import pytest

from modules.orders.events import OrderCancelled, OrderPlaced, OrderStatusChanged
from modules.products.events import ProductCreated
from shared.domain.events import DomainEvent, DomainEventMixin, get_event_class

pytestmark = pytest.mark.unit


def test_event_name_is_class_name():
    event = OrderStatusChanged(
        aggregate_id=uuid4(), customer_id=uuid4(), old_status="PENDING", new_status="CONFIRMED"
    )
    assert event.event_name == "OrderStatusChanged"
    assert isinstance(event.event_id, UUID)
    assert event.occurred_on.tzinfo is not None


def test_event_ids_are_time_ordered():
    first = ProductCreated(
        aggregate_id=uuid4(), name="Desk", sku="DK-1", price=Decimal("90.00"),
        currency="USD", stock_quantity=1,
    )
    second = ProductCreated(
        aggregate_id=uuid4(), name="Desk", sku="DK-2", price=Decimal("90.00"),
        currency="USD", stock_quantity=1,
    )
    assert first.event_id.version == 7
    assert first.event_id < second.event_id


def test_subclasses_are_registered():
    assert get_event_class("OrderPlaced") is OrderPlaced
    assert get_event_class("ProductCreated") is ProductCreated


def test_unknown_event_name():
    with pytest.raises(LookupError):
        get_event_class("NoSuchEvent")


def test_payload_is_json_safe_and_rebuilds_typed_fields():
    event = OrderPlaced(
        aggregate_id=uuid4(),
        customer_id=uuid4(),
        total_amount=Decimal("59.97"),
        currency="USD",
        item_count=2,
        shipping_address="1 Main St",
    )
    payload = event.to_payload()
    assert payload["total_amount"] == "59.97"
    assert payload["aggregate_id"] == str(event.aggregate_id)
    assert payload["event_name"] == "OrderPlaced"
    assert payload["version"] == 1

    rebuilt = DomainEvent.from_payload(payload)
    assert isinstance(rebuilt, OrderPlaced)
    assert rebuilt == event
    assert isinstance(rebuilt.total_amount, Decimal)
    assert isinstance(rebuilt.customer_id, UUID)
    assert isinstance(rebuilt.occurred_on, datetime)


def test_cancelled_is_a_status_change():
    event = OrderCancelled(
        aggregate_id=uuid4(),
        customer_id=uuid4(),
        old_status="CONFIRMED",
        new_status="CANCELLED",
        reason="changed my mind",
        stock_restored=True,
    )
    assert isinstance(event, OrderStatusChanged)
    assert OrderCancelled.from_payload(event.to_payload()) == event


def test_events_are_immutable():
    event = ProductCreated(
        aggregate_id=uuid4(), name="Mouse", sku="M-1", price=Decimal("9.90"),
        currency="USD", stock_quantity=3,
    )
    with pytest.raises(AttributeError):
        event.name = "Other"


class TestDomainEventMixin:
    def test_collects_and_clears(self):
        class Aggregate(DomainEventMixin):
            pass

        aggregate = Aggregate()
        assert aggregate.domain_events == []
        event = ProductCreated(
            aggregate_id=uuid4(), name="Mouse", sku="M-1", price=Decimal("9.90"),
            currency="USD", stock_quantity=3,
        )
        aggregate.add_domain_event(event)
        assert aggregate.domain_events == [event]
        aggregate.clear_domain_events()
        assert aggregate.domain_events == []
