from decimal import Decimal

import pytest

from modules.customers.models import Customer
from modules.orders.services import OrderPlacementService, OrderStatusService
from modules.products.models import Product, ProductStatus
from shared.infrastructure.bus import InMemoryEventBus


@pytest.fixture(autouse=True)
def _use_db(db):
    """Automatically use the test database for all tests."""


@pytest.fixture()
def event_bus():
    """An empty in-process bus; tests subscribe what they need."""
    return InMemoryEventBus()


@pytest.fixture()
def customer():
    return Customer.objects.create(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        phone="+5511999990000",
    )


@pytest.fixture()
def make_product():
    counter = {"n": 0}

    def _make(stock=10, price="25.00", currency="USD", **overrides):
        counter["n"] += 1
        defaults = {
            "sku": f"SKU-{counter['n']:03d}",
            "name": f"Product {counter['n']}",
            "price": Decimal(price),
            "currency": currency,
            "stock_quantity": stock,
            "status": ProductStatus.ACTIVE,
        }
        defaults.update(overrides)
        return Product.objects.create(**defaults)

    return _make


@pytest.fixture()
def placement_service(event_bus):
    return OrderPlacementService(event_bus)


@pytest.fixture()
def status_service(event_bus):
    return OrderStatusService(event_bus)


@pytest.fixture()
def place_order(placement_service, customer):
    """Place an order for ``customer``; ``lines`` are ``(product, quantity)``."""

    def _place(*lines):
        result = placement_service.place_order(
            {
                "customer_id": customer.id,
                "shipping_address": "221B Baker Street, London",
                "billing_address": "221B Baker Street, London",
                "items": [
                    {
                        "product_id": product.id,
                        "product_name": product.name,
                        "quantity": quantity,
                        "unit_price": product.price,
                        "currency": product.currency,
                    }
                    for product, quantity in lines
                ],
            }
        )
        assert result.is_success, result.error
        return result.value

    return _place
