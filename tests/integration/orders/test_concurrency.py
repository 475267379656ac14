"""Stock concurrency integration test.

Proves that the ``SELECT ... FOR UPDATE`` taken by
``OrderPlacementService`` serializes concurrent stock deductions.

Scenario:
- Product "Gamer PC" with **stock = 5**.
- 10 threads attempt to buy 1 unit each simultaneously.
- Exactly 5 succeed, 5 fail with ``InsufficientStock``.
- Final stock is 0 (never negative).

SQLite has no row locks, so the test only runs against a database
server (``DATABASE_URL`` pointing at PostgreSQL or MySQL).
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from decimal import Decimal

import pytest
from django.db import connection, connections
from django.test import TransactionTestCase

from modules.customers.models import Customer
from modules.orders.models import Order
from modules.orders.services import OrderPlacementService, OrderStatusService
from modules.products.models import Product
from shared.domain.exceptions import InsufficientStock
from shared.infrastructure.bus import InMemoryEventBus

pytestmark = pytest.mark.integration

INITIAL_STOCK = 5
NUM_WORKERS = 10


@pytest.mark.skipif(
    connection.vendor == "sqlite", reason="row-level locking needs a database server"
)
class TestStockConcurrency(TransactionTestCase):
    def setUp(self):
        self.customer = Customer.objects.create(
            first_name="Concurrency", last_name="Customer", email="concurrency@example.com"
        )
        self.product = Product.objects.create(
            sku="GAMER-PC", name="Gamer PC", price=Decimal("2999.99"), stock_quantity=INITIAL_STOCK
        )

    def _command(self, quantity=1):
        return {
            "customer_id": self.customer.id,
            "shipping_address": "1 Main St",
            "billing_address": "1 Main St",
            "items": [
                {
                    "product_id": self.product.id,
                    "product_name": self.product.name,
                    "quantity": quantity,
                    "unit_price": self.product.price,
                }
            ],
        }

    def _place_in_thread(self, _):
        try:
            result = OrderPlacementService(InMemoryEventBus()).place_order(self._command())
        finally:
            connections.close_all()
        if result.is_success:
            return "success"
        if isinstance(result.error, InsufficientStock):
            return "insufficient"
        return type(result.error).__name__

    def test_concurrent_orders_exhaust_stock(self):
        with ThreadPoolExecutor(max_workers=NUM_WORKERS) as pool:
            results = list(pool.map(self._place_in_thread, range(NUM_WORKERS)))

        self.assertEqual(results.count("success"), INITIAL_STOCK)
        self.assertEqual(results.count("insufficient"), NUM_WORKERS - INITIAL_STOCK)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, 0)
        self.assertEqual(Order.objects.count(), INITIAL_STOCK)

    def test_cancel_and_place_keep_stock_conserved(self):
        first = OrderPlacementService(None).place_order(self._command(quantity=INITIAL_STOCK))
        self.assertTrue(first.is_success)

        def cancel(_):
            try:
                return OrderStatusService(None).cancel_order(
                    {"order_id": first.value, "reason": "race"}
                ).is_success
            finally:
                connections.close_all()

        with ThreadPoolExecutor(max_workers=4) as pool:
            outcomes = list(pool.map(cancel, range(4)))

        # only one cancellation may win; the rest see a CANCELLED order
        self.assertEqual(outcomes.count(True), 1)
        self.product.refresh_from_db()
        self.assertEqual(self.product.stock_quantity, INITIAL_STOCK)
