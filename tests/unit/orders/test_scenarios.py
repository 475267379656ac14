"""End-to-end order lifecycle scenarios against the test database."""

from __future__ import annotations

import pytest

from modules.orders.constants import OrderStatus
from modules.orders.models import Order

pytestmark = pytest.mark.unit


@pytest.fixture()
def product(make_product):
    return make_product(stock=10, minimum_stock_level=2)


def _update(status_service, order_id, status):
    assert status_service.update_status({"order_id": order_id, "new_status": status}).is_success


def _cancel(status_service, order_id, reason):
    assert status_service.cancel_order({"order_id": order_id, "reason": reason}).is_success


def test_cancel_after_confirm_restores_stock(product, place_order, status_service):
    order_id = place_order((product, 2))
    product.refresh_from_db()
    assert product.stock_quantity == 8
    assert Order.objects.get(id=order_id).status == OrderStatus.PENDING

    _update(status_service, order_id, "CONFIRMED")
    assert Order.objects.get(id=order_id).status == OrderStatus.CONFIRMED

    _cancel(status_service, order_id, "customer request")
    product.refresh_from_db()
    assert Order.objects.get(id=order_id).status == OrderStatus.CANCELLED
    assert product.stock_quantity == 10


def test_cancel_after_ship_keeps_stock(product, place_order, status_service):
    order_id = place_order((product, 3))
    _update(status_service, order_id, "CONFIRMED")
    _update(status_service, order_id, "SHIPPED")

    _cancel(status_service, order_id, "damaged")

    product.refresh_from_db()
    assert Order.objects.get(id=order_id).status == OrderStatus.CANCELLED
    assert product.stock_quantity == 7


def test_cancel_pending_restores_every_line(make_product, place_order, status_service):
    first, second = make_product(stock=10), make_product(stock=10)
    order_id = place_order((first, 2), (second, 1))
    first.refresh_from_db()
    second.refresh_from_db()
    assert (first.stock_quantity, second.stock_quantity) == (8, 9)

    _cancel(status_service, order_id, "customer request")

    first.refresh_from_db()
    second.refresh_from_db()
    assert (first.stock_quantity, second.stock_quantity) == (10, 10)
