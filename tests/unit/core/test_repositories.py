"""Unit tests for the Django repositories bound to a unit of work."""

from __future__ import annotations

from uuid import uuid4

import pytest

from modules.core.unit_of_work import DjangoUnitOfWork
from modules.orders.models import Order

pytestmark = pytest.mark.unit


class TestLookups:
    def test_missing_or_malformed_ids_return_none(self):
        with DjangoUnitOfWork() as uow:
            assert uow.orders.get_by_id(uuid4()) is None
            assert uow.products.get_by_id("not-a-uuid") is None
            assert uow.customers.get_for_update("not-a-uuid") is None

    def test_soft_deleted_rows_are_invisible(self, make_product):
        product = make_product()
        product.delete()
        with DjangoUnitOfWork() as uow:
            assert uow.products.get_by_id(product.id) is None
            assert uow.products.lock_many([product.id]) == []

    def test_lock_many_deduplicates_and_orders_by_id(self, make_product):
        products = [make_product() for _ in range(3)]
        ids = [p.id for p in reversed(products)] + [products[0].id]
        with DjangoUnitOfWork() as uow:
            locked = uow.products.lock_many(ids)
        assert [p.id for p in locked] == sorted(p.id for p in products)

    def test_product_by_sku_is_case_insensitive_input(self, make_product):
        product = make_product(sku="LAMP-9")
        with DjangoUnitOfWork() as uow:
            assert uow.products.get_by_sku(" lamp-9 ").id == product.id

    def test_customer_by_email(self, customer):
        with DjangoUnitOfWork() as uow:
            assert uow.customers.get_by_email("ADA@example.com").id == customer.id

    def test_order_lookups(self, place_order, make_product):
        first, second = make_product(), make_product()
        order_id = place_order((second, 1), (first, 2))
        order_number = Order.objects.get(id=order_id).order_number

        with DjangoUnitOfWork() as uow:
            assert uow.orders.get_by_order_number(order_number).id == order_id
            locked = uow.orders.get_for_update(order_id)
            assert [line.product_id for line in locked.lines] == sorted([first.id, second.id])
            assert uow.orders.get_by_id(order_id).customer.email == "ada@example.com"


class TestWrites:
    def test_delete_is_soft(self, make_product):
        product = make_product()
        with DjangoUnitOfWork() as uow:
            uow.products.delete(uow.products.get_by_id(product.id))
            assert uow.save_changes() == 1
        product.refresh_from_db()
        assert product.is_deleted
