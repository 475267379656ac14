"""Unit tests for Product inventory operations."""

from __future__ import annotations

from decimal import Decimal

import pytest
from django.db import IntegrityError, transaction

from modules.products.models import Product
from shared.domain.exceptions import CommandValidationError, InsufficientStock
from shared.domain.money import Money

pytestmark = pytest.mark.unit


class TestDeduct:
    def test_deducts(self, make_product):
        product = make_product(stock=10)
        product.deduct(4)
        assert product.stock_quantity == 6

    def test_whole_stock_can_be_taken(self, make_product):
        product = make_product(stock=3)
        product.deduct(3)
        assert product.is_out_of_stock

    def test_insufficient_stock_leaves_quantity(self, make_product):
        product = make_product(stock=2, name="Router")
        with pytest.raises(InsufficientStock) as exc_info:
            product.deduct(3)
        assert (exc_info.value.available, exc_info.value.requested) == (2, 3)
        assert exc_info.value.product_name == "Router"
        assert product.stock_quantity == 2

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity(self, make_product, quantity):
        with pytest.raises(CommandValidationError):
            make_product().deduct(quantity)


class TestRestore:
    def test_restores_without_upper_bound(self, make_product):
        product = make_product(stock=0)
        product.restore(7)
        assert product.stock_quantity == 7

    def test_non_positive_quantity(self, make_product):
        with pytest.raises(CommandValidationError):
            make_product().restore(0)


class TestProductFields:
    def test_sku_and_currency_normalised(self, make_product):
        product = make_product(sku=" abc-1 ", currency="eur")
        product.refresh_from_db()
        assert product.sku == "ABC-1"
        assert product.unit_price == Money(product.price, "EUR")

    def test_low_stock_flag(self, make_product):
        assert make_product(stock=2, minimum_stock_level=5).is_low_stock
        assert not make_product(stock=0, minimum_stock_level=5).is_low_stock

    def test_price_must_be_positive_in_database(self):
        with pytest.raises(IntegrityError):
            with transaction.atomic():
                Product.objects.create(sku="FREE", name="Free", price=Decimal("0.00"))
