"""Unit tests for the Money value object."""

from decimal import Decimal

import pytest

from shared.domain.money import CurrencyMismatch, Money

pytestmark = pytest.mark.unit


class TestMoneyConstruction:
    def test_amount_is_decimal_and_currency_uppercased(self):
        money = Money("10.50", "usd")
        assert money.amount == Decimal("10.50")
        assert money.currency == "USD"

    def test_float_keeps_literal_value(self):
        assert Money(0.1, "USD").amount == Decimal("0.1")

    @pytest.mark.parametrize("currency", ["", "US", "USDX", "12A"])
    def test_invalid_currency_rejected(self, currency):
        with pytest.raises(ValueError, match="3-letter"):
            Money("1.00", currency)

    def test_invalid_amount_rejected(self):
        with pytest.raises(ValueError, match="Invalid monetary amount"):
            Money("ten", "USD")

    def test_zero(self):
        assert Money.zero("EUR").is_zero
        assert Money.zero("EUR").currency == "EUR"


class TestMoneyArithmetic:
    def test_add_and_subtract_same_currency(self):
        assert Money("10.00", "USD") + Money("2.50", "USD") == Money("12.50", "USD")
        assert Money("10.00", "USD") - Money("2.50", "USD") == Money("7.50", "USD")

    def test_multiply_by_quantity(self):
        assert Money("19.99", "USD") * 3 == Money("59.97", "USD")
        assert 2 * Money("1.25", "USD") == Money("2.50", "USD")

    def test_mixing_currencies_raises(self):
        with pytest.raises(CurrencyMismatch):
            Money("1.00", "USD") + Money("1.00", "EUR")

    def test_comparing_currencies_raises(self):
        with pytest.raises(CurrencyMismatch):
            assert Money("1.00", "USD") < Money("2.00", "EUR")

    def test_multiplying_two_money_values_raises(self):
        with pytest.raises(TypeError):
            Money("1.00", "USD") * Money("1.00", "USD")

    def test_sum_with_zero_start(self):
        total = sum([Money("1.10", "USD"), Money("2.20", "USD")], Money.zero("USD"))
        assert total == Money("3.30", "USD")

    def test_negative_result_is_flagged(self):
        assert (Money("1.00", "USD") - Money("3.00", "USD")).is_negative


class TestMoneyRounding:
    def test_quantize_rounds_half_up(self):
        assert Money("2.345", "USD").quantize().amount == Decimal("2.35")
        assert Money("2.344", "USD").quantize().amount == Decimal("2.34")

    def test_str(self):
        assert str(Money("5", "brl")) == "5.00 BRL"
