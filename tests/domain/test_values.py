"""
Tests for Decimal helpers.
"""

from decimal import Decimal, getcontext

import pytest

from parks_kernel.domain.values import (
    round_currency,
    round_percent,
    to_decimal,
    validate_month,
)


class TestToDecimal:

    @pytest.mark.parametrize("raw", [None, True, "abc", "NaN", "Infinity", object()])
    def test_rejected(self, raw):
        with pytest.raises(ValueError):
            to_decimal(raw)

    def test_accepted(self):
        assert to_decimal(3) == Decimal("3")
        assert to_decimal("3.50") == Decimal("3.50")
        assert to_decimal(1.1) == Decimal("1.1")


class TestRounding:

    def test_half_up(self):
        assert round_currency(Decimal("2.345")) == Decimal("2.35")
        assert round_percent(Decimal("-2.345")) == Decimal("-2.35")

    def test_more_digits_than_context_precision(self):
        assert str(round_currency(Decimal("123456789012345678901234567890.125"))) == (
            "123456789012345678901234567890.13"
        )
        assert str(round_currency(Decimal("1.5E+40"))) == "15" + "0" * 39 + ".00"
        assert getcontext().prec == 28


class TestValidateMonth:

    def test_range(self):
        assert validate_month(1) == 1
        assert validate_month(12) == 12
        for bad in (0, 13, True, "1"):
            with pytest.raises(ValueError):
                validate_month(bad)
