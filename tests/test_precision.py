"""Tests for trigger_trader/precision.py"""

from decimal import Decimal

from trigger_trader.precision import format_amount, format_held_amount


class TestFormatAmount:
    def test_rounds_to_nearest(self):
        result = format_amount(Decimal("70000") / Decimal("4900000"))
        assert result == "0.014286"

    def test_preserves_trailing_zeros(self):
        """bitbank orders always carry 6 fractional digits"""
        assert format_amount(1) == "1.000000"

    def test_half_even(self):
        assert format_amount(Decimal("0.0000005")) == "0.000000"
        assert format_amount(Decimal("0.0000015")) == "0.000002"

    def test_tiny_amount_never_uses_exponent(self):
        result = format_amount(Decimal("1E-7"))
        assert result == "0.000000"

    def test_accepts_strings_and_floats(self):
        assert format_amount("0.5") == "0.500000"
        assert format_amount(0.1) == "0.100000"


class TestFormatHeldAmount:
    def test_rounds_down(self):
        assert format_held_amount(Decimal("0.99999999")) == "0.999999"

    def test_exact_amount_unchanged(self):
        assert format_held_amount(Decimal("1.5")) == "1.500000"
