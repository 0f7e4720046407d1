"""Unit tests for Position merging and derived price."""

from decimal import Decimal

import pytest
from pydantic import ValidationError

from positions import DivisionByZero, Position


class TestMerge:
    """Test weighted-average merge of positions on the same instrument."""

    def test_same_direction_weighted_average(self, mx_usd):
        merged = mx_usd.position(Decimal("20"), Decimal("50")) + mx_usd.position(Decimal("28"), Decimal("30"))

        assert merged.quantity == Decimal("80")
        assert merged.price == Decimal("23")

    def test_opposite_direction_weighted_average(self, mx_usd):
        q1, p1 = Decimal("50"), Decimal("20")
        q2, p2 = Decimal("-20"), Decimal("25")

        merged = mx_usd.position(p1, q1).merge(mx_usd.position(p2, q2))

        assert merged.quantity == q1 + q2
        assert merged.price == (q1 * p1 + q2 * p2) / (q1 + q2)

    def test_merge_to_zero_is_flat(self, mx_usd):
        merged = mx_usd.position(Decimal("20"), Decimal("50")) + mx_usd.position(Decimal("35"), Decimal("-50"))

        assert merged.is_flat
        assert merged.side == "flat"
        with pytest.raises(DivisionByZero):
            merged.price

    def test_merge_different_instruments_fails(self, mx_usd, usd_mx):
        with pytest.raises(ValueError, match="Cannot merge"):
            mx_usd.position(Decimal("20"), Decimal("1")) + usd_mx.position(Decimal("0.05"), Decimal("1"))

    def test_add_rejects_other_types(self, mx_usd):
        with pytest.raises(TypeError):
            mx_usd.position(Decimal("20"), Decimal("1")) + Decimal("1")

    def test_repeated_merges_do_not_drift(self, mx_usd):
        # Average of 5/3 is not representable; the summed cost stays exact
        position = mx_usd.position(Decimal("1"), Decimal("1")) + mx_usd.position(Decimal("2"), Decimal("2"))
        position = position + mx_usd.position(Decimal("1"), Decimal("3"))
        position = position + mx_usd.position(Decimal("1"), Decimal("-3"))

        assert position.quantity == Decimal("3")
        assert position.cost == Decimal("5")
        assert position.price == Decimal("5") / Decimal("3")


class TestDerivedFields:
    """Test side, cost and rendering."""

    def test_side(self, mx_usd):
        assert mx_usd.position(Decimal("1"), Decimal("2")).side == "long"
        assert mx_usd.position(Decimal("1"), Decimal("-2")).side == "short"

    def test_float_inputs_keep_decimal_digits(self, mx_usd):
        position = mx_usd.position(0.1, 3)

        assert position.cost == Decimal("0.3")

    def test_frozen(self, mx_usd):
        position = mx_usd.position(Decimal("1"), Decimal("2"))

        with pytest.raises(ValidationError):
            position.quantity = Decimal("3")  # type: ignore[misc]

    def test_equality(self, mx_usd):
        a = mx_usd.position(Decimal("20"), Decimal("50"))
        b = Position(instrument=mx_usd, quantity=Decimal("50"), cost=Decimal("1000.0"))

        assert a == b

    def test_str(self, mx_usd):
        assert str(mx_usd.position(Decimal("20"), Decimal("50"))) == "50 MX-USD @ 20"
