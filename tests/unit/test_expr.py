"""Unit tests for ValueExpression construction and evaluation."""

from decimal import Decimal

import pytest

from positions import (
    EUR,
    DivisionByZero,
    EvalError,
    Hop,
    InvalidPriceEntry,
    MissingPrice,
    Positions,
    UnreachableAsset,
    ValueExpression,
)
from positions.instrument import Cash


@pytest.fixture
def expr(scenario):
    return scenario.as_expr()


@pytest.fixture
def prices():
    """Quoted prices, including a USD-CAD entry the scenario never needs."""
    return {
        "MX-USD": Decimal("30"),
        "USD-MX": Decimal("1") / Decimal("30"),
        "MX-CAD": Decimal("0.2"),
        "USD-CAD": Decimal("150"),
    }


@pytest.fixture
def exact_prices():
    """Prices whose valuation terminates, for exact comparisons."""
    return {
        "MX-USD": Decimal("25"),
        "USD-MX": Decimal("0.04"),
        "MX-CAD": Decimal("0.2"),
    }


class RecordingPrices(dict):
    """Price table that remembers which symbols were looked up."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.requested = []

    def get(self, key, default=None):
        self.requested.append(key)
        return super().get(key, default)


class TestConstruction:
    """Test lowering a portfolio into terms."""

    def test_denominations_in_construction_order(self, expr, usd, mx, cad):
        assert expr.assets() == [usd, mx, cad]

    def test_terms_per_denomination(self, expr, usd, mx_usd):
        assert expr.marks(usd) == {mx_usd: Decimal("50")}
        assert expr.cash(usd) == Decimal("-1000")

    def test_str(self, expr):
        text = str(expr)

        assert "USD: 50 * [MX-USD] - 1000" in text
        assert "MX: 6 * [USD-MX] - 0.36" in text
        assert "CAD: 10 * [MX-CAD] - 3" in text

    def test_empty_expression(self, usd):
        expr = Positions().as_expr()

        assert str(expr) == "0"
        assert expr.instruments(usd) == []
        assert expr.eval(usd, {}) == Decimal("0")

    def test_rejects_unknown_terms(self):
        with pytest.raises(TypeError):
            ValueExpression([("USD", Decimal("1"))])


class TestDependencies:
    """Test instruments(target)."""

    def test_scenario_dependencies(self, expr, cad, mx_usd, usd_mx, mx_cad):
        assert expr.instruments(cad) == [mx_usd, usd_mx, mx_cad]

    def test_conversion_path(self, expr, usd, cad, usd_mx, mx_cad):
        assert expr.path(usd, cad) == [Hop(usd_mx, False), Hop(mx_cad, False)]

    def test_path_to_self_is_empty(self, expr, cad):
        assert expr.path(cad, cad) == []

    def test_lookups_match_dependencies(self, expr, cad, prices):
        recording = RecordingPrices(prices)

        expr.eval(cad, recording)

        required = {instrument.as_symbol() for instrument in expr.instruments(cad)}
        assert set(recording.requested) == required
        assert "USD-CAD" not in recording.requested

    def test_zero_contribution_adds_nothing(self):
        expr = ValueExpression([Cash(EUR, Decimal("0"))])

        assert expr.assets() == []
        assert expr.instruments(EUR) == []
        assert expr.eval(EUR, {}) == Decimal("0")


class TestEvaluation:
    """Test eval(target, prices)."""

    def test_scenario_value(self, expr, cad, prices):
        value = expr.eval(cad, prices)

        assert value.quantize(Decimal("0.000001")) == Decimal("2.301333")

    def test_exact_value(self, expr, cad, exact_prices):
        assert expr.eval(cad, exact_prices) == Decimal("0.976")

    def test_required_prices_are_sufficient(self, expr, cad, prices):
        required = {
            instrument.as_symbol(): prices[instrument.as_symbol()] for instrument in expr.instruments(cad)
        }

        assert expr.eval(cad, required) == expr.eval(cad, prices)

    def test_missing_price(self, expr, cad, mx_cad, prices):
        del prices["MX-CAD"]

        with pytest.raises(MissingPrice) as exc_info:
            expr.eval(cad, prices)

        assert exc_info.value.instrument == mx_cad
        assert "MX-CAD" in str(exc_info.value)

    def test_unreachable_asset(self, usd, cad, mx_usd):
        expr = Positions([mx_usd.position(Decimal("20"), Decimal("50"))]).as_expr()

        with pytest.raises(UnreachableAsset) as exc_info:
            expr.eval(cad, {"MX-USD": Decimal("30")})

        assert exc_info.value.asset == usd
        assert exc_info.value.target == cad

    def test_non_numeric_price_entry(self, usd, mx_usd):
        expr = Positions([mx_usd.position(Decimal("20"), Decimal("50"))]).as_expr()

        with pytest.raises(InvalidPriceEntry) as exc_info:
            expr.eval(usd, {"MX-USD": "abc"})

        assert isinstance(exc_info.value, EvalError)
        assert exc_info.value.instrument == mx_usd
        assert exc_info.value.price == "abc"

    def test_target_is_denomination(self, usd, mx_usd):
        expr = Positions([mx_usd.position(Decimal("20"), Decimal("50"))]).as_expr()

        assert expr.eval(usd, {"MX-USD": Decimal("30")}) == Decimal("500")

    def test_repeated_evaluation_is_pure(self, expr, cad, prices, exact_prices):
        first = expr.eval(cad, exact_prices)
        expr.eval(cad, prices)

        assert expr.eval(cad, exact_prices) == first

    def test_accepts_string_prices(self, expr, cad):
        prices = {"MX-USD": "25", "USD-MX": "0.04", "MX-CAD": "0.2"}

        assert expr.eval(cad, prices) == Decimal("0.976")


class TestBackwardHops:
    """Test walking a held edge against its direction."""

    @pytest.fixture
    def long_mx(self, mx_usd):
        return Positions([mx_usd.position(Decimal("20"), Decimal("50"))]).as_expr()

    def test_reciprocal_priced_under_own_symbol(self, long_mx, usd, mx, mx_usd, usd_mx):
        prices = {"MX-USD": Decimal("30"), "USD-MX": Decimal("1") / Decimal("30")}

        assert long_mx.path(usd, mx) == [Hop(usd_mx, False)]
        assert long_mx.instruments(mx) == [mx_usd, usd_mx]
        assert long_mx.eval(mx, prices).quantize(Decimal("0.000001")) == Decimal("16.666667")

    def test_reciprocal_multiplies_exactly(self, long_mx, mx):
        prices = {"MX-USD": Decimal("25"), "USD-MX": Decimal("0.04")}

        assert long_mx.eval(mx, prices) == Decimal("10")

    def test_price_is_not_inverted_by_default(self, long_mx, mx, usd_mx):
        with pytest.raises(MissingPrice) as exc_info:
            long_mx.eval(mx, {"MX-USD": Decimal("25")})

        assert exc_info.value.instrument == usd_mx

    def test_held_reciprocal_position(self, usd, mx_usd):
        expr = Positions([mx_usd.reciprocal().position(Decimal("0.05"), Decimal("100"))]).as_expr()

        with pytest.raises(MissingPrice) as exc_info:
            expr.eval(usd, {"USD-MX": Decimal("0.04")})
        assert exc_info.value.instrument == mx_usd

        # 100 * 0.04 - 5 = -1 MX, at 25 USD each
        assert expr.eval(usd, {"USD-MX": Decimal("0.04"), "MX-USD": Decimal("25")}) == Decimal("-25")

    def test_lookups_match_dependencies(self, long_mx, mx):
        recording = RecordingPrices({"MX-USD": Decimal("25"), "USD-MX": Decimal("0.04")})

        long_mx.eval(mx, recording)

        assert set(recording.requested) == {i.as_symbol() for i in long_mx.instruments(mx)}

    def test_allow_inverse_divides_by_held_price(self, long_mx, mx, mx_usd):
        assert long_mx.path(mx_usd.quote, mx, allow_inverse=True) == [Hop(mx_usd, True)]
        assert long_mx.instruments(mx, allow_inverse=True) == [mx_usd]
        assert long_mx.eval(mx, {"MX-USD": Decimal("25")}, allow_inverse=True) == Decimal("10")

    def test_zero_price_on_inverse_edge(self, long_mx, mx):
        with pytest.raises(DivisionByZero):
            long_mx.eval(mx, {"MX-USD": Decimal("0")}, allow_inverse=True)
