"""Unit tests for Asset parsing, equality and ordering."""

import pytest
from pydantic import ValidationError

from positions import CAD, USD, Asset, InvalidAssetCode


class TestParse:
    """Test Asset.parse normalization and validation."""

    def test_parse_normalizes_case_and_whitespace(self):
        assert Asset.parse(" usd ") == USD
        assert Asset.parse("Mx").code == "MX"

    def test_parse_accepts_digits(self):
        assert Asset.parse("1inch").code == "1INCH"

    @pytest.mark.parametrize("text", ["", "   ", "US-D", "U$D", "US D", "ABCDEFGHIJKLMNOPQ"])
    def test_parse_rejects_malformed_codes(self, text):
        with pytest.raises(InvalidAssetCode) as exc_info:
            Asset.parse(text)

        assert exc_info.value.text == text

    def test_parse_rejects_non_string(self):
        with pytest.raises(InvalidAssetCode):
            Asset.parse(42)  # type: ignore[arg-type]

    def test_invalid_asset_code_is_value_error(self):
        with pytest.raises(ValueError):
            Asset.parse("??")

    def test_direct_construction_validates(self):
        assert Asset(code="cad") == CAD

        with pytest.raises(ValidationError):
            Asset(code="C-AD")


class TestValueSemantics:
    """Test equality, hashing, ordering and immutability."""

    def test_equality_by_code(self):
        assert Asset.parse("USD") == Asset.parse("usd")
        assert Asset.parse("USD") != Asset.parse("CAD")

    def test_hashable(self):
        assets = {Asset.parse("USD"), Asset.parse("usd"), Asset.parse("MX")}

        assert len(assets) == 2

    def test_ordering_by_code(self):
        mx = Asset.parse("MX")

        assert sorted([USD, mx, CAD]) == [CAD, mx, USD]
        assert CAD < USD
        assert USD >= mx

    def test_frozen(self):
        with pytest.raises(ValidationError):
            USD.code = "EUR"  # type: ignore[misc]

    def test_str_and_repr(self):
        assert str(USD) == "USD"
        assert repr(USD) == "Asset(USD)"
