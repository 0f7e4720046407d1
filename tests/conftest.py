"""Shared fixtures: assets, instruments and the MX/USD/CAD portfolio."""

from decimal import Decimal

import pytest

from positions import USD, Asset, Instrument, Positions, Spot


@pytest.fixture
def usd() -> Asset:
    return USD


@pytest.fixture
def mx() -> Asset:
    return Asset.parse("MX")


@pytest.fixture
def cad() -> Asset:
    return Asset.parse("CAD")


@pytest.fixture
def mx_usd(mx: Asset, usd: Asset) -> Spot:
    return Instrument.spot(mx, usd)


@pytest.fixture
def usd_mx(usd: Asset, mx: Asset) -> Spot:
    return Instrument.spot(usd, mx)


@pytest.fixture
def mx_cad(mx: Asset, cad: Asset) -> Spot:
    return Instrument.spot(mx, cad)


@pytest.fixture
def usd_cad(usd: Asset, cad: Asset) -> Spot:
    return Instrument.spot(usd, cad)


@pytest.fixture
def scenario(mx_usd: Spot, usd_mx: Spot, mx_cad: Spot) -> Positions:
    """
    Buy 50 MX for 1000 USD, buy 6 USD at 0.06 MX, buy 10 MX for 3 CAD.
    """
    portfolio = Positions()
    portfolio += mx_usd.position(Decimal("20"), Decimal("50"))
    portfolio += usd_mx.position(Decimal("0.06"), Decimal("6"))
    portfolio += mx_cad.position(Decimal("0.3"), Decimal("10"))
    return portfolio
