"""Tests for Ibor caplets and floorlets under the Black model."""

import math
from datetime import date

import pytest

from calcengine import Trade, VolatilityCurve, ZeroRateCurve
from calcengine.functions.capfloor import CapletPresentValue, CapletPricer, CapletPV01, black_price, norm_cdf
from calcengine.marketdata import DiscountCurveKey, ForwardCurveKey, MarketDataView, VolatilitiesKey
from calcengine.products import IborCapletFloorlet
from calcengine.refdata import ReferenceData

REF_DATA = ReferenceData.empty()
PARAMS = {"shift_bp": 1.0}
CURVE = ZeroRateCurve(name="USD-DISC", pillars=[0.5, 1.0, 2.0, 5.0], zero_rates_cc=[0.04] * 4)
FORWARD = (math.exp(0.02) - 1.0) / 0.5


def _view(vol: float) -> MarketDataView:
    return MarketDataView(
        date(2024, 1, 2),
        {
            DiscountCurveKey("USD"): CURVE,
            ForwardCurveKey("USD-SOFR"): CURVE,
            VolatilitiesKey("USD-SOFR"): VolatilityCurve(
                name="VOL", expiries=[0.5, 1.0], volatilities=[vol, vol]
            ),
        },
    )


def _caplet(strike: float, is_cap: bool = True) -> IborCapletFloorlet:
    return IborCapletFloorlet(
        currency="USD",
        index="USD-SOFR",
        notional=1_000_000,
        strike=strike,
        fixing_time=0.5,
        start=0.5,
        end=1.0,
        is_cap=is_cap,
    )


def test_zero_vol_is_discounted_intrinsic() -> None:
    view = _view(0.0)
    assert CapletPricer.forward_rate(_caplet(0.03), view) == pytest.approx(FORWARD)
    pv = CapletPresentValue().calculate(Trade.of("CAP", _caplet(0.03)), view, REF_DATA, PARAMS)
    expected = 1_000_000 * 0.5 * math.exp(-0.04) * (FORWARD - 0.03)
    assert pv.currency == "USD"
    assert pv.amount == pytest.approx(expected, abs=1e-6)
    out_of_money = CapletPresentValue().calculate(Trade.of("CAP", _caplet(0.05)), view, REF_DATA, PARAMS)
    assert out_of_money.amount == 0.0


@pytest.mark.parametrize("vol", [0.0, 0.2, 0.5])
def test_cap_floor_parity(vol) -> None:
    """Caplet - floorlet = N * accrual * DF(end) * (F - K) at any volatility."""
    view = _view(vol)
    cap = CapletPricer.present_value(_caplet(0.035), view)
    floor = CapletPricer.present_value(_caplet(0.035, is_cap=False), view)
    assert cap - floor == pytest.approx(1_000_000 * 0.5 * math.exp(-0.04) * (FORWARD - 0.035), abs=1e-6)


def test_black_at_the_money() -> None:
    price = black_price(0.04, 0.04, 0.2, 1.0, is_call=True)
    assert price == pytest.approx(0.04 * (2.0 * norm_cdf(0.1) - 1.0), rel=1e-12)
    assert black_price(0.04, 0.04, 0.2, 1.0, is_call=False) == pytest.approx(price, rel=1e-12)


def test_black_edge_cases() -> None:
    assert black_price(0.04, 0.03, 0.2, 0.0, is_call=True) == pytest.approx(0.01)
    with pytest.raises(ValueError, match="forward rate must be > 0"):
        black_price(-0.01, 0.03, 0.2, 1.0, is_call=True)


def test_pv01_and_requirements() -> None:
    trade = Trade.of("CAP", _caplet(0.035))
    pv01 = CapletPV01().calculate(trade, _view(0.2), REF_DATA, PARAMS)
    assert pv01.currency == "USD"
    assert CapletPresentValue().requirements(trade, REF_DATA) == {
        DiscountCurveKey("USD"),
        ForwardCurveKey("USD-SOFR"),
        VolatilitiesKey("USD-SOFR"),
    }


def test_caplet_validation() -> None:
    with pytest.raises(ValueError, match="end must be after start"):
        IborCapletFloorlet("USD", "USD-SOFR", 1.0, 0.03, 0.5, 0.5, 0.5)
    with pytest.raises(ValueError, match="fixing_time"):
        IborCapletFloorlet("USD", "USD-SOFR", 1.0, 0.03, 0.75, 0.5, 1.0)
    with pytest.raises(ValueError, match="strike"):
        IborCapletFloorlet("USD", "USD-SOFR", 1.0, 0.0, 0.5, 0.5, 1.0)
