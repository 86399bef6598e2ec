"""Tests for bump-and-reprice sensitivities."""

import math
from datetime import date

import pytest

from calcengine import CurrencyPair, ZeroRateCurve
from calcengine.functions.sensitivity import bucketed_pv01, curve_keys, parallel_pv01, shift_size
from calcengine.marketdata import (
    CreditCurveKey,
    DiscountCurveKey,
    ForwardCurveKey,
    FxRateKey,
    IndexFixingsKey,
    MarketDataView,
)

CURVE = ZeroRateCurve(name="USD-DISC", pillars=[1.0, 2.0], zero_rates_cc=[0.04, 0.04])


def _zcb_pv(market: MarketDataView) -> float:
    """Two zero coupon flows: 100 at 1Y and 100 at 2Y."""
    curve = market.curve(DiscountCurveKey("USD"))
    return 100.0 * curve.df(1.0) + 100.0 * curve.df(2.0)


@pytest.fixture
def market() -> MarketDataView:
    return MarketDataView(date(2024, 1, 2), {DiscountCurveKey("USD"): CURVE})


def test_shift_size() -> None:
    assert shift_size({}) == pytest.approx(1e-4)
    assert shift_size({"shift_bp": 10}) == pytest.approx(1e-3)
    with pytest.raises(ValueError, match="shift_bp must be non-zero"):
        shift_size({"shift_bp": 0})


def test_curve_keys_filters_and_sorts() -> None:
    keys = {
        ForwardCurveKey("USD-SOFR"),
        FxRateKey(CurrencyPair("EUR", "USD")),
        DiscountCurveKey("USD"),
        IndexFixingsKey("USD-SOFR"),
        CreditCurveKey("ACME", "USD"),
    }
    assert curve_keys(keys) == [
        CreditCurveKey("ACME", "USD"),
        DiscountCurveKey("USD"),
        ForwardCurveKey("USD-SOFR"),
    ]


def test_parallel_pv01(market) -> None:
    pv01 = parallel_pv01(_zcb_pv, market, {DiscountCurveKey("USD")}, 1e-4)
    expected = 100.0 * (math.exp(-0.0401) - math.exp(-0.04)) + 100.0 * (math.exp(-0.0802) - math.exp(-0.08))
    assert pv01 == pytest.approx(expected, abs=1e-10)


def test_bucketed_pv01_per_pillar(market) -> None:
    sens = bucketed_pv01(_zcb_pv, market, {DiscountCurveKey("USD")}, 1e-4, "USD")
    entry = sens.get("USD-DISC")
    assert entry.currency == "USD"
    assert entry.sensitivities[0] == pytest.approx(100.0 * (math.exp(-0.0401) - math.exp(-0.04)), abs=1e-10)
    assert entry.sensitivities[1] == pytest.approx(100.0 * (math.exp(-0.0802) - math.exp(-0.08)), abs=1e-10)
    assert sens.total("USD").amount == pytest.approx(parallel_pv01(_zcb_pv, market, {DiscountCurveKey("USD")}, 1e-4))


def test_keys_bound_to_one_curve_are_merged() -> None:
    market = MarketDataView(
        date(2024, 1, 2),
        {DiscountCurveKey("USD"): CURVE, ForwardCurveKey("USD-SOFR"): CURVE},
    )

    def pv(m: MarketDataView) -> float:
        return m.curve(DiscountCurveKey("USD")).df(1.0) + m.curve(ForwardCurveKey("USD-SOFR")).df(2.0)

    keys = {DiscountCurveKey("USD"), ForwardCurveKey("USD-SOFR")}
    sens = bucketed_pv01(pv, market, keys, 1e-4, "USD")
    assert sens.curve_names() == ("USD-DISC",)
    entry = sens.get("USD-DISC")
    assert entry.sensitivities[0] == pytest.approx(math.exp(-0.0401) - math.exp(-0.04), abs=1e-12)
    assert entry.sensitivities[1] == pytest.approx(math.exp(-0.0802) - math.exp(-0.08), abs=1e-12)


def test_base_market_is_not_modified(market) -> None:
    parallel_pv01(_zcb_pv, market, {DiscountCurveKey("USD")}, 1e-4)
    assert market.curve(DiscountCurveKey("USD")) is CURVE
