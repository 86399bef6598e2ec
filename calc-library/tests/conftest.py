"""Shared fixtures: a flat USD/EUR market, rules that bind it, and simple trades."""

from datetime import date

import pytest

from calcengine import (
    CalculationRules,
    CalculationRunner,
    CurrencyPair,
    CurveGroupRule,
    FxRateRule,
    MarketDataRules,
    MarketSnapshot,
    Trade,
    ZeroRateCurve,
)
from calcengine.marketdata import CurveId, DiscountCurveKey, ForwardCurveKey, FxRateId, FxRateKey, MarketDataView
from calcengine.products import TermDeposit

VALUATION_DATE = date(2024, 1, 2)
GROUP = "Default"


@pytest.fixture
def usd_curve() -> ZeroRateCurve:
    return ZeroRateCurve(name="USD-DISC", pillars=[0.5, 1.0, 2.0, 5.0], zero_rates_cc=[0.04] * 4)


@pytest.fixture
def eur_curve() -> ZeroRateCurve:
    return ZeroRateCurve(name="EUR-DISC", pillars=[0.5, 1.0, 2.0, 5.0], zero_rates_cc=[0.03] * 4)


@pytest.fixture
def snapshot(usd_curve, eur_curve) -> MarketSnapshot:
    return MarketSnapshot(
        VALUATION_DATE,
        {
            CurveId(GROUP, "USD-DISC"): usd_curve,
            CurveId(GROUP, "EUR-DISC"): eur_curve,
            FxRateId(CurrencyPair("EUR", "USD")): 1.1,
        },
    )


@pytest.fixture
def market_data_rules() -> MarketDataRules:
    return MarketDataRules.of(
        CurveGroupRule(
            GROUP,
            discount_curves={"USD": "USD-DISC", "EUR": "EUR-DISC"},
            forward_curves={"USD-SOFR": "USD-DISC"},
        ),
        FxRateRule(),
    )


@pytest.fixture
def calc_rules(market_data_rules) -> CalculationRules:
    return CalculationRules.of(market_data_rules)


@pytest.fixture
def view(usd_curve, eur_curve) -> MarketDataView:
    """Single-scenario market data as a calculation function sees it."""
    return MarketDataView(
        VALUATION_DATE,
        {
            DiscountCurveKey("USD"): usd_curve,
            DiscountCurveKey("EUR"): eur_curve,
            ForwardCurveKey("USD-SOFR"): usd_curve,
            FxRateKey(CurrencyPair("EUR", "USD")): 1.1,
        },
    )


@pytest.fixture
def usd_deposit() -> Trade:
    """1Y USD deposit at 5%, starting today."""
    return Trade.of("TD-USD", TermDeposit(currency="USD", notional=1_000_000, rate=0.05, start=0.0, end=1.0))


@pytest.fixture
def eur_deposit() -> Trade:
    return Trade.of("TD-EUR", TermDeposit(currency="EUR", notional=1_000_000, rate=0.05, start=0.0, end=1.0))


@pytest.fixture
def runner():
    with CalculationRunner.of_single_threaded() as r:
        yield r
